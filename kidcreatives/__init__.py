"""KidCreatives: guided drawing-to-AI-art workflow."""

__version__ = "1.0.0"
