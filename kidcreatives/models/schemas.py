"""Pydantic schemas for workflow state and generation results."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .enums import Phase, ColorCategory

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class PromptVariableEntry(CamelModel):
    """One answered creative variable.

    ``variable`` and ``color_category`` are plain strings so that state
    written by other producers still parses; unknown values are ignored
    during synthesis.
    """
    variable: str
    answer: str = ""
    color_category: str = ColorCategory.VARIABLE.value


class PromptState(CamelModel):
    """Structured answer set built during the prompt builder phase."""
    intent_statement: str = ""
    variables: List[PromptVariableEntry] = Field(default_factory=list)

    def find(self, variable: str) -> Optional[PromptVariableEntry]:
        """First entry for ``variable``, if any."""
        return next((v for v in self.variables if v.variable == variable), None)

    def with_entry(self, entry: PromptVariableEntry) -> "PromptState":
        """Return a new state with ``entry`` added, replacing any entry for the same variable."""
        remaining = [v for v in self.variables if v.variable != entry.variable]
        return self.model_copy(update={"variables": remaining + [entry]})

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class QuestionGenerationResult(CamelModel):
    """A question to show the child for one variable."""
    question: str
    variable: str
    color_category: str


class ImageGenerationResult(CamelModel):
    """Result of a single image generation request."""
    image_bytes: str  # base64
    mime_type: str
    prompt: str


class EnhancementPrompt(CamelModel):
    """Split prompt for image-to-image enhancement."""
    original_intent: str
    style_instructions: str


class SessionState(CamelModel):
    """Everything the workflow has collected for the active session."""
    current_phase: Phase = Phase.HANDSHAKE
    original_image: Optional[str] = None
    image_mime_type: str = DEFAULT_IMAGE_MIME_TYPE
    intent_statement: str = ""
    vision_analysis: Optional[str] = None
    prompt_state_json: Optional[str] = None
    generated_image: Optional[str] = None
    refined_image: Optional[str] = None
    edit_count: int = Field(default=0, ge=0)


class HandshakeOutput(CamelModel):
    """Data emitted when the handshake phase completes."""
    image: str
    mime_type: str = DEFAULT_IMAGE_MIME_TYPE
    intent_statement: str
    vision_analysis: str


class RefinementOutput(CamelModel):
    """Data emitted when the refinement phase completes."""
    refined_image: str
    edit_count: int = Field(default=0, ge=0)


class PhaseView(CamelModel):
    """What the presentation layer needs to render one phase."""
    phase: Phase
    inputs: Dict[str, Any] = Field(default_factory=dict)


class TrophyStats(CamelModel):
    """Summary shown on the trophy card."""
    title: str
    edit_count: int
    variables_used: int
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
