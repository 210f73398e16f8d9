"""Prompt-injection stripping for text forwarded to Gemini."""

import re

DENYLIST = (
    "ignore previous instructions",
    "system:",
    "assistant:",
    "user:",
)

_DENYLIST_PATTERN = re.compile(
    "|".join(re.escape(phrase) for phrase in DENYLIST),
    re.IGNORECASE,
)


def sanitize_prompt(text: str) -> str:
    """Remove denylisted control phrases (any case) and trim whitespace.

    Removal repeats until nothing matches, so a phrase split around another
    phrase ("sys" + "user:" + "tem:") cannot reassemble itself.
    """
    if not text:
        return ""

    previous = None
    while previous != text:
        previous = text
        text = _DENYLIST_PATTERN.sub("", text)

    return text.strip()
