"""Trophy card statistics."""

from ..models.schemas import SessionState, TrophyStats
from .prompt_synthesis import extract_subject, parse_prompt_state


def build_trophy_stats(state: SessionState) -> TrophyStats:
    """Summarize a finished session for the trophy card."""
    prompt_state = parse_prompt_state(state.prompt_state_json, state.intent_statement)
    return TrophyStats(
        title=extract_subject(state.intent_statement),
        edit_count=state.edit_count,
        variables_used=len(prompt_state.variables),
    )
