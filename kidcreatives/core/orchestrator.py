"""Phase orchestrator: the state machine behind the five-stage workflow."""

from typing import Dict, Optional, Tuple

from ..models.enums import Phase
from ..models.schemas import HandshakeOutput, PhaseView, RefinementOutput, SessionState
from ..utils.logger import get_logger
from ..utils.errors import PhaseTransitionError

logger = get_logger(__name__)

# Fields that must be present before a phase may render
REQUIRED_FIELDS: Dict[Phase, Tuple[str, ...]] = {
    Phase.HANDSHAKE: (),
    Phase.PROMPT_BUILDER: ("original_image", "vision_analysis"),
    Phase.GENERATION: ("original_image", "prompt_state_json"),
    Phase.REFINEMENT: ("original_image", "generated_image"),
    Phase.TROPHY: ("original_image", "refined_image"),
}

# Subset of the session handed to each phase component
PHASE_INPUTS: Dict[Phase, Tuple[str, ...]] = {
    Phase.HANDSHAKE: (),
    Phase.PROMPT_BUILDER: ("original_image", "intent_statement", "vision_analysis"),
    Phase.GENERATION: ("original_image", "image_mime_type", "intent_statement", "prompt_state_json"),
    Phase.REFINEMENT: ("original_image", "image_mime_type", "generated_image"),
    Phase.TROPHY: (
        "original_image", "refined_image", "intent_statement",
        "prompt_state_json", "edit_count",
    ),
}

PREVIOUS_PHASE: Dict[Phase, Phase] = {
    Phase.HANDSHAKE: Phase.HANDSHAKE,
    Phase.PROMPT_BUILDER: Phase.HANDSHAKE,
    Phase.GENERATION: Phase.PROMPT_BUILDER,
    Phase.REFINEMENT: Phase.GENERATION,
    Phase.TROPHY: Phase.REFINEMENT,
}


def _present(value) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def can_enter(phase: Phase, state: SessionState) -> bool:
    """True when every field ``phase`` requires is present in ``state``."""
    return all(_present(getattr(state, field)) for field in REQUIRED_FIELDS[phase])


class PhaseOrchestrator:
    """
    Owns session state and drives phase transitions.

    Forward ``complete_*`` events merge a phase's output and advance;
    ``back`` steps to the previous phase keeping collected data.
    Completing the trophy phase is the only full reset.
    """

    def __init__(self, state: Optional[SessionState] = None):
        self._state = state or SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def current_phase(self) -> Phase:
        return self._state.current_phase

    def render(self) -> Optional[PhaseView]:
        """
        Check the current phase's prerequisites and describe what to render.

        Returns:
            PhaseView for the current phase, or None when prerequisites are
            missing. In that case the session has been sent back to Handshake
            and nothing should be rendered this cycle.
        """
        phase = self.current_phase

        if not can_enter(phase, self._state):
            missing = [f for f in REQUIRED_FIELDS[phase] if not _present(getattr(self._state, f))]
            logger.warning(
                f"Missing data for {phase.value}, redirecting to handshake",
                extra={"phase": phase.value, "missing": missing}
            )
            self._state = self._state.model_copy(update={"current_phase": Phase.HANDSHAKE})
            return None

        inputs = {field: getattr(self._state, field) for field in PHASE_INPUTS[phase]}
        return PhaseView(phase=phase, inputs=inputs)

    def navigate_to(self, phase: Phase):
        """Jump to ``phase`` without checks; the next render enforces prerequisites."""
        logger.info("Direct navigation", extra={"from": self.current_phase.value, "to": phase.value})
        self._state = self._state.model_copy(update={"current_phase": phase})

    def complete_handshake(self, output: HandshakeOutput):
        self._require_phase(Phase.HANDSHAKE)
        self._advance(
            Phase.PROMPT_BUILDER,
            original_image=output.image,
            image_mime_type=output.mime_type,
            intent_statement=output.intent_statement,
            vision_analysis=output.vision_analysis,
        )

    def complete_prompt_builder(self, prompt_state_json: str):
        self._require_phase(Phase.PROMPT_BUILDER)
        self._advance(Phase.GENERATION, prompt_state_json=prompt_state_json)

    def complete_generation(self, generated_image: str):
        """Accept a generated image. Edits made to an earlier one no longer apply."""
        self._require_phase(Phase.GENERATION)
        self._advance(
            Phase.REFINEMENT,
            generated_image=generated_image,
            refined_image=None,
            edit_count=0,
        )

    def complete_refinement(self, output: RefinementOutput):
        self._require_phase(Phase.REFINEMENT)
        self._advance(
            Phase.TROPHY,
            refined_image=output.refined_image,
            edit_count=output.edit_count,
        )

    def complete_trophy(self):
        """Create another: discard everything and start over."""
        self._require_phase(Phase.TROPHY)
        self.reset()

    def back(self):
        """Return to the previous phase without discarding data."""
        previous = PREVIOUS_PHASE[self.current_phase]
        if previous == self.current_phase:
            return
        logger.info(
            f"Back: {self.current_phase.value} -> {previous.value}",
            extra={"from": self.current_phase.value, "to": previous.value}
        )
        self._state = self._state.model_copy(update={"current_phase": previous})

    def reset(self):
        self._state = SessionState()
        logger.info("Session reset", extra={"phase": Phase.HANDSHAKE.value})

    def _require_phase(self, phase: Phase):
        if self.current_phase != phase:
            raise PhaseTransitionError(phase.value, self.current_phase.value)

    def _advance(self, next_phase: Phase, **updates):
        previous = self.current_phase
        self._state = self._state.model_copy(update={**updates, "current_phase": next_phase})
        logger.info(
            f"Phase complete: {previous.value} -> {next_phase.value}",
            extra={"from": previous.value, "to": next_phase.value, "fields": sorted(updates)}
        )
