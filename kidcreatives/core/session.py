"""Working state for the interactive phases of one creative session.

The orchestrator only knows what each phase emits. These classes do the
work inside a phase (asking questions, generating, applying edits) and
report completion back to the orchestrator.
"""

from typing import List, Optional

from ..models.enums import Phase, PromptVariable
from ..models.schemas import (
    HandshakeOutput,
    ImageGenerationResult,
    PhaseView,
    PromptState,
    PromptVariableEntry,
    QuestionGenerationResult,
    RefinementOutput,
    TrophyStats,
)
from ..utils.logger import get_logger
from ..utils.errors import InvalidInputError, PhaseTransitionError
from ..utils.images import guess_mime_type, prepare_upload
from .image_generator import ImageGenerator
from .orchestrator import PhaseOrchestrator
from .question_generator import QuestionGenerator
from .trophy import build_trophy_stats
from .variable_selector import get_color_category, select_variables
from .vision_analyzer import VisionAnalyzer

logger = get_logger(__name__)


class PromptBuilderSession:
    """Asks one question per selected variable and records the answers."""

    def __init__(
        self,
        question_generator: QuestionGenerator,
        intent_statement: str,
        vision_analysis: str,
        question_count: int = 4,
    ):
        self.question_generator = question_generator
        self.intent_statement = intent_statement
        self.vision_analysis = vision_analysis
        self.variables: List[PromptVariable] = select_variables(question_count)
        self.prompt_state = PromptState(intent_statement=intent_statement)
        self.current_index = 0
        self.current_question: Optional[QuestionGenerationResult] = None

    @property
    def total_questions(self) -> int:
        return len(self.variables)

    @property
    def is_complete(self) -> bool:
        return self.current_index >= self.total_questions

    @property
    def current_variable(self) -> Optional[PromptVariable]:
        if self.is_complete:
            return None
        return self.variables[self.current_index]

    async def next_question(self) -> Optional[QuestionGenerationResult]:
        """Question for the current variable; asked once and then reused. None when complete."""
        variable = self.current_variable
        if variable is None:
            return None

        if self.current_question is None or self.current_question.variable != variable.value:
            self.current_question = await self.question_generator.generate_question(
                self.intent_statement,
                self.vision_analysis,
                variable,
                get_color_category(variable),
            )
        return self.current_question

    def answer(self, answer: str) -> PromptVariableEntry:
        """
        Record the answer for the current variable and move to the next one.

        Raises:
            InvalidInputError: If every variable is answered or the answer is blank
        """
        variable = self.current_variable
        if variable is None:
            raise InvalidInputError("All questions have already been answered")
        if not answer or not answer.strip():
            raise InvalidInputError("Answer must not be blank")

        entry = PromptVariableEntry(
            variable=variable.value,
            answer=answer.strip(),
            color_category=get_color_category(variable).value,
        )
        self.prompt_state = self.prompt_state.with_entry(entry)
        self.current_index += 1
        self.current_question = None

        logger.info(
            f"Answer recorded ({self.current_index}/{self.total_questions})",
            extra={"variable": entry.variable, "color_category": entry.color_category}
        )
        return entry

    def to_json(self) -> str:
        return self.prompt_state.to_json()


class RefinementSession:
    """Applies edit instructions to the generated image, one at a time."""

    def __init__(
        self,
        image_generator: ImageGenerator,
        current_image: str,
        mime_type: str,
        edit_count: int = 0,
    ):
        self.image_generator = image_generator
        self.current_image = current_image
        self.mime_type = mime_type
        self.edit_count = edit_count
        self.history: List[ImageGenerationResult] = []

    async def apply_edit(self, instruction: str) -> ImageGenerationResult:
        """
        Apply one edit to the current image.

        The edit count only grows when generation succeeds.

        Raises:
            InvalidInputError: If the instruction is blank
            GenerationError: If generation fails
        """
        if not instruction or not instruction.strip():
            raise InvalidInputError("Edit instruction must not be blank")

        result = await self.image_generator.generate_image(
            instruction, self.current_image, self.mime_type
        )

        self.current_image = result.image_bytes
        self.mime_type = result.mime_type
        self.edit_count += 1
        self.history.append(result)
        return result

    def output(self) -> RefinementOutput:
        return RefinementOutput(refined_image=self.current_image, edit_count=self.edit_count)


class CreativeSession:
    """
    One child's pass through the workflow.

    Wraps the orchestrator with the per-phase working state used by the
    HTTP layer. Every action first checks that its phase is current and
    renderable; failed requests leave session state untouched.
    """

    def __init__(
        self,
        orchestrator: PhaseOrchestrator,
        question_generator: QuestionGenerator,
        image_generator: ImageGenerator,
        vision_analyzer: VisionAnalyzer,
        question_count: int = 4,
        default_mime_type: str = "image/jpeg",
    ):
        self.orchestrator = orchestrator
        self.question_generator = question_generator
        self.image_generator = image_generator
        self.vision_analyzer = vision_analyzer
        self.question_count = question_count
        self.default_mime_type = default_mime_type

        self.prompt_builder: Optional[PromptBuilderSession] = None
        self.pending_generation: Optional[ImageGenerationResult] = None
        self.refinement: Optional[RefinementSession] = None

    def view(self) -> Optional[PhaseView]:
        view = self.orchestrator.render()
        self._sync_runtime()
        return view

    async def handshake(
        self,
        image_data: str,
        intent_statement: str,
        mime_type: Optional[str] = None,
    ) -> PhaseView:
        """Analyze the uploaded drawing and move on to the prompt builder."""
        self._enter(Phase.HANDSHAKE)
        if not intent_statement or not intent_statement.strip():
            raise InvalidInputError("Tell us what your drawing shows")

        image_b64, resolved_mime = prepare_upload(image_data, mime_type, self.default_mime_type)
        analysis = await self.vision_analyzer.analyze(image_b64, resolved_mime, intent_statement)

        self.orchestrator.complete_handshake(
            HandshakeOutput(
                image=image_b64,
                mime_type=resolved_mime,
                intent_statement=intent_statement.strip(),
                vision_analysis=analysis,
            )
        )
        return self._view_after_transition()

    async def next_question(self) -> Optional[QuestionGenerationResult]:
        """Current question, or None once nothing is left to ask (the phase then completes)."""
        builder = self._builder()
        question = await builder.next_question()
        if question is None:
            self.orchestrator.complete_prompt_builder(builder.to_json())
            self._sync_runtime()
        return question

    def answer(self, answer: str) -> PromptVariableEntry:
        """Record an answer; completes the phase after the last one."""
        builder = self._builder()
        entry = builder.answer(answer)
        if builder.is_complete:
            self.orchestrator.complete_prompt_builder(builder.to_json())
            self._sync_runtime()
        return entry

    async def generate(self) -> ImageGenerationResult:
        """Generate (or regenerate) the enhanced image for the current prompt state."""
        self._enter(Phase.GENERATION)
        state = self.orchestrator.state
        result = await self.image_generator.generate_from_prompt_state(
            state.prompt_state_json,
            state.intent_statement,
            state.original_image,
            state.image_mime_type,
        )
        self.pending_generation = result
        return result

    def accept_generation(self) -> PhaseView:
        self._enter(Phase.GENERATION)
        if self.pending_generation is None:
            raise InvalidInputError("No generated image to accept yet")
        self.orchestrator.complete_generation(self.pending_generation.image_bytes)
        return self._view_after_transition()

    async def refine(self, instruction: str) -> ImageGenerationResult:
        return await self._refinement().apply_edit(instruction)

    def accept_refinement(self) -> PhaseView:
        output = self._refinement().output()
        self.orchestrator.complete_refinement(output)
        return self._view_after_transition()

    def trophy(self) -> TrophyStats:
        self._enter(Phase.TROPHY)
        return build_trophy_stats(self.orchestrator.state)

    def create_another(self) -> PhaseView:
        self._enter(Phase.TROPHY)
        self.orchestrator.complete_trophy()
        return self._view_after_transition()

    def back(self) -> Optional[PhaseView]:
        self.orchestrator.back()
        return self.view()

    def _enter(self, phase: Phase) -> PhaseView:
        view = self.view()
        if view is None or view.phase != phase:
            raise PhaseTransitionError(phase.value, self.orchestrator.current_phase.value)
        return view

    def _view_after_transition(self) -> PhaseView:
        # A redirect to Handshake renders nothing on its first cycle
        return self.view() or self.view()

    def _builder(self) -> PromptBuilderSession:
        self._enter(Phase.PROMPT_BUILDER)
        if self.prompt_builder is None:
            state = self.orchestrator.state
            self.prompt_builder = PromptBuilderSession(
                self.question_generator,
                state.intent_statement,
                state.vision_analysis,
                self.question_count,
            )
        return self.prompt_builder

    def _refinement(self) -> RefinementSession:
        self._enter(Phase.REFINEMENT)
        if self.refinement is None:
            # Coming back from Trophy resumes from the accepted edits
            state = self.orchestrator.state
            current = state.refined_image or state.generated_image
            self.refinement = RefinementSession(
                self.image_generator,
                current,
                guess_mime_type(current, self.image_generator.default_output_mime_type),
                edit_count=state.edit_count if state.refined_image else 0,
            )
        return self.refinement

    def _sync_runtime(self):
        """Drop working state belonging to phases that are no longer active."""
        phase = self.orchestrator.current_phase
        if phase != Phase.PROMPT_BUILDER:
            self.prompt_builder = None
        if phase != Phase.GENERATION:
            self.pending_generation = None
        if phase != Phase.REFINEMENT:
            self.refinement = None
