"""Session endpoints: the single-user presentation layer over the workflow."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Request
from pydantic.alias_generators import to_camel

from ..core.session import CreativeSession
from ..models.enums import Phase
from ..models.schemas import (
    CamelModel,
    ImageGenerationResult,
    PhaseView,
    PromptVariableEntry,
    QuestionGenerationResult,
    TrophyStats,
)


router = APIRouter()


# ============================================================================
# REQUEST / RESPONSE MODELS
# ============================================================================

class SessionResponse(CamelModel):
    """Current phase and the inputs it renders with."""
    phase: Phase
    redirected: bool = False
    inputs: Dict[str, Any] = {}


class HandshakeRequest(CamelModel):
    image: str
    intent_statement: str
    mime_type: Optional[str] = None


class QuestionResponse(CamelModel):
    phase: Phase
    question: Optional[QuestionGenerationResult] = None


class AnswerRequest(CamelModel):
    answer: str


class AnswerResponse(CamelModel):
    phase: Phase
    entry: PromptVariableEntry


class RefineRequest(CamelModel):
    instruction: str


class RefineResponse(CamelModel):
    result: ImageGenerationResult
    edit_count: int


def get_session(request: Request) -> CreativeSession:
    return request.app.state.session


def _session_response(session: CreativeSession, view: Optional[PhaseView]) -> SessionResponse:
    if view is None:
        return SessionResponse(phase=session.orchestrator.current_phase, redirected=True)
    inputs = {to_camel(field): value for field, value in view.inputs.items()}
    return SessionResponse(phase=view.phase, inputs=inputs)


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.get("", response_model=SessionResponse)
async def current_view(request: Request):
    """Render the current phase, redirecting to handshake if its data is missing."""
    session = get_session(request)
    return _session_response(session, session.view())


@router.post("/handshake", response_model=SessionResponse)
async def handshake(body: HandshakeRequest, request: Request):
    session = get_session(request)
    view = await session.handshake(body.image, body.intent_statement, body.mime_type)
    return _session_response(session, view)


@router.get("/question", response_model=QuestionResponse)
async def next_question(request: Request):
    session = get_session(request)
    question = await session.next_question()
    return QuestionResponse(phase=session.orchestrator.current_phase, question=question)


@router.post("/answer", response_model=AnswerResponse)
async def answer(body: AnswerRequest, request: Request):
    session = get_session(request)
    entry = session.answer(body.answer)
    return AnswerResponse(phase=session.orchestrator.current_phase, entry=entry)


@router.post("/generate", response_model=ImageGenerationResult)
async def generate(request: Request):
    """Generate the enhanced image. Can be called again to retry."""
    return await get_session(request).generate()


@router.post("/generation/accept", response_model=SessionResponse)
async def accept_generation(request: Request):
    session = get_session(request)
    return _session_response(session, session.accept_generation())


@router.post("/refine", response_model=RefineResponse)
async def refine(body: RefineRequest, request: Request):
    session = get_session(request)
    result = await session.refine(body.instruction)
    return RefineResponse(result=result, edit_count=session.refinement.edit_count)


@router.post("/refinement/accept", response_model=SessionResponse)
async def accept_refinement(request: Request):
    session = get_session(request)
    return _session_response(session, session.accept_refinement())


@router.get("/trophy", response_model=TrophyStats)
async def trophy(request: Request):
    return get_session(request).trophy()


@router.post("/trophy/complete", response_model=SessionResponse)
async def create_another(request: Request):
    """Finish the trophy phase and start a fresh session."""
    session = get_session(request)
    return _session_response(session, session.create_another())


@router.post("/back", response_model=SessionResponse)
async def back(request: Request):
    session = get_session(request)
    return _session_response(session, session.back())
