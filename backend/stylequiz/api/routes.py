import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..config import settings
from ..core.models import QuizContent, Session, SessionPhase
from ..core.session_manager import (
    BeginQuiz, Choose, QuizSessionManager, Restart, SkipContact, SubmitContact
)
from ..core.traits import dimension_balance
from ..store.airtable import AirtableClient, AirtableContentLoader, AirtableResultStore
from ..store.base import ContentLoader, InMemoryResultStore
from .schemas import (
    ChoiceRequest, ContactRequest, DimensionView, QuestionView, ResultsView, SessionView
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Global state - initialized on first use
_session_manager: Optional[QuizSessionManager] = None
_content_loader: Optional[ContentLoader] = None


def get_session_manager() -> QuizSessionManager:
    """Dependency to get session manager instance"""
    global _session_manager

    if _session_manager is None:
        if settings.AIRTABLE_API_KEY:
            store = AirtableResultStore(AirtableClient())
        else:
            logger.warning("AIRTABLE_API_KEY not set, results are kept in memory only")
            store = InMemoryResultStore()
        _session_manager = QuizSessionManager(result_store=store)
        logger.info("Quiz session manager initialized")

    return _session_manager


def get_content_loader() -> ContentLoader:
    """Dependency to get quiz content loader"""
    global _content_loader

    if _content_loader is None:
        _content_loader = AirtableContentLoader(AirtableClient())

    return _content_loader


def _session_view(session: Session, content: QuizContent) -> SessionView:
    current_question = None
    if session.phase == SessionPhase.QUIZ:
        question = content.questions[session.current_question_index]
        current_question = QuestionView(
            id=question.id,
            number=session.current_question_index + 1,
            category=question.category,
            option_a=question.option_a,
            option_b=question.option_b
        )

    return SessionView(
        session_id=session.session_id,
        phase=session.phase.value,
        client=content.client,
        total_questions=len(content.questions),
        current_question=current_question,
        answers=session.answers,
        progress=session.progress(len(content.questions))
    )


# HEALTH

@router.get("/health")
async def health_check():
    """Liveness check"""
    return {
        "status": "ok",
        "airtable_configured": bool(settings.AIRTABLE_API_KEY),
        "timestamp": datetime.now().isoformat()
    }


# QUIZ SESSION ENDPOINTS

@router.post("/quiz/{slug}/sessions", response_model=SessionView, status_code=status.HTTP_201_CREATED)
async def start_session(
    slug: str,
    loader: ContentLoader = Depends(get_content_loader),
    manager: QuizSessionManager = Depends(get_session_manager)
):
    """
    Load a client's quiz and open a new session on the intro screen

    ContentUnavailable is turned into a 404 by the application handler.
    """
    content = await loader.load(slug)
    session = manager.create_session(content)
    return _session_view(session, content)


@router.get("/sessions/{session_id}", response_model=SessionView)
async def get_session(session_id: str, manager: QuizSessionManager = Depends(get_session_manager)):
    """Current phase, question and progress"""
    session = manager.get_session(session_id)
    return _session_view(session, manager.get_content(session_id))


@router.post("/sessions/{session_id}/begin", response_model=SessionView)
async def begin_quiz(session_id: str, manager: QuizSessionManager = Depends(get_session_manager)):
    session = await manager.dispatch(session_id, BeginQuiz())
    return _session_view(session, manager.get_content(session_id))


@router.post("/sessions/{session_id}/choice", response_model=SessionView)
async def submit_choice(
    session_id: str,
    request: ChoiceRequest,
    manager: QuizSessionManager = Depends(get_session_manager)
):
    """Answer the current question with option A or B"""
    session = await manager.dispatch(session_id, Choose(question_id=request.question_id, choice=request.choice))
    return _session_view(session, manager.get_content(session_id))


@router.post("/sessions/{session_id}/contact", response_model=SessionView)
async def submit_contact(
    session_id: str,
    request: ContactRequest,
    manager: QuizSessionManager = Depends(get_session_manager)
):
    """Submit or skip contact details; either way the session moves to results"""
    event = SkipContact() if request.skip else SubmitContact(name=request.name, email=request.email)
    session = await manager.dispatch(session_id, event)
    return _session_view(session, manager.get_content(session_id))


@router.get("/sessions/{session_id}/results", response_model=ResultsView)
async def get_results(session_id: str, manager: QuizSessionManager = Depends(get_session_manager)):
    """Profile, top traits and ranked templates for a finished session"""
    session = manager.get_session(session_id)
    outcome = manager.get_outcome(session_id)

    if session.phase != SessionPhase.RESULTS or outcome is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Results are not available while session is in phase '{session.phase.value}'"
        )

    return ResultsView(
        session_id=session.session_id,
        scores=session.score_state,
        profile=outcome.profile,
        top_traits=outcome.top_traits,
        dimensions=[DimensionView(**d) for d in dimension_balance(session.score_state)],
        ranked_templates=outcome.ranked_templates,
        recommended_template=outcome.ranked_templates[0] if outcome.ranked_templates else None,
        saved=outcome.persisted
    )


@router.post("/sessions/{session_id}/restart", response_model=SessionView)
async def restart_session(session_id: str, manager: QuizSessionManager = Depends(get_session_manager)):
    """Clear scores, answers and contact details and go back to the intro"""
    session = await manager.dispatch(session_id, Restart())
    return _session_view(session, manager.get_content(session_id))
