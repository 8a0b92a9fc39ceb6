import logging
from typing import TYPE_CHECKING, Dict, List, Literal, Optional, Union

from pydantic import BaseModel

from .errors import ContentUnavailable, InvalidTransition, PersistenceFailure, SessionNotFound
from .matcher import match_templates
from .models import (
    Answer, Choice, ContactInfo, Level, QuizContent, RankedTemplate,
    ResultRecord, Session, SessionPhase, utcnow
)
from .records import build_result_record
from .scoring import accumulate, normalize, top_traits

if TYPE_CHECKING:
    from ..store.base import ResultStore

logger = logging.getLogger(__name__)


# Events

class BeginQuiz(BaseModel):
    type: Literal["begin"] = "begin"


class Choose(BaseModel):
    """Answer one question; a choice naming any other question is stale and ignored"""
    type: Literal["choose"] = "choose"
    question_id: str
    choice: Choice


class SubmitContact(BaseModel):
    """Submit contact details; skipping is a submit with nothing filled in"""
    type: Literal["submit_contact"] = "submit_contact"
    name: str = ""
    email: str = ""


class Restart(BaseModel):
    type: Literal["restart"] = "restart"


Event = Union[BeginQuiz, Choose, SubmitContact, Restart]


class SkipContact(SubmitContact):
    """Leave the contact step without details"""


class QuizOutcome(BaseModel):
    """Everything computed once when a session reaches results"""
    profile: Dict[str, Level]
    ranked_templates: List[RankedTemplate]
    top_traits: List[str]
    record: ResultRecord
    persisted: bool = False


def new_session(content: QuizContent, session_id: Optional[str] = None) -> Session:
    """Create the initial session for loaded quiz content"""
    session = Session(client_slug=content.client.slug)
    if session_id:
        session.session_id = session_id

    if not content.questions:
        session.phase = SessionPhase.ERROR
        session.error = "No questions found for this client. Add questions and mark them as Active."
    return session


def transition(session: Session, event: Event, content: QuizContent) -> Session:
    """
    Pure reducer: (Session, Event) -> Session

    The input is never mutated. Ignored events (a duplicate or stale choice)
    return the input session itself; every other accepted event returns a
    new session.

    Raises:
        InvalidTransition: event not accepted in the current phase
    """
    phase = session.phase

    if phase == SessionPhase.ERROR:
        raise InvalidTransition(phase.value, event.type)

    if isinstance(event, BeginQuiz) and phase == SessionPhase.INTRO:
        return session.model_copy(update={"phase": SessionPhase.QUIZ})

    if isinstance(event, Choose) and phase == SessionPhase.QUIZ:
        if session.processing:
            logger.debug(f"Session {session.session_id}: ignoring duplicate choice")
            return session
        current = content.questions[session.current_question_index]
        if event.question_id != current.id:
            logger.debug(
                f"Session {session.session_id}: ignoring choice for {event.question_id}, "
                f"current question is {current.id}"
            )
            return session
        return _apply_choice(session, event.choice, content)

    if isinstance(event, Choose) and phase == SessionPhase.CONTACT:
        # repeat of the final choice arriving after the quiz already finished
        if any(answer.question_id == event.question_id for answer in session.answers):
            logger.debug(f"Session {session.session_id}: ignoring repeated choice for {event.question_id}")
            return session

    if isinstance(event, SubmitContact) and phase == SessionPhase.CONTACT:
        return session.model_copy(update={
            "phase": SessionPhase.RESULTS,
            "contact": ContactInfo(name=event.name, email=event.email),
            "completed_at": utcnow()
        })

    if isinstance(event, Restart) and phase == SessionPhase.RESULTS:
        return Session(
            session_id=session.session_id,
            client_slug=session.client_slug,
            created_at=session.created_at
        )

    raise InvalidTransition(phase.value, event.type)


def _apply_choice(session: Session, choice: Choice, content: QuizContent) -> Session:
    index = session.current_question_index
    question = content.questions[index]
    option = question.option(choice)

    working = session.model_copy(update={"processing": True})

    # 1. score the chosen option only
    score_state = accumulate(working.score_state, option.traits)

    # 2. record the answer
    answers = [*working.answers, Answer(
        question_id=question.id,
        category=question.category,
        choice=choice,
        choice_label=option.label
    )]

    # 3. advance or finish
    update = {"score_state": score_state, "answers": answers, "processing": False}
    if index < len(content.questions) - 1:
        update["current_question_index"] = index + 1
    else:
        update["phase"] = SessionPhase.CONTACT

    return working.model_copy(update=update)


def compute_outcome(session: Session, content: QuizContent, top_k: int = 4) -> QuizOutcome:
    """Normalize, rank templates and build the result record"""
    profile = normalize(session.score_state)
    ranked = match_templates(profile, content.templates)
    record = build_result_record(session, content.client, ranked)
    return QuizOutcome(
        profile=profile,
        ranked_templates=ranked,
        top_traits=top_traits(session.score_state, top_k),
        record=record
    )


class QuizSessionManager:
    """In-memory registry driving sessions through the state machine"""

    def __init__(self, result_store: Optional["ResultStore"] = None):
        self.result_store = result_store
        self.sessions: Dict[str, Session] = {}
        self.contents: Dict[str, QuizContent] = {}
        self.outcomes: Dict[str, QuizOutcome] = {}

    def create_session(self, content: QuizContent, session_id: Optional[str] = None) -> Session:
        """
        Register a new session for loaded content

        Raises:
            ContentUnavailable: content has no questions
        """
        session = new_session(content, session_id)
        if session.phase == SessionPhase.ERROR:
            logger.error(f"Cannot start quiz for '{content.client.slug}': {session.error}")
            raise ContentUnavailable(session.error)

        self.sessions[session.session_id] = session
        self.contents[session.session_id] = content
        logger.info(f"Created session {session.session_id} for client '{content.client.slug}'")
        return session

    def get_session(self, session_id: str) -> Session:
        session = self.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        return session

    def get_content(self, session_id: str) -> QuizContent:
        content = self.contents.get(session_id)
        if content is None:
            raise SessionNotFound(session_id)
        return content

    def get_outcome(self, session_id: str) -> Optional[QuizOutcome]:
        return self.outcomes.get(session_id)

    async def dispatch(self, session_id: str, event: Event) -> Session:
        """
        Apply one event to a stored session

        Entering results computes the outcome once and hands the record to
        the result store; a store failure is logged and never blocks results.
        """
        session = self.get_session(session_id)
        content = self.get_content(session_id)

        if isinstance(event, Choose) and session.processing:
            logger.debug(f"Session {session_id}: choice already in flight, ignoring")
            return session

        self.sessions[session_id] = session.model_copy(update={"processing": True})
        try:
            updated = transition(session, event, content)
        except Exception:
            self.sessions[session_id] = session
            raise
        self.sessions[session_id] = updated

        if updated.phase != session.phase:
            logger.info(f"Session {session_id}: {session.phase.value} -> {updated.phase.value}")

        if session.phase == SessionPhase.CONTACT and updated.phase == SessionPhase.RESULTS:
            outcome = compute_outcome(updated, content)
            self.outcomes[session_id] = outcome
            outcome.persisted = await self._persist(outcome.record)
        elif isinstance(event, Restart):
            self.outcomes.pop(session_id, None)

        return updated

    async def _persist(self, record: ResultRecord) -> bool:
        if self.result_store is None:
            logger.warning(f"No result store configured, result for {record.session_id} not saved")
            return False
        try:
            await self.result_store.save(record)
        except PersistenceFailure as e:
            logger.error(f"Error saving results for session {record.session_id}: {e}")
            return False
        logger.info(f"Saved results for session {record.session_id}")
        return True
