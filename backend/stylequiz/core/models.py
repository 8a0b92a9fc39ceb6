import random
import string
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

Choice = Literal["A", "B"]

# Integer weights stay integers so stored scores read the way they were authored
Weight = Union[int, float]


class Level(str, Enum):
    """Categorical strength of a trait relative to the strongest trait"""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SessionPhase(str, Enum):
    """Phases a respondent moves through"""
    INTRO = "intro"
    QUIZ = "quiz"
    CONTACT = "contact"
    RESULTS = "results"
    ERROR = "error"


def generate_session_id() -> str:
    """Millisecond timestamp plus a random base36 suffix"""
    alphabet = string.digits + string.ascii_lowercase
    suffix = "".join(random.choice(alphabet) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Option(BaseModel):
    """One side of a binary question"""
    image: Optional[str] = Field(None, description="Attachment URL")
    label: str = ""
    traits: Dict[str, Weight] = Field(default_factory=dict, description="Weight added per trait if chosen")


class Question(BaseModel):
    id: str
    order: int
    category: str = ""
    option_a: Option
    option_b: Option

    def option(self, choice: Choice) -> Option:
        return self.option_a if choice == "A" else self.option_b


class Template(BaseModel):
    """Candidate design template with the respondent profile it suits"""
    id: str
    name: str
    description: str = ""
    preview_image: Optional[str] = None
    framer_url: Optional[str] = None
    match_profile: Dict[str, Level] = Field(default_factory=dict)
    order: int = 0


class RankedTemplate(Template):
    match_percent: int = Field(..., ge=0, le=100)


class Answer(BaseModel):
    question_id: str
    category: str
    choice: Choice
    choice_label: str

    class Config:
        frozen = True


class ContactInfo(BaseModel):
    """Optional respondent details, accepted as given"""
    name: str = ""
    email: str = ""


class QuizClient(BaseModel):
    id: str
    name: str = ""
    slug: str
    logo: Optional[str] = None
    intro_title: str = "Find Your Brand Style"
    intro_subtitle: str = "Answer a few questions to discover your visual direction"


class QuizContent(BaseModel):
    """Everything one quiz needs, already filtered to active and sorted by order"""
    client: QuizClient
    questions: List[Question]
    templates: List[Template] = Field(default_factory=list)


class Session(BaseModel):
    """Respondent session state, replaced wholesale on every transition"""
    session_id: str = Field(default_factory=generate_session_id)
    client_slug: str = ""
    phase: SessionPhase = SessionPhase.INTRO
    current_question_index: int = 0
    score_state: Dict[str, Weight] = Field(default_factory=dict)
    answers: List[Answer] = Field(default_factory=list)
    contact: ContactInfo = Field(default_factory=ContactInfo)
    processing: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    completed_at: Optional[datetime] = None
    error: Optional[str] = None

    def progress(self, total_questions: int) -> Dict[str, Any]:
        """Progress summary for display"""
        answered = len(self.answers)
        percentage = answered / total_questions * 100 if total_questions else 0.0
        return {
            "questions_answered": answered,
            "total_questions": total_questions,
            "progress_percentage": round(percentage, 1),
            "current_phase": self.phase.value
        }


class ResultRecord(BaseModel):
    """Flat result record handed to the external store"""
    session_id: str
    submitted_at: str
    scores: str
    answers: str
    top_traits: str
    recommended_template: str = ""
    respondent_name: str = ""
    respondent_email: str = ""
    client_id: Optional[str] = None
