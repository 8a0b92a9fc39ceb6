from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.models import Answer, Choice, Level, Option, QuizClient, RankedTemplate, Weight


# API Request Models

class ChoiceRequest(BaseModel):
    """Pick one side of the current question"""
    question_id: str = Field(..., description="Question being answered; stale ids are ignored")
    choice: Choice = Field(..., description="'A' or 'B'")


class ContactRequest(BaseModel):
    """Optional respondent details; skip ignores anything filled in"""
    name: str = Field("", description="Respondent name, free text")
    email: str = Field("", description="Respondent email, free text")
    skip: bool = Field(False, description="Continue to results without details")


# API Response Models

class QuestionView(BaseModel):
    id: str
    number: int = Field(..., description="1-based position in the quiz")
    category: str
    option_a: Option
    option_b: Option


class SessionView(BaseModel):
    session_id: str
    phase: str
    client: QuizClient
    total_questions: int
    current_question: Optional[QuestionView] = None
    answers: List[Answer] = Field(default_factory=list)
    progress: Dict[str, Any] = Field(default_factory=dict)


class DimensionView(BaseModel):
    trait: str
    opposite: str
    label: str
    left_score: float
    right_score: float
    left_percent: float
    dominant: Optional[str] = None


class ResultsView(BaseModel):
    session_id: str
    scores: Dict[str, Weight]
    profile: Dict[str, Level]
    top_traits: List[str]
    dimensions: List[DimensionView]
    ranked_templates: List[RankedTemplate]
    recommended_template: Optional[RankedTemplate] = None
    saved: bool = Field(..., description="Whether the result store accepted the record")
