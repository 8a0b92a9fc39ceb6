import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .models import QuizClient, RankedTemplate, ResultRecord, Session, utcnow
from .scoring import top_traits

logger = logging.getLogger(__name__)

# Column names in the Results table
RESULT_FIELDS = {
    "client": "Client",
    "session_id": "Session ID",
    "submitted_at": "Submitted At",
    "scores": "Scores",
    "answers": "Answers",
    "top_traits": "Top Traits",
    "recommended_template": "Recommended Template",
    "respondent_name": "Respondent Name",
    "respondent_email": "Respondent Email"
}

TOP_TRAITS_LIMIT = 4


def _format_timestamp(moment: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_answers(session: Session) -> str:
    return json.dumps([
        {
            "questionId": answer.question_id,
            "category": answer.category,
            "choice": answer.choice,
            "choiceLabel": answer.choice_label
        }
        for answer in session.answers
    ])


def build_result_record(session: Session, client: Optional[QuizClient],
                        ranked_templates: List[RankedTemplate]) -> ResultRecord:
    """
    Serialize a finished session into a flat record for the result store

    Args:
        session: Session that just reached the results phase
        client: Quiz owner, linked on the record when known
        ranked_templates: Templates sorted best first

    Returns:
        ResultRecord ready for handoff
    """
    submitted_at = session.completed_at or utcnow()
    recommended = ranked_templates[0].name if ranked_templates else ""

    record = ResultRecord(
        session_id=session.session_id,
        submitted_at=_format_timestamp(submitted_at),
        scores=json.dumps(session.score_state),
        answers=serialize_answers(session),
        top_traits=", ".join(top_traits(session.score_state, TOP_TRAITS_LIMIT)),
        recommended_template=recommended,
        respondent_name=session.contact.name,
        respondent_email=session.contact.email,
        client_id=client.id if client else None
    )

    logger.debug(f"Built result record for session {session.session_id}")
    return record


def record_to_fields(record: ResultRecord) -> Dict[str, Any]:
    """Map a record onto the Results table column names"""
    fields: Dict[str, Any] = {
        RESULT_FIELDS["session_id"]: record.session_id,
        RESULT_FIELDS["submitted_at"]: record.submitted_at,
        RESULT_FIELDS["scores"]: record.scores,
        RESULT_FIELDS["answers"]: record.answers,
        RESULT_FIELDS["top_traits"]: record.top_traits,
        RESULT_FIELDS["recommended_template"]: record.recommended_template,
        RESULT_FIELDS["respondent_name"]: record.respondent_name,
        RESULT_FIELDS["respondent_email"]: record.respondent_email
    }
    if record.client_id:
        fields[RESULT_FIELDS["client"]] = [record.client_id]
    return fields
