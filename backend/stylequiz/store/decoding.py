import json
import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

from pydantic import ValidationError

from ..core.errors import MalformedTraitData
from ..core.models import Level, Option, Question, QuizClient, Template, Weight

logger = logging.getLogger(__name__)

# Column names used in the Clients, Questions and Templates tables
FIELD_NAMES = {
    "clients": {
        "name": "Name",
        "slug": "Slug",
        "logo": "Logo URL",
        "active": "Active",
        "intro_title": "Intro Title",
        "intro_subtitle": "Intro Subtitle"
    },
    "questions": {
        "client": "Client",
        "order": "Order",
        "category": "Question Text",
        "option_a_image": "Option A Image",
        "option_a_label": "Option A Description",
        "option_a_traits": "Option A Traits",
        "option_b_image": "Option B Image",
        "option_b_label": "Option B Description",
        "option_b_traits": "Option B Traits",
        "active": "Active"
    },
    "templates": {
        "client": "Client",
        "name": "Name",
        "description": "Description",
        "preview_image": "Preview Image",
        "framer_url": "Framer URL",
        "match_profile": "Match Profile",
        "order": "Order"
    }
}

LEVEL_VALUES = {level.value for level in Level}


def attachment_url(attachments: Any) -> Optional[str]:
    """First attachment's URL, falling back to its large thumbnail"""
    if not attachments or not isinstance(attachments, list):
        return None
    first = attachments[0]
    if not isinstance(first, dict):
        return None
    return first.get("url") or first.get("thumbnails", {}).get("large", {}).get("url") or None


def _parse_json_object(raw: Any, field: str) -> Dict[str, Any]:
    """
    Decode a JSON object stored as text

    Raises:
        MalformedTraitData: text is not JSON or not an object
    """
    if raw is None or raw == "":
        return {}
    if isinstance(raw, dict):
        parsed = raw
    else:
        try:
            parsed = json.loads(raw)
        except (TypeError, ValueError) as e:
            raise MalformedTraitData(field, raw, f"invalid JSON ({e})")
    if not isinstance(parsed, dict):
        raise MalformedTraitData(field, raw, f"expected an object, got {type(parsed).__name__}")
    return parsed


def decode_trait_weights(raw: Any, field: str = "traits") -> Dict[str, Weight]:
    """Trait weights from a record field; malformed data becomes an empty mapping"""
    try:
        parsed = _parse_json_object(raw, field)
    except MalformedTraitData as e:
        logger.warning(f"{e}; treating as no weights")
        return {}

    weights = {}
    for trait, value in parsed.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.warning(f"Dropping non-numeric weight for '{trait}' in '{field}': {value!r}")
            continue
        weights[trait] = value
    return weights


def decode_match_profile(raw: Any, field: str = "match_profile") -> Dict[str, Level]:
    """Expected trait levels from a record field; malformed data means no checks"""
    try:
        parsed = _parse_json_object(raw, field)
    except MalformedTraitData as e:
        logger.warning(f"{e}; template will not be checked against any trait")
        return {}

    profile = {}
    for trait, level in parsed.items():
        if not isinstance(level, str) or level not in LEVEL_VALUES:
            logger.warning(f"Dropping unknown level for '{trait}' in '{field}': {level!r}")
            continue
        profile[trait] = Level(level)
    return profile


def client_from_record(record: Dict[str, Any]) -> QuizClient:
    f = FIELD_NAMES["clients"]
    fields = record.get("fields", {})
    client = QuizClient(
        id=record["id"],
        name=fields.get(f["name"]) or "",
        slug=fields.get(f["slug"]) or "",
        logo=fields.get(f["logo"])
    )
    # Blank intro texts keep the defaults
    if fields.get(f["intro_title"]):
        client.intro_title = fields[f["intro_title"]]
    if fields.get(f["intro_subtitle"]):
        client.intro_subtitle = fields[f["intro_subtitle"]]
    return client


def question_from_record(record: Dict[str, Any]) -> Question:
    f = FIELD_NAMES["questions"]
    fields = record.get("fields", {})
    record_id = record["id"]

    return Question(
        id=record_id,
        order=fields.get(f["order"]) or 0,
        category=fields.get(f["category"]) or "",
        option_a=Option(
            image=attachment_url(fields.get(f["option_a_image"])),
            label=fields.get(f["option_a_label"]) or "",
            traits=decode_trait_weights(fields.get(f["option_a_traits"]), f"{record_id}.{f['option_a_traits']}")
        ),
        option_b=Option(
            image=attachment_url(fields.get(f["option_b_image"])),
            label=fields.get(f["option_b_label"]) or "",
            traits=decode_trait_weights(fields.get(f["option_b_traits"]), f"{record_id}.{f['option_b_traits']}")
        )
    )


def template_from_record(record: Dict[str, Any]) -> Template:
    f = FIELD_NAMES["templates"]
    fields = record.get("fields", {})
    record_id = record["id"]

    preview = fields.get(f["preview_image"])
    if isinstance(preview, list):
        preview = attachment_url(preview)

    return Template(
        id=record_id,
        name=fields.get(f["name"]) or "",
        description=fields.get(f["description"]) or "",
        preview_image=preview,
        framer_url=fields.get(f["framer_url"]),
        match_profile=decode_match_profile(fields.get(f["match_profile"]), f"{record_id}.{f['match_profile']}"),
        order=fields.get(f["order"]) or 0
    )


T = TypeVar("T")


def _decode_each(records: List[Dict[str, Any]], decode: Callable[[Dict[str, Any]], T], kind: str) -> List[T]:
    """Decode every record, skipping (and logging) the ones whose fields do not fit"""
    decoded = []
    for record in records:
        try:
            decoded.append(decode(record))
        except (ValidationError, KeyError, TypeError) as e:
            logger.warning(f"Skipping malformed {kind} record {record.get('id', '?')}: {e}")
    return decoded


def questions_from_records(records: List[Dict[str, Any]]) -> List[Question]:
    return _decode_each(records, question_from_record, "question")


def templates_from_records(records: List[Dict[str, Any]]) -> List[Template]:
    return _decode_each(records, template_from_record, "template")
