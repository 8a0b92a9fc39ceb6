import logging
import math
from typing import Iterable, List, Mapping, Optional

from .models import Level, RankedTemplate, Template

logger = logging.getLogger(__name__)

EXACT_MATCH_POINTS = 2
ADJACENT_MATCH_POINTS = 1
NEUTRAL_MATCH_PERCENT = 50

ADJACENT_LEVELS = {
    (Level.HIGH, Level.MEDIUM),
    (Level.MEDIUM, Level.HIGH),
    (Level.MEDIUM, Level.LOW),
    (Level.LOW, Level.MEDIUM),
}


def level_points(actual: Level, expected: Level) -> int:
    """2 for the same level, 1 for neighbouring levels, 0 for high vs low"""
    actual, expected = Level(actual), Level(expected)
    if actual == expected:
        return EXACT_MATCH_POINTS
    if (actual, expected) in ADJACENT_LEVELS:
        return ADJACENT_MATCH_POINTS
    return 0


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def score_template(profile: Mapping[str, Level], template: Template) -> int:
    """
    Percentage agreement between a template's expected levels and a profile

    Traits the respondent never scored count as low. A template that
    checks nothing gets a neutral 50.
    """
    checks = len(template.match_profile)
    if checks == 0:
        return NEUTRAL_MATCH_PERCENT

    earned = sum(
        level_points(profile.get(trait, Level.LOW), expected)
        for trait, expected in template.match_profile.items()
    )
    return round_half_up(earned / (checks * EXACT_MATCH_POINTS) * 100)


def match_templates(profile: Mapping[str, Level], templates: Iterable[Template]) -> List[RankedTemplate]:
    """Rank templates by match percent, best first; equal scores keep input order"""
    ranked = [
        RankedTemplate(**template.model_dump(), match_percent=score_template(profile, template))
        for template in templates
    ]
    # sorted() is stable
    ranked = sorted(ranked, key=lambda t: t.match_percent, reverse=True)

    if ranked:
        logger.debug(f"Best template match: {ranked[0].name} ({ranked[0].match_percent}%)")
    return ranked


def best_match(ranked: List[RankedTemplate]) -> Optional[RankedTemplate]:
    return ranked[0] if ranked else None
