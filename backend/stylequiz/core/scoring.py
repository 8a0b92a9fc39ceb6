import logging
from typing import Dict, List, Mapping

from .models import Level, Weight

logger = logging.getLogger(__name__)

# Ratio thresholds against the strongest trait (strict inequalities)
HIGH_RATIO_THRESHOLD = 0.66
MEDIUM_RATIO_THRESHOLD = 0.33


def accumulate(score_state: Mapping[str, Weight], traits: Mapping[str, Weight]) -> Dict[str, Weight]:
    """
    Fold one chosen option's trait weights into the running scores

    Args:
        score_state: Current accumulated weights (left untouched)
        traits: Weights of the chosen option only

    Returns:
        New score mapping; traits seen for the first time are appended
    """
    new_scores = dict(score_state)
    for trait, weight in traits.items():
        new_scores[trait] = new_scores.get(trait, 0) + weight
    return new_scores


def classify_ratio(ratio: float) -> Level:
    if ratio > HIGH_RATIO_THRESHOLD:
        return Level.HIGH
    elif ratio > MEDIUM_RATIO_THRESHOLD:
        return Level.MEDIUM
    else:
        return Level.LOW


def normalize(score_state: Mapping[str, float]) -> Dict[str, Level]:
    """
    Classify every scored trait as low/medium/high

    Each trait is compared with the single largest score of the session,
    not with its own opposite pole. The maximum is floored at 1 so an
    all-zero (or all-negative) state classifies everything as low.
    """
    max_score = max([1, *score_state.values()])
    return {
        trait: classify_ratio(score / max_score)
        for trait, score in score_state.items()
    }


def top_traits(score_state: Mapping[str, float], limit: int = 4) -> List[str]:
    """Trait names by descending raw score; ties keep insertion order"""
    ranked = sorted(score_state.items(), key=lambda x: x[1], reverse=True)
    return [trait for trait, _ in ranked[:limit]]
