# core/traits.py

from typing import Any, Dict, List, Mapping

from .models import Weight

# Bipolar style dimensions: canonical trait -> opposite pole
DIMENSIONS: Dict[str, Dict[str, str]] = {
    "minimal": {"opposite": "rich", "label": "Minimal ↔ Rich"},
    "geometric": {"opposite": "organic", "label": "Geometric ↔ Organic"},
    "bold": {"opposite": "refined", "label": "Bold ↔ Refined"},
    "warm": {"opposite": "cool", "label": "Warm ↔ Cool"},
    "playful": {"opposite": "serious", "label": "Playful ↔ Serious"},
}


def dimension_balance(score_state: Mapping[str, Weight]) -> List[Dict[str, Any]]:
    """
    Split each bipolar dimension into left/right percentages for display.

    Traits outside the vocabulary are ignored here; they are still scored
    and matched everywhere else.

    Args:
        score_state: Accumulated raw weights per trait

    Returns:
        One entry per dimension, in vocabulary order
    """
    balance = []
    for trait, dim in DIMENSIONS.items():
        left_score = score_state.get(trait, 0)
        right_score = score_state.get(dim["opposite"], 0)
        total = (left_score + right_score) or 1
        left_percent = left_score / total * 100

        balance.append({
            "trait": trait,
            "opposite": dim["opposite"],
            "label": dim["label"],
            "left_score": left_score,
            "right_score": right_score,
            "left_percent": round(left_percent, 1),
            "dominant": trait if left_percent > 50 else dim["opposite"] if left_percent < 50 else None
        })

    return balance
