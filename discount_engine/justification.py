"""Human-readable justification tiers for allocated discounts."""
from __future__ import annotations

from discount_engine.scoring_config import (
    ABOVE_AVERAGE_RATIO,
    BELOW_AVERAGE_RATIO,
    JUSTIFICATION_TEXTS,
    TOP_TIER_RATIO,
)


def generate_justification(score: float, average_score: float) -> str:
    """
    Pick the tier text for ``score`` relative to the batch average.

    Checks run top-down and the first match wins:
    - score > 110% of average: top tier
    - score > 90% of average: above average
    - score < 70% of average: below average
    - anything else: moderate
    """
    if score > average_score * TOP_TIER_RATIO:
        return JUSTIFICATION_TEXTS["top"]
    if score > average_score * ABOVE_AVERAGE_RATIO:
        return JUSTIFICATION_TEXTS["above_average"]
    if score < average_score * BELOW_AVERAGE_RATIO:
        return JUSTIFICATION_TEXTS["below_average"]
    return JUSTIFICATION_TEXTS["moderate"]
