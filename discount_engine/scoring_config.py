"""Centralized scoring configuration for the discount engine.

All default weights, caps, tier thresholds and justification texts live here
so that the config loader, the score calculator and the allocation engine
share a single source of truth.
"""
from __future__ import annotations

from typing import Dict, List, Tuple

# Relative weights of the composite agent score (need not sum to 1.0)
DEFAULT_WEIGHTS: Dict[str, float] = {
    "performance_score": 0.40,
    "seniority_months": 0.20,
    "target_achieved_percent": 0.30,
    "active_clients": 0.10,
}

# Values above the cap are clamped before normalization to 0-100
DEFAULT_NORMALIZATION_CAPS: Dict[str, float] = {
    "seniority_months": 24.0,
    "active_clients": 20.0,
}

# Absolute per-agent bounds (currency units)
DEFAULT_MIN_DISCOUNT: float = 500.0
DEFAULT_MAX_DISCOUNT: float = 5000.0

# Differences at or below one cent are not worth redistributing
REDISTRIBUTION_TOLERANCE: float = 0.01

RESIDUAL_POLICIES: Tuple[str, ...] = ("first", "proportional")
DEFAULT_RESIDUAL_POLICY: str = "first"

# Tier thresholds as multiples of the batch average, checked in order
TOP_TIER_RATIO: float = 1.10
ABOVE_AVERAGE_RATIO: float = 0.90
BELOW_AVERAGE_RATIO: float = 0.70

JUSTIFICATION_TEXTS: Dict[str, str] = {
    "top": "Consistently high performance and long-term contribution, excelling in all key metrics.",
    "above_average": "Above average performance with consistent contribution across key metrics.",
    "below_average": "Performance below the group average, with a focus on improving key metrics.",
    "moderate": "Moderate performance with potential for growth.",
    "no_kitty": "No kitty available for allocation.",
    "equal_split": "All agents have identical performance scores, resulting in an equal distribution.",
}

# Agent attributes: (snake_case name, camelCase wire name)
AGENT_FIELDS: List[Tuple[str, str]] = [
    ("performance_score", "performanceScore"),
    ("seniority_months", "seniorityMonths"),
    ("target_achieved_percent", "targetAchievedPercent"),
    ("active_clients", "activeClients"),
]
