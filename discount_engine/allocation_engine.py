"""
Kitty allocation across sales agents.

Splits a discount budget proportionally to agent scores, clamps every share
to the configured per-agent bounds, hands the clamped surplus/deficit to the
unclamped agents, then rounds to cents so the shares add up to the budget
exactly.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from discount_engine.config import Config, get_config
from discount_engine.justification import generate_justification
from discount_engine.logging_config import get_logger
from discount_engine.models import (
    AgentLike,
    AllocationReport,
    AllocationResult,
    coerce_agent,
)
from discount_engine.scoring_config import JUSTIFICATION_TEXTS, REDISTRIBUTION_TOLERANCE
from discount_engine.scoring_engine import score_agents

logger = get_logger("allocation_engine")

_CENT = Decimal("0.01")


def to_cents(value: float) -> int:
    """Round a currency amount half away from zero and return whole cents.

    Examples:
        >>> to_cents(0.125)
        13
        >>> to_cents(3333.3333333)
        333333
    """
    return int(Decimal(repr(float(value))).quantize(_CENT, rounding=ROUND_HALF_UP) * 100)


def effective_bounds(budget: float, n_agents: int, config: Config) -> Tuple[float, float]:
    """Absolute (lower, upper) bounds for this call.

    A minimum that cannot be paid to every agent (n * min > budget) is
    dropped to 0 for the call.
    """
    lower, upper = config.bounds_for(budget)
    if lower * n_agents > budget:
        logger.warning(
            f"Kitty {budget:.2f} cannot cover minimum {lower:.2f} for {n_agents} agents; ignoring minimum"
        )
        lower = 0.0
    if upper * n_agents < budget:
        logger.warning(
            f"Maximum {upper:.2f} for {n_agents} agents cannot absorb kitty {budget:.2f}; "
            "residual will exceed the maximum"
        )
    return lower, upper


def _proportional_pass(
    scores: np.ndarray, total_score: float, budget: float, lower: float, upper: float
) -> Tuple[np.ndarray, np.ndarray]:
    raw = scores / total_score * budget
    clamped = (raw < lower) | (raw > upper)
    return np.clip(raw, lower, upper), clamped


def _redistribute(values: np.ndarray, scores: np.ndarray, clamped: np.ndarray, budget: float) -> np.ndarray:
    """Spread ``budget - sum(values)`` over unclamped agents by score share."""
    difference = budget - float(values.sum())
    if abs(difference) <= REDISTRIBUTION_TOLERANCE:
        return values
    free = ~clamped
    redistributable = float(scores[free].sum())
    if redistributable == 0:
        # Every agent is clamped; the final correction absorbs it
        logger.debug(f"No unclamped score to carry difference {difference:.2f}")
        return values
    out = values.copy()
    out[free] += scores[free] / redistributable * difference
    return out


def _settle_on_first(cents: List[int], residual: int) -> List[int]:
    """Add the residual to the first agent; a deficit it cannot cover moves on."""
    out = list(cents)
    for i, current in enumerate(out):
        settled = current + residual
        if settled >= 0:
            out[i] = settled
            if i > 0:
                logger.warning(f"Residual deficit spilled past the first {i} agent(s)")
            return out
        out[i] = 0
        residual = settled
    return out


def _spread_residual(cents: List[int], residual: int, weights: Sequence[float]) -> List[int]:
    """Largest-remainder split of the residual, in whole cents.

    Surpluses follow ``weights``; deficits follow the current amounts so no
    agent is pushed below zero.
    """
    basis = np.asarray(weights if residual > 0 else cents, dtype=float)
    total = float(basis.sum())
    if total <= 0:
        return _settle_on_first(cents, residual)

    amount = abs(residual)
    exact = basis / total * amount
    shares = np.floor(exact).astype(int)
    leftover = amount - int(shares.sum())
    remainders = exact - shares
    # Ties go to the earlier agent
    order = sorted(range(len(cents)), key=lambda i: (-remainders[i], i))
    for i in order[:leftover]:
        shares[i] += 1

    sign = 1 if residual > 0 else -1
    return [c + sign * int(s) for c, s in zip(cents, shares)]


def finalize_cents(
    values: Iterable[float], budget: float, weights: Sequence[float], residual_policy: str = "first"
) -> List[int]:
    """Floor at zero, round to cents and settle the rounding residue.

    Args:
        values: Unrounded per-agent amounts, in input order.
        budget: Kitty the amounts must add up to.
        weights: Per-agent weights used by the "proportional" policy.
        residual_policy: "first" (all residue on the first agent) or
            "proportional" (largest-remainder spread).

    Returns:
        Per-agent amounts in integer cents summing to the budget in cents.
    """
    cents = [to_cents(max(0.0, float(v))) for v in values]
    residual = to_cents(budget) - sum(cents)
    if residual == 0:
        return cents
    logger.debug(f"Settling residual of {residual} cent(s) with policy '{residual_policy}'")
    if residual_policy == "proportional":
        return _spread_residual(cents, residual, weights)
    return _settle_on_first(cents, residual)


def calculate_allocation(
    budget: float, agents: Optional[Iterable[AgentLike]], config: Optional[Config] = None
) -> AllocationReport:
    """Allocate the kitty across agents proportionally to score within bounds.

    Pure function: inputs are not mutated and equal inputs give equal output.

    Args:
        budget: Kitty to distribute.
        agents: Agents (or camelCase/snake_case mappings) in the order the
            result should follow.
        config: Weights, caps, bounds and residual policy. Defaults to the
            process-wide config from ``get_config()``.

    Returns:
        AllocationReport with one AllocationResult per agent, in input order.
        Shares add up to the budget (to the cent) whenever budget > 0.
    """
    roster = [coerce_agent(a) for a in (agents or [])]
    budget = float(budget)
    if not roster:
        return AllocationReport(allocations=[], total_budget=budget, method="empty")

    if budget <= 0:
        text = JUSTIFICATION_TEXTS["no_kitty"]
        return AllocationReport(
            allocations=[AllocationResult(id=a.id, assigned_discount=0.0, justification=text) for a in roster],
            total_budget=budget,
            method="no_kitty",
        )

    cfg = config if config is not None else get_config()
    n = len(roster)
    scores = np.array([s.score for s in score_agents(roster, cfg)], dtype=float)
    total_score = float(scores.sum())

    if total_score == 0:
        logger.debug(f"All {n} agents scored zero; splitting kitty {budget:.2f} equally")
        method = "equal_split"
        values = np.full(n, budget / n)
        weights = np.ones(n)
        clamped = np.zeros(n, dtype=bool)
        justifications = [JUSTIFICATION_TEXTS["equal_split"]] * n
    else:
        method = "proportional"
        average_score = total_score / n
        lower, upper = effective_bounds(budget, n, cfg)
        values, clamped = _proportional_pass(scores, total_score, budget, lower, upper)
        values = _redistribute(values, scores, clamped, budget)
        weights = scores
        justifications = [generate_justification(float(s), average_score) for s in scores]

    cents = finalize_cents(values, budget, weights, cfg.residual_policy)
    allocations = [
        AllocationResult(id=agent.id, assigned_discount=c / 100, justification=text)
        for agent, c, text in zip(roster, cents, justifications)
    ]
    report = AllocationReport(
        allocations=allocations,
        total_budget=budget,
        method=method,
        clamped_ids=[agent.id for agent, flag in zip(roster, clamped) if flag],
    )
    logger.debug(
        f"Allocated {report.total_allocated:.2f} of {budget:.2f} across {n} agents "
        f"({method}, {len(report.clamped_ids)} clamped)"
    )
    return report
