"""
Agent Scoring Engine.

Turns the four agent attributes into one composite score:

    score = performance_score        * w_performance
          + norm(seniority_months)   * w_seniority
          + target_achieved_percent  * w_target
          + norm(active_clients)     * w_clients

where ``norm`` clamps the attribute to its configured cap and rescales it to
0-100. Agents at or above a cap all get exactly 100 for that term, so extreme
tenure or client counts cannot dominate the score.

Scores are relative weights for the allocation engine; they are not bounded
to 0-100.
"""
from __future__ import annotations

from typing import Iterable, List

from discount_engine.config import Config
from discount_engine.models import Agent, AgentScore


def normalize(value: float, cap: float) -> float:
    """
    Rescale a value measured against ``cap`` to a 0-100 scale.

    The cap must be positive; the config loader guarantees it.

    Examples:
        >>> normalize(12, 24)
        50.0
        >>> normalize(24, 24)
        100.0
    """
    return (value / cap) * 100.0


def calculate_agent_score(agent: Agent, config: Config) -> float:
    """Composite weighted score for a single agent."""
    weights = config.weights
    caps = config.normalization_caps

    seniority = min(agent.seniority_months, caps.seniority_months)
    clients = min(agent.active_clients, caps.active_clients)

    return (
        agent.performance_score * weights.performance_score
        + normalize(seniority, caps.seniority_months) * weights.seniority_months
        + agent.target_achieved_percent * weights.target_achieved_percent
        + normalize(clients, caps.active_clients) * weights.active_clients
    )


def score_agents(agents: Iterable[Agent], config: Config) -> List[AgentScore]:
    """Score every agent, preserving input order."""
    return [AgentScore(id=a.id, score=calculate_agent_score(a, config)) for a in agents]
