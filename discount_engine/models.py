"""
Data models and structures for the discount engine.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Union

from discount_engine.exceptions import DataValidationError, MissingFieldError
from discount_engine.scoring_config import AGENT_FIELDS


@dataclass(frozen=True)
class Agent:
    """A sales agent competing for a share of the kitty."""
    id: str
    performance_score: float  # 0-100
    seniority_months: float
    target_achieved_percent: float  # 0-100
    active_clients: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Agent":
        """Build an agent from a camelCase or snake_case mapping."""
        if "id" not in data:
            raise MissingFieldError("id")
        values: Dict[str, float] = {}
        for snake, camel in AGENT_FIELDS:
            if snake in data:
                raw = data[snake]
            elif camel in data:
                raw = data[camel]
            else:
                raise MissingFieldError(camel, context=f"agent {data['id']}")
            try:
                values[snake] = float(raw)
            except (TypeError, ValueError):
                raise DataValidationError(
                    context=f"agent {data['id']}",
                    details="expected a number",
                    field=camel,
                    value=raw,
                )
        return cls(id=str(data["id"]), **values)

    def to_dict(self) -> dict:
        """Convert to dictionary (wire names)."""
        return {
            "id": self.id,
            "performanceScore": self.performance_score,
            "seniorityMonths": self.seniority_months,
            "targetAchievedPercent": self.target_achieved_percent,
            "activeClients": self.active_clients,
        }


AgentLike = Union[Agent, Mapping[str, Any]]


def coerce_agent(agent: AgentLike) -> Agent:
    """Accept either an Agent or a plain mapping."""
    if isinstance(agent, Agent):
        return agent
    return Agent.from_dict(agent)


@dataclass(frozen=True)
class AgentScore:
    """Composite score of one agent (not bounded to 0-100)."""
    id: str
    score: float


@dataclass(frozen=True)
class AllocationResult:
    """Discount assigned to one agent."""
    id: str
    assigned_discount: float
    justification: str

    def to_dict(self) -> dict:
        """Convert to dictionary (wire names)."""
        return {
            "id": self.id,
            "assignedDiscount": self.assigned_discount,
            "justification": self.justification,
        }


@dataclass(frozen=True)
class AllocationReport:
    """Outcome of one allocation run.

    ``method`` records which branch produced the numbers: "empty",
    "no_kitty", "equal_split" or "proportional".
    """
    allocations: List[AllocationResult]
    total_budget: float
    method: str
    clamped_ids: List[str] = field(default_factory=list)

    @property
    def total_allocated(self) -> float:
        return round(sum(a.assigned_discount for a in self.allocations), 2)

    def to_dict(self) -> dict:
        """Convert to the public result shape ``{"allocations": [...]}``."""
        return {"allocations": [a.to_dict() for a in self.allocations]}

    def summary(self) -> dict:
        return {
            "total_budget": self.total_budget,
            "total_allocated": self.total_allocated,
            "agent_count": len(self.allocations),
            "method": self.method,
            "clamped_ids": list(self.clamped_ids),
        }
