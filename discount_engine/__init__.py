"""
Smart Discount Allocator

Splits a discount kitty across sales agents by composite performance score.

Usage:
    from discount_engine import calculate_allocation

    report = calculate_allocation(10_000, agents)
    report.to_dict()  # {"allocations": [{"id", "assignedDiscount", "justification"}, ...]}
"""

from discount_engine.allocation_engine import calculate_allocation
from discount_engine.config import Config, get_config, load_config
from discount_engine.exceptions import ConfigurationError, DataValidationError, DiscountEngineError
from discount_engine.justification import generate_justification
from discount_engine.models import Agent, AgentScore, AllocationReport, AllocationResult
from discount_engine.scoring_engine import calculate_agent_score

__all__ = [
    "calculate_allocation",
    "calculate_agent_score",
    "generate_justification",
    "Config",
    "get_config",
    "load_config",
    "Agent",
    "AgentScore",
    "AllocationReport",
    "AllocationResult",
    "DiscountEngineError",
    "ConfigurationError",
    "DataValidationError",
]
