import copy
import logging

import pytest

from discount_engine.allocation_engine import (
    _settle_on_first,
    _spread_residual,
    calculate_allocation,
    effective_bounds,
    finalize_cents,
    to_cents,
)
from discount_engine.config import AllocationWeights, Config
from discount_engine.models import Agent
from discount_engine.scoring_config import JUSTIFICATION_TEXTS
from discount_engine.scoring_engine import calculate_agent_score


def _amounts(report):
    return {a.id: a.assigned_discount for a in report.allocations}


def _total(report):
    return sum(a.assigned_discount for a in report.allocations)


def _strong_and(weak):
    strong = {"id": "A1", "performanceScore": 95, "seniorityMonths": 24, "targetAchievedPercent": 95, "activeClients": 20}
    return [strong, dict(weak, id="A2")]


WEAK = {"performanceScore": 10, "seniorityMonths": 0, "targetAchievedPercent": 5, "activeClients": 0}


def test_varied_scores_allocate_proportionally(varied_agents, default_config):
    report = calculate_allocation(10000, varied_agents, default_config)
    amounts = _amounts(report)

    # A3 leads every metric, A4 trails every metric
    assert amounts["A3"] > amounts["A4"]
    assert amounts["A4"] < amounts["A2"]
    assert abs(_total(report) - 10000) < 0.01
    assert report.method == "proportional"
    assert report.clamped_ids == []


def test_varied_scores_justifications(varied_agents, default_config):
    report = calculate_allocation(10000, varied_agents, default_config)
    texts = {a.id: a.justification for a in report.allocations}
    assert texts["A1"] == JUSTIFICATION_TEXTS["top"]
    assert texts["A2"] == JUSTIFICATION_TEXTS["moderate"]
    assert texts["A3"] == JUSTIFICATION_TEXTS["top"]
    assert texts["A4"] == JUSTIFICATION_TEXTS["below_average"]


def test_identical_agents_split_equally_with_residue_on_first(identical_agents, default_config):
    report = calculate_allocation(10000, identical_agents, default_config)
    assert [a.assigned_discount for a in report.allocations] == [3333.34, 3333.33, 3333.33]
    assert report.total_allocated == 10000.0
    # Equal non-zero scores go through the proportional path
    assert report.method == "proportional"


def test_result_order_matches_input(varied_agents, default_config):
    reversed_agents = list(reversed(varied_agents))
    report = calculate_allocation(10000, reversed_agents, default_config)
    assert [a.id for a in report.allocations] == ["A4", "A3", "A2", "A1"]


@pytest.mark.parametrize("agents", [[], None])
def test_empty_agent_list(agents, default_config):
    report = calculate_allocation(10000, agents, default_config)
    assert report.to_dict() == {"allocations": []}
    assert report.method == "empty"


@pytest.mark.parametrize("budget", [0, -50])
def test_non_positive_budget_assigns_zero(budget, varied_agents):
    report = calculate_allocation(budget, varied_agents)
    assert [a.assigned_discount for a in report.allocations] == [0.0, 0.0, 0.0, 0.0]
    assert all(a.justification == JUSTIFICATION_TEXTS["no_kitty"] for a in report.allocations)
    assert report.method == "no_kitty"


def test_default_bounds_cap_strong_agent():
    agents = [
        {"id": "A1", "performanceScore": 95, "seniorityMonths": 24, "targetAchievedPercent": 95, "activeClients": 20},
        {"id": "A2", "performanceScore": 50, "seniorityMonths": 6, "targetAchievedPercent": 50, "activeClients": 5},
    ]
    report = calculate_allocation(10000, agents, Config())
    amounts = _amounts(report)

    assert amounts["A2"] >= Config().min_discount
    assert amounts == {"A1": 5000.0, "A2": 5000.0}
    assert report.clamped_ids == ["A1"]


def test_low_scorer_receives_configured_minimum():
    config = Config(min_discount=1000, max_discount=None)
    report = calculate_allocation(10000, _strong_and(WEAK), config)

    assert _amounts(report) == {"A1": 9000.0, "A2": 1000.0}
    assert report.clamped_ids == ["A2"]


def test_minimum_as_fraction_of_kitty():
    config = Config(min_discount=None, max_discount=None, min_discount_percent=0.1)
    report = calculate_allocation(20000, _strong_and(WEAK), config)
    assert _amounts(report) == {"A1": 18000.0, "A2": 2000.0}


def test_fractional_bounds_scale_with_large_kitty(identical_agents):
    config = Config(min_discount=None, max_discount=None, min_discount_percent=0.1, max_discount_percent=0.5)
    report = calculate_allocation(1_000_000, identical_agents, config.validate())
    assert [a.assigned_discount for a in report.allocations] == [333333.34, 333333.33, 333333.33]


def test_all_clamped_difference_lands_on_first_agent():
    config = Config(min_discount=1000, max_discount=6000)
    report = calculate_allocation(10000, _strong_and(WEAK), config)

    assert report.clamped_ids == ["A1", "A2"]
    assert _amounts(report) == {"A1": 9000.0, "A2": 1000.0}


def test_zero_scores_split_equally_without_clamping():
    zero = {"performanceScore": 0, "seniorityMonths": 0, "targetAchievedPercent": 0, "activeClients": 0}
    agents = [dict(zero, id=f"Z{i}") for i in range(4)]
    report = calculate_allocation(10000, agents, Config(max_discount=1000))

    assert [a.assigned_discount for a in report.allocations] == [2500.0] * 4
    assert all(a.justification == JUSTIFICATION_TEXTS["equal_split"] for a in report.allocations)
    assert report.method == "equal_split"
    assert report.clamped_ids == []


def test_zero_scores_residue_on_first():
    zero = {"performanceScore": 0, "seniorityMonths": 0, "targetAchievedPercent": 0, "activeClients": 0}
    agents = [dict(zero, id=f"Z{i}") for i in range(3)]
    report = calculate_allocation(100, agents, Config())
    assert [a.assigned_discount for a in report.allocations] == [33.34, 33.33, 33.33]


def test_unaffordable_minimum_is_ignored(identical_agents, caplog, monkeypatch):
    monkeypatch.setattr(logging.getLogger("discount_engine"), "propagate", True)
    with caplog.at_level(logging.WARNING, logger="discount_engine.allocation_engine"):
        report = calculate_allocation(1000, identical_agents, Config())

    assert [a.assigned_discount for a in report.allocations] == [333.34, 333.33, 333.33]
    assert "cannot cover minimum" in caplog.text


def test_deficit_redistribution_never_goes_negative():
    config = Config(
        weights=AllocationWeights(performance_score=1, seniority_months=0, target_achieved_percent=0, active_clients=0),
        min_discount=20,
        max_discount=35,
    )
    agents = [
        {"id": f"P{i}", "performanceScore": p, "seniorityMonths": 0, "targetAchievedPercent": 0, "activeClients": 0}
        for i, p in enumerate([36, 36, 21, 3.5, 3.5])
    ]
    report = calculate_allocation(100, agents, config)

    assert [a.assigned_discount for a in report.allocations] == [25.0, 35.0, 0.0, 20.0, 20.0]


@pytest.mark.parametrize("budget", [0.01, 1, 99.99, 1234.56, 10000, 250000])
def test_total_matches_budget_and_no_negatives(budget, varied_agents, default_config):
    report = calculate_allocation(budget, varied_agents, default_config)
    assert abs(_total(report) - budget) < 0.01
    assert all(a.assigned_discount >= 0 for a in report.allocations)


def test_higher_score_gets_more_when_unclamped(varied_agents, default_config):
    report = calculate_allocation(10000, varied_agents, default_config)
    amounts = _amounts(report)
    scores = {a["id"]: calculate_agent_score(Agent.from_dict(a), default_config) for a in varied_agents}

    ranked = sorted(scores, key=scores.get, reverse=True)
    assert ranked == ["A3", "A1", "A2", "A4"]
    for higher, lower in zip(ranked, ranked[1:]):
        assert amounts[higher] >= amounts[lower]


def test_repeated_calls_are_identical(varied_agents, default_config):
    first = calculate_allocation(10000, varied_agents, default_config)
    second = calculate_allocation(10000, varied_agents, default_config)
    assert first == second
    assert first.to_dict() == second.to_dict()


def test_inputs_are_not_mutated(varied_agents, default_config):
    before = copy.deepcopy(varied_agents)
    calculate_allocation(10000, varied_agents, default_config)
    assert varied_agents == before


def test_accepts_agent_objects_and_snake_case(identical_agents, default_config):
    mixed = [
        Agent(id="A1", performance_score=80, seniority_months=12, target_achieved_percent=80, active_clients=10),
        {"id": "A2", "performance_score": 80, "seniority_months": 12, "target_achieved_percent": 80, "active_clients": 10},
        identical_agents[2],
    ]
    assert calculate_allocation(10000, mixed, default_config) == calculate_allocation(
        10000, identical_agents, default_config
    )


def test_proportional_residual_policy_stays_within_a_cent(varied_agents):
    config = Config(residual_policy="proportional")
    report = calculate_allocation(10000, varied_agents, config)

    scores = {a["id"]: calculate_agent_score(Agent.from_dict(a), config) for a in varied_agents}
    total_score = sum(scores.values())
    for alloc in report.allocations:
        exact = scores[alloc.id] / total_score * 10000
        assert abs(alloc.assigned_discount - exact) <= 0.01 + 1e-9
    assert report.total_allocated == 10000.0


def test_global_config_used_when_none_given(monkeypatch):
    monkeypatch.setenv("MIN_DISCOUNT", "1000")
    monkeypatch.setenv("MAX_DISCOUNT", "9000")
    report = calculate_allocation(10000, _strong_and(WEAK))
    assert _amounts(report) == {"A1": 9000.0, "A2": 1000.0}


# ── helpers ─────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "value,expected",
    [(0.125, 13), (0.005, 1), (2.675, 268), (3333.3333333, 333333), (0.0, 0)],
)
def test_to_cents_rounds_half_away_from_zero(value, expected):
    assert to_cents(value) == expected


def test_settle_on_first():
    assert _settle_on_first([100, 200], 5) == [105, 200]
    # A deficit bigger than the first share moves on to the next agent
    assert _settle_on_first([100, 500, 300], -250) == [0, 350, 300]


def test_spread_residual_largest_remainder():
    assert _spread_residual([100, 100, 100], 5, [1, 1, 2]) == [101, 101, 103]
    # Deficits follow current amounts, so an empty share stays empty
    assert _spread_residual([100, 300, 0], -4, [9, 9, 9]) == [99, 297, 0]


def test_finalize_cents_floors_negative_values():
    assert finalize_cents([-5.0, 10.004, 9.996], 20.0, [1, 1, 1]) == [0, 1000, 1000]


def test_effective_bounds(default_config):
    assert effective_bounds(10000, 4, default_config) == (500.0, 5000.0)
    assert effective_bounds(10000, 30, default_config) == (0.0, 5000.0)
