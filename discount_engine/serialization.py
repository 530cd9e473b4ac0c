"""
Serialization helpers for allocation reports.

Transforms `AllocationReport` into structures convenient for UIs and
scripts, and persists it as JSON.
"""
from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import pandas as pd

from discount_engine.models import AllocationReport, AllocationResult

RESULT_COLUMNS = ["id", "assignedDiscount", "justification"]


def report_to_dataframe(report: AllocationReport) -> pd.DataFrame:
    """Convert `AllocationReport` to a DataFrame, one row per agent.

    An empty report still yields the expected columns.
    """
    rows = [a.to_dict() for a in report.allocations]
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def save_report_json(path: str, report: AllocationReport, meta: Optional[Dict[str, Any]] = None) -> None:
    """Save a report as {"allocations": [...], "meta": {...}}.

    Meta defaults to the report summary; extra keys in ``meta`` are merged in.
    """
    out_obj: Dict[str, Any] = report.to_dict()
    out_obj["meta"] = {**report.summary(), **(meta or {})}
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w") as f:
        json.dump(out_obj, f, indent=2)


def load_report_json(path: str) -> AllocationReport:
    """Load a report written by `save_report_json`.

    Files without meta (bare {"allocations": [...]}) are accepted; the
    budget is then taken to be the sum of the allocations.
    """
    with open(path, "r") as f:
        obj = json.load(f)
    if not isinstance(obj, dict) or "allocations" not in obj:
        raise ValueError(f"Invalid allocation file: missing 'allocations' key in {path}")

    allocations = [
        AllocationResult(
            id=str(rec["id"]),
            assigned_discount=float(rec["assignedDiscount"]),
            justification=str(rec.get("justification", "")),
        )
        for rec in obj["allocations"]
    ]
    meta = obj.get("meta") or {}
    total_budget = meta.get("total_budget")
    if total_budget is None:
        total_budget = round(sum(a.assigned_discount for a in allocations), 2)
    return AllocationReport(
        allocations=allocations,
        total_budget=float(total_budget),
        method=str(meta.get("method", "unknown")),
        clamped_ids=list(meta.get("clamped_ids", [])),
    )
