"""
Bucket series module.

Plans aligned bucket windows, fills them with event counts, and compares a
current period against the period immediately before it.
"""
from .aggregator import AggregationStats, aggregate
from .comparator import compare, percent_change
from .holders import build_holder_rows
from .planner import plan, plan_pair

__all__ = [
    "AggregationStats",
    "aggregate",
    "build_holder_rows",
    "compare",
    "percent_change",
    "plan",
    "plan_pair",
]
