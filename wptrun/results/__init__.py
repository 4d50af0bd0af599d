"""
Result model for wptrun.

Typed representation of a single test's outcome and its subtests.
"""

from .models import (
    HarnessStatus,
    SubtestStatus,
    Status,
    RawResult,
    RawSubtestResult,
    Result,
    SubtestResult,
)

__all__ = [
    "HarnessStatus",
    "SubtestStatus",
    "Status",
    "RawResult",
    "RawSubtestResult",
    "Result",
    "SubtestResult",
]
