"""Fold engine over collections."""

from groupset.executor.aggregates import (
    Average,
    Count,
    FoldOperation,
    FoldResult,
    Sum,
    fold,
)

__all__ = ["Average", "Count", "FoldOperation", "FoldResult", "Sum", "fold"]
