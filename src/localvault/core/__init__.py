"""LocalVault core: todo model, ordering and statistics."""

from localvault.core.models import Todo
from localvault.core.positions import (
    normalize_positions,
    reconcile_positions,
    sort_by_position,
)
from localvault.core.statistics import CacheStatistics

__all__ = [
    "CacheStatistics",
    "Todo",
    "normalize_positions",
    "reconcile_positions",
    "sort_by_position",
]
