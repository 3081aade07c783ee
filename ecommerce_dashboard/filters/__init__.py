"""
Filter Module
"""
from .guard import ReconcileResult, reconcile
from .options import (
    DimensionOptions,
    filter_expression,
    is_available,
    resolve_all_options,
    resolve_options,
)
from .state import FilterState, FilterUpdate, apply_filter_update, reset_filters

__all__ = [
    "FilterState",
    "FilterUpdate",
    "apply_filter_update",
    "reset_filters",
    "DimensionOptions",
    "filter_expression",
    "is_available",
    "resolve_all_options",
    "resolve_options",
    "ReconcileResult",
    "reconcile",
]
