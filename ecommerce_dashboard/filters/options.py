"""
Cascading Option Resolver

Computes the selectable values of one dimension from the *other* active
filters, so every dropdown only offers combinations that still hold data.
"""

from typing import Any, List, Optional

import polars as pl
import structlog
from pydantic import BaseModel, ConfigDict, Field

from ecommerce_dashboard.store.fact_store import FactStore
from ecommerce_dashboard.store.records import (
    DIMENSION_COLUMNS,
    DIMENSION_MATCH_COLUMNS,
    TEXT_DIMENSIONS,
    Dimension,
)
from .state import FilterState

logger = structlog.get_logger(__name__)


class DimensionOptions(BaseModel):
    """Valid values of every dimension for a filter state"""

    model_config = ConfigDict(frozen=True)

    years: List[int] = Field(default_factory=list)
    regions: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    products: List[int] = Field(default_factory=list)

    def for_dimension(self, dimension: Dimension) -> List[Any]:
        return {
            Dimension.YEAR: self.years,
            Dimension.REGION: self.regions,
            Dimension.CATEGORY: self.categories,
            Dimension.PRODUCT: self.products,
        }[dimension]


def match_value(dimension: Dimension, value: Any) -> Any:
    """Value as stored in the dimension's match column"""
    if dimension in TEXT_DIMENSIONS:
        return str(value).lower()
    return value


def filter_expression(state: FilterState, exclude: Optional[Dimension] = None) -> pl.Expr:
    """
    Conjunction of the active filters of a state.

    Args:
        state: Filter state
        exclude: Dimension left out of the predicate

    Returns:
        Boolean expression over the fact frame
    """
    predicates = [
        pl.col(DIMENSION_MATCH_COLUMNS[dimension]) == match_value(dimension, state.get(dimension))
        for dimension in state.active_dimensions
        if dimension is not exclude
    ]
    if not predicates:
        return pl.lit(True)
    return pl.all_horizontal(predicates)


def _sort_values(dimension: Dimension, values: List[Any]) -> List[Any]:
    if dimension in TEXT_DIMENSIONS:
        # First spelling wins when values differ only by case
        unique = {}
        for value in values:
            unique.setdefault(value.lower(), value)
        return sorted(unique.values(), key=str.casefold)
    return sorted(values)


def resolve_options(
    store: FactStore,
    state: FilterState,
    dimension: Dimension,
    scan_limit: Optional[int] = None,
) -> List[Any]:
    """
    Sorted, deduplicated values of a dimension reachable under the other filters.

    The dimension's own selection is never consulted. Years and product ids
    sort numerically, regions and categories alphabetically.

    Args:
        store: Fact store
        state: Current filter state
        dimension: Target dimension
        scan_limit: Only scan the first N records (unset scans all)

    Returns:
        Option values, empty when the other filters exclude every record
    """
    frame = store.frame
    if scan_limit is not None and frame.height > scan_limit:
        logger.warning(
            "Option scan truncated",
            dimension=dimension.value,
            scanned=scan_limit,
            records=frame.height,
        )
        frame = frame.head(scan_limit)

    column = DIMENSION_COLUMNS[dimension]
    values = (
        frame.filter(filter_expression(state, exclude=dimension))
        .get_column(column)
        .drop_nulls()
        .unique(maintain_order=True)
        .to_list()
    )
    return _sort_values(dimension, values)


def resolve_all_options(
    store: FactStore,
    state: FilterState,
    scan_limit: Optional[int] = None,
) -> DimensionOptions:
    """Option sets of every dimension for the state"""
    return DimensionOptions(
        years=resolve_options(store, state, Dimension.YEAR, scan_limit),
        regions=resolve_options(store, state, Dimension.REGION, scan_limit),
        categories=resolve_options(store, state, Dimension.CATEGORY, scan_limit),
        products=resolve_options(store, state, Dimension.PRODUCT, scan_limit),
    )


def is_available(
    store: FactStore,
    state: FilterState,
    dimension: Dimension,
    value: Any,
    scan_limit: Optional[int] = None,
) -> bool:
    """Whether a value is among the dimension's options under the other filters"""
    if value is None:
        return True
    target = match_value(dimension, value)
    options = resolve_options(store, state, dimension, scan_limit)
    return any(match_value(dimension, option) == target for option in options)
