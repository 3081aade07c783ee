"""
Metric Expressions

Polars expressions selecting the values each metric may use. A record
missing an input, or carrying a non-finite one, is left out of that
metric only.
"""

import math
from typing import Any, Optional

import polars as pl

from .models import ProfitView


def valid(column: str) -> pl.Expr:
    """Finite, non-null values of a column"""
    return pl.col(column).filter(pl.col(column).is_finite())


def valid_rating() -> pl.Expr:
    rating = pl.col("rating")
    return rating.filter(rating.is_finite() & rating.is_between(1, 5))


def margin(view: ProfitView) -> pl.Expr:
    """Per-record profit ratio, null where the record cannot carry one"""
    price = pl.col("price")
    shipping = pl.col("shipping_cost")
    has_shipping = shipping.is_finite() & (shipping >= 0) & price.is_finite()

    if view is ProfitView.WEIGHT:
        weight = pl.col("weight")
        usable = has_shipping & weight.is_finite() & (weight > 0)
        ratio = (price - shipping) / weight
    else:
        usable = has_shipping & (price > 0)
        ratio = (price - shipping) / price

    return pl.when(usable).then(ratio).otherwise(None)


def late_flag() -> pl.Expr:
    """True when delivered after the estimate, null when either date is missing"""
    actual = pl.col("delivery_time")
    estimated = pl.col("estimated_delivery_time")
    return pl.when(actual.is_finite() & estimated.is_finite()).then(actual > estimated).otherwise(None)


def finite(value: Any) -> Optional[float]:
    """Python float of a finite number, else ``None``"""
    if value is None:
        return None
    value = float(value)
    return value if math.isfinite(value) else None
