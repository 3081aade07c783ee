"""
KPI Computation

Headline KPIs over a filtered frame. A KPI that cannot be measured on the
filtered records takes its value from ``FALLBACK_POLICY``; the unfiltered
baseline takes it from the KPIs declared by the payload, then zero.
"""

from enum import Enum
from typing import Dict, Mapping, Optional

import polars as pl
import structlog

from .expressions import finite, late_flag, margin, valid, valid_rating
from .models import KpiSnapshot, ProfitView

logger = structlog.get_logger(__name__)


class Fallback(str, Enum):
    BASELINE = "baseline"
    ZERO = "zero"


FALLBACK_POLICY: Dict[str, Fallback] = {
    "total_orders": Fallback.ZERO,
    "total_revenue": Fallback.ZERO,
    "average_product_price": Fallback.BASELINE,
    "average_delivery_time": Fallback.BASELINE,
    "average_customer_rating": Fallback.BASELINE,
    "percent_late_deliveries": Fallback.BASELINE,
    "negative_reviews": Fallback.BASELINE,
    "average_shipping_cost": Fallback.BASELINE,
    "average_profit_ratio": Fallback.BASELINE,
    "average_price_per_category": Fallback.BASELINE,
}

INTEGER_KPIS = frozenset({"total_orders", "negative_reviews"})


def _ratio(numerator: Optional[float], denominator: Optional[float], scale: float = 1.0) -> Optional[float]:
    if numerator is None or not denominator:
        return None
    return finite(scale * numerator / denominator)


def measure_kpis(frame: pl.DataFrame, profit_view: ProfitView = ProfitView.PRICE) -> Dict[str, Optional[float]]:
    """
    Raw KPI values of a frame; ``None`` where a KPI has no valid inputs.

    Args:
        frame: Fact frame (filtered or not)
        profit_view: Profit ratio definition for shipping and profit KPIs

    Returns:
        Mapping of KPI field name to value
    """
    ratio = margin(profit_view)
    row = frame.select(
        pl.col("orders").sum().alias("orders"),
        valid("revenue").sum().alias("revenue"),
        valid("delivery_time").mean().alias("delivery"),
        valid_rating().mean().alias("rating"),
        (valid_rating() <= 2).sum().alias("negative"),
        valid_rating().count().alias("rated"),
        late_flag().sum().alias("late"),
        late_flag().is_not_null().sum().alias("timed"),
        pl.col("shipping_cost").filter(ratio.is_not_null()).mean().alias("shipping"),
        ratio.mean().alias("profit_ratio"),
    ).row(0, named=True)

    category_prices = (
        frame.group_by("category_key")
        .agg(pl.col("orders").sum().alias("orders"), valid("revenue").sum().alias("revenue"))
        .filter(pl.col("orders") > 0)
        .select((pl.col("revenue") / pl.col("orders")).mean().alias("price"))
        .row(0, named=True)
    )

    orders = row["orders"] or 0
    revenue = finite(row["revenue"]) or 0.0
    return {
        "total_orders": orders,
        "total_revenue": revenue,
        "average_product_price": _ratio(revenue, orders),
        "average_delivery_time": finite(row["delivery"]),
        "average_customer_rating": finite(row["rating"]),
        "percent_late_deliveries": _ratio(row["late"], row["timed"], scale=100.0),
        "negative_reviews": row["negative"] if row["rated"] else None,
        "average_shipping_cost": finite(row["shipping"]),
        "average_profit_ratio": finite(row["profit_ratio"]),
        "average_price_per_category": finite(category_prices["price"]),
    }


def _snapshot(values: Mapping[str, Optional[float]]) -> KpiSnapshot:
    fields = {}
    for name, value in values.items():
        value = finite(value) or 0.0
        fields[name] = int(round(value)) if name in INTEGER_KPIS else value
    return KpiSnapshot(**fields)


def compute_baseline_kpis(
    frame: pl.DataFrame,
    declared: Optional[Mapping[str, float]] = None,
    profit_view: ProfitView = ProfitView.PRICE,
) -> KpiSnapshot:
    """
    KPIs of the unfiltered store.

    Unmeasurable KPIs use the payload's declared value when it is finite,
    then zero.
    """
    declared = declared or {}
    measured = measure_kpis(frame, profit_view)
    values = {}
    for name in FALLBACK_POLICY:
        value = measured.get(name)
        if value is None:
            value = finite(declared.get(name))
            if value is not None:
                logger.debug("KPI taken from payload", kpi=name)
        values[name] = value
    return _snapshot(values)


def compute_kpis(
    frame: pl.DataFrame,
    baseline: KpiSnapshot,
    profit_view: ProfitView = ProfitView.PRICE,
) -> KpiSnapshot:
    """
    KPIs of a filtered frame.

    An empty frame yields the baseline unchanged. Otherwise each KPI with
    no valid inputs falls back according to ``FALLBACK_POLICY``.

    Args:
        frame: Filtered fact frame
        baseline: KPIs of the unfiltered store
        profit_view: Profit ratio definition

    Returns:
        KpiSnapshot with finite values only
    """
    if frame.height == 0:
        return baseline

    measured = measure_kpis(frame, profit_view)
    values = {}
    for name, policy in FALLBACK_POLICY.items():
        value = measured.get(name)
        if value is None:
            value = getattr(baseline, name) if policy is Fallback.BASELINE else 0
        values[name] = value
    return _snapshot(values)
