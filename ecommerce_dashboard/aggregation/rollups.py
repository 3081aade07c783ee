"""
Grouped Rollups

Monthly, regional and per-category aggregates over a filtered fact frame.
Region and category group case-insensitively; the first spelling seen
names the group.
"""

from typing import List

import polars as pl

from ecommerce_dashboard.filters import FilterState, filter_expression
from ecommerce_dashboard.store import FactStore
from .expressions import finite, margin, valid, valid_rating
from .models import CategoryPoint, GroupTotal, KpiSnapshot, MonthlyPoint, ProfitView


def filter_frame(store: FactStore, state: FilterState) -> pl.DataFrame:
    """Records satisfying every active filter"""
    return store.frame.filter(filter_expression(state))


def _totals() -> List[pl.Expr]:
    return [
        pl.col("orders").sum().alias("orders"),
        valid("revenue").sum().alias("revenue"),
    ]


def monthly_rollup(frame: pl.DataFrame) -> List[MonthlyPoint]:
    """Orders and revenue per ``YYYY-MM``, oldest month first"""
    grouped = frame.group_by("month").agg(_totals()).sort("month")
    return [
        MonthlyPoint(month=row["month"], orders=row["orders"] or 0, revenue=finite(row["revenue"]) or 0.0)
        for row in grouped.iter_rows(named=True)
    ]


def region_rollup(frame: pl.DataFrame) -> List[GroupTotal]:
    """Orders and revenue per region, highest revenue first"""
    grouped = (
        frame.group_by("region_key", maintain_order=True)
        .agg([pl.col("region").first().alias("name")] + _totals())
        .sort(["revenue", "region_key"], descending=[True, False])
    )
    return [
        GroupTotal(name=row["name"], orders=row["orders"] or 0, revenue=finite(row["revenue"]) or 0.0)
        for row in grouped.iter_rows(named=True)
    ]


def category_rollup(
    frame: pl.DataFrame,
    baseline: KpiSnapshot,
    profit_view: ProfitView = ProfitView.PRICE,
) -> List[CategoryPoint]:
    """
    Per-category aggregates, highest revenue first.

    Average rating and delivery time fall back to the unfiltered averages
    when a category has no valid values; average price and profit ratio
    fall back to zero.

    Args:
        frame: Filtered fact frame
        baseline: KPIs of the unfiltered store
        profit_view: Profit ratio definition

    Returns:
        One CategoryPoint per category
    """
    grouped = (
        frame.group_by("category_key", maintain_order=True)
        .agg(
            [pl.col("category").first().alias("name")]
            + _totals()
            + [
                valid_rating().mean().alias("average_rating"),
                valid("delivery_time").mean().alias("average_delivery_time"),
                margin(profit_view).mean().alias("profit_ratio"),
            ]
        )
        .sort(["revenue", "category_key"], descending=[True, False])
    )

    points = []
    for row in grouped.iter_rows(named=True):
        orders = row["orders"] or 0
        revenue = finite(row["revenue"]) or 0.0
        average_price = finite(revenue / orders) if orders > 0 else None
        rating = finite(row["average_rating"])
        delivery = finite(row["average_delivery_time"])
        profit_ratio = finite(row["profit_ratio"])
        points.append(
            CategoryPoint(
                name=row["name"],
                orders=orders,
                revenue=revenue,
                average_price=average_price if average_price is not None else 0.0,
                average_rating=rating if rating is not None else baseline.average_customer_rating,
                average_delivery_time=delivery if delivery is not None else baseline.average_delivery_time,
                profit_ratio=profit_ratio if profit_ratio is not None else 0.0,
            )
        )
    return points
