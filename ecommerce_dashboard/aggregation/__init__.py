"""
Aggregation Module
"""
from .bucketing import bucket_top_n, revenue_shares
from .engine import AggregationEngine
from .kpis import FALLBACK_POLICY, Fallback, compute_baseline_kpis, compute_kpis, measure_kpis
from .models import (
    CategoryPoint,
    DashboardSnapshot,
    FilterSelection,
    GroupTotal,
    KpiSnapshot,
    MonthlyPoint,
    ProductRanking,
    ProfitView,
    RatingBucket,
    ShareEntry,
)
from .rankings import rating_distribution, top_categories, top_profitable, top_rated, worst_rated
from .rollups import category_rollup, filter_frame, monthly_rollup, region_rollup

__all__ = [
    "AggregationEngine",
    "bucket_top_n",
    "revenue_shares",
    "FALLBACK_POLICY",
    "Fallback",
    "compute_baseline_kpis",
    "compute_kpis",
    "measure_kpis",
    "CategoryPoint",
    "DashboardSnapshot",
    "FilterSelection",
    "GroupTotal",
    "KpiSnapshot",
    "MonthlyPoint",
    "ProductRanking",
    "ProfitView",
    "RatingBucket",
    "ShareEntry",
    "rating_distribution",
    "top_categories",
    "top_profitable",
    "top_rated",
    "worst_rated",
    "category_rollup",
    "filter_frame",
    "monthly_rollup",
    "region_rollup",
]
