"""
Aggregation Engine

Turns a filter state into the complete read-only dashboard snapshot:
options, KPIs, rollups, proportional views and rankings.
"""

import time
from typing import Dict, Optional, Union

import polars as pl
import structlog

from ecommerce_dashboard.config import EngineSettings, get_settings
from ecommerce_dashboard.filters import DimensionOptions, FilterState, resolve_all_options
from ecommerce_dashboard.metrics import SNAPSHOT_TIME
from ecommerce_dashboard.store import FactStore
from .bucketing import bucket_top_n, revenue_shares
from .kpis import compute_baseline_kpis, compute_kpis
from .models import DashboardSnapshot, FilterSelection, KpiSnapshot, ProfitView
from .rankings import rating_distribution, top_categories, top_profitable, top_rated, worst_rated
from .rollups import category_rollup, filter_frame, monthly_rollup, region_rollup

logger = structlog.get_logger(__name__)


class AggregationEngine:
    """
    Stateless computation over an immutable fact store.

    Unfiltered baseline KPIs are computed once per profit view and reused
    as the fallback of every filtered snapshot.

    Example:
        engine = AggregationEngine(store)
        snapshot = engine.snapshot(FilterState(region="SP"))
        snapshot.kpis.total_revenue
    """

    def __init__(self, store: FactStore, settings: Optional[EngineSettings] = None):
        self.store = store
        self.settings = settings or get_settings().engine
        self._baselines: Dict[ProfitView, KpiSnapshot] = {}

    @property
    def default_profit_view(self) -> ProfitView:
        return ProfitView(self.settings.profit_view)

    def _profit_view(self, profit_view: Optional[Union[ProfitView, str]]) -> ProfitView:
        if profit_view is None:
            return self.default_profit_view
        return ProfitView(profit_view)

    def baseline_kpis(self, profit_view: Optional[Union[ProfitView, str]] = None) -> KpiSnapshot:
        """KPIs of the unfiltered store"""
        view = self._profit_view(profit_view)
        if view not in self._baselines:
            self._baselines[view] = compute_baseline_kpis(
                self.store.frame,
                declared=self.store.declared_kpis,
                profit_view=view,
            )
        return self._baselines[view]

    def filter(self, state: FilterState) -> pl.DataFrame:
        return filter_frame(self.store, state)

    def options(self, state: FilterState) -> DimensionOptions:
        return resolve_all_options(self.store, state, scan_limit=self.settings.option_scan_limit)

    def kpis(self, state: FilterState, profit_view: Optional[Union[ProfitView, str]] = None) -> KpiSnapshot:
        view = self._profit_view(profit_view)
        return compute_kpis(self.filter(state), self.baseline_kpis(view), view)

    def snapshot(
        self,
        state: FilterState,
        profit_view: Optional[Union[ProfitView, str]] = None,
    ) -> DashboardSnapshot:
        """
        Compute the dashboard snapshot for a filter state.

        An empty filtered set yields empty rollups and the unfiltered KPIs.

        Args:
            state: Filter state (expected to be reconciled)
            profit_view: Profit ratio definition (defaults to settings)

        Returns:
            DashboardSnapshot
        """
        start = time.perf_counter()
        view = self._profit_view(profit_view)
        baseline = self.baseline_kpis(view)
        frame = self.filter(state)
        settings = self.settings

        categories = category_rollup(frame, baseline, view)
        regions = region_rollup(frame)

        snapshot = DashboardSnapshot(
            filters=FilterSelection.from_state(state),
            options=self.options(state),
            record_count=frame.height,
            is_empty=frame.height == 0,
            profit_view=view,
            kpis=compute_kpis(frame, baseline, view),
            monthly=monthly_rollup(frame),
            regions=regions,
            categories=categories,
            region_shares=bucket_top_n(
                revenue_shares(regions),
                threshold_count=settings.bucket_threshold_count,
                max_groups=settings.bucket_max_groups,
                min_share_pct=settings.bucket_min_share_pct,
                noun="regions",
            ),
            category_shares=bucket_top_n(
                revenue_shares(categories),
                threshold_count=settings.bucket_threshold_count,
                max_groups=settings.bucket_max_groups,
                min_share_pct=settings.bucket_min_share_pct,
                noun="categories",
            ),
            top_categories=top_categories(categories, settings.top_categories_limit),
            rating_distribution=rating_distribution(frame),
            top_rated=top_rated(frame, settings.rated_products_limit),
            worst_rated=worst_rated(frame, settings.rated_products_limit),
            top_profitable=top_profitable(
                frame,
                limit=settings.profitable_products_limit,
                min_rating=settings.profitable_min_rating,
            ),
        )

        duration = time.perf_counter() - start
        SNAPSHOT_TIME.labels(profit_view=view.value).observe(duration)
        logger.debug(
            "Snapshot computed",
            filters=state.as_dict(),
            records=frame.height,
            profit_view=view.value,
            duration_ms=round(duration * 1000, 2),
        )
        return snapshot
