"""
Unit Tests - Aggregation Engine
"""
import itertools
import math
from datetime import date

import pytest
from pydantic import ValidationError

from ecommerce_dashboard.aggregation import (
    AggregationEngine,
    FALLBACK_POLICY,
    Fallback,
    ProfitView,
    ShareEntry,
    bucket_top_n,
    category_rollup,
    compute_baseline_kpis,
    compute_kpis,
    filter_frame,
    monthly_rollup,
    rating_distribution,
    region_rollup,
    top_profitable,
    top_rated,
    worst_rated,
)
from ecommerce_dashboard.filters import FilterState, reconcile
from ecommerce_dashboard.store import FactRecord, FactStore
from ecommerce_dashboard.store.records import Dimension


def _all_finite(kpis) -> bool:
    return all(math.isfinite(value) for value in kpis.model_dump().values())


class TestRollups:
    """Tests for grouped rollups"""

    def test_region_filter_scenario(self, scenario_store, engine_settings):
        engine = AggregationEngine(scenario_store, engine_settings)

        snapshot = engine.snapshot(FilterState(region="X"))

        assert snapshot.record_count == 2
        assert snapshot.kpis.total_revenue == 300.0
        assert {c.name: c.revenue for c in snapshot.categories} == {"A": 100.0, "B": 200.0}
        assert {r.name: r.revenue for r in snapshot.regions} == {"X": 300.0}

    def test_monthly_rollup_sorted(self, catalog_store):
        points = monthly_rollup(catalog_store.frame)

        assert [p.month for p in points] == ["2017-03", "2017-07", "2018-01", "2018-05", "2018-06"]
        assert points[-1].revenue == 200.0
        assert points[-1].orders == 2

    def test_region_rollup_case_insensitive(self, catalog_store):
        regions = region_rollup(catalog_store.frame)

        assert [(r.name, r.revenue) for r in regions] == [("SP", 580.0), ("RJ", 220.0), ("MG", 50.0)]

    def test_category_rollup(self, catalog_store):
        baseline = compute_baseline_kpis(catalog_store.frame)

        categories = category_rollup(catalog_store.frame, baseline)

        assert [c.name for c in categories] == ["electronics", "toys", "garden"]
        electronics = categories[0]
        assert electronics.orders == 3
        assert electronics.average_price == pytest.approx(200.0)
        assert electronics.average_rating == pytest.approx(11 / 3)
        assert electronics.average_delivery_time == pytest.approx(40 / 3)
        assert electronics.profit_ratio == pytest.approx(0.8)

    def test_category_rollup_falls_back_to_global_averages(self, catalog_store):
        baseline = compute_baseline_kpis(catalog_store.frame)
        frame = filter_frame(catalog_store, FilterState(product=5))

        [toys] = category_rollup(frame, baseline)

        assert toys.average_rating == baseline.average_customer_rating
        assert toys.average_delivery_time == baseline.average_delivery_time
        assert toys.profit_ratio == 0.0

    def test_zero_orders_average_price(self):
        store = FactStore.from_records([
            FactRecord(record_id=1, category="A", region="X", order_date=date(2018, 1, 1), price=10.0, orders=0),
        ])
        baseline = compute_baseline_kpis(store.frame)

        [category] = category_rollup(store.frame, baseline)

        assert category.average_price == 0.0

    def test_rollup_conservation(self, catalog_store):
        baseline = compute_baseline_kpis(catalog_store.frame)
        for state in [FilterState(), FilterState(region="SP"), FilterState(year=2018)]:
            frame = filter_frame(catalog_store, state)
            total = compute_kpis(frame, baseline).total_revenue

            assert sum(c.revenue for c in category_rollup(frame, baseline)) == pytest.approx(total)
            assert sum(r.revenue for r in region_rollup(frame)) == pytest.approx(total)
            assert sum(m.revenue for m in monthly_rollup(frame)) == pytest.approx(total)


class TestKpis:
    """Tests for KPI computation and fallbacks"""

    def test_baseline_kpis(self, catalog_store):
        kpis = compute_baseline_kpis(catalog_store.frame)

        assert kpis.total_orders == 6
        assert kpis.total_revenue == pytest.approx(850.0)
        assert kpis.average_product_price == pytest.approx(850.0 / 6)
        assert kpis.average_delivery_time == pytest.approx(15.8)
        assert kpis.average_customer_rating == pytest.approx(3.2)
        assert kpis.percent_late_deliveries == pytest.approx(60.0)
        assert kpis.negative_reviews == 2
        assert kpis.average_shipping_cost == pytest.approx(28.8)
        assert kpis.average_profit_ratio == pytest.approx(0.8)
        assert kpis.average_price_per_category == pytest.approx(385.0 / 3)

    def test_weight_profit_view(self, catalog_store):
        kpis = compute_baseline_kpis(catalog_store.frame, profit_view=ProfitView.WEIGHT)

        assert kpis.average_profit_ratio == pytest.approx(0.15)
        assert kpis.average_shipping_cost == pytest.approx(30.0)

    def test_baseline_uses_declared_kpis(self, scenario_store):
        kpis = compute_baseline_kpis(
            scenario_store.frame,
            declared={"average_customer_rating": 4.2, "total_revenue": 1.0},
        )

        assert kpis.average_customer_rating == 4.2
        # Measured values win over declared ones
        assert kpis.total_revenue == 350.0
        assert kpis.percent_late_deliveries == 0.0

    def test_declared_non_finite_ignored(self, scenario_store):
        kpis = compute_baseline_kpis(scenario_store.frame, declared={"average_delivery_time": float("nan")})

        assert kpis.average_delivery_time == 0.0

    def test_filtered_kpis_fall_back_to_baseline(self, catalog_store):
        baseline = compute_baseline_kpis(catalog_store.frame)
        frame = filter_frame(catalog_store, FilterState(product=5))

        kpis = compute_kpis(frame, baseline)

        assert kpis.total_orders == 1
        assert kpis.average_product_price == 80.0
        assert kpis.average_customer_rating == baseline.average_customer_rating
        assert kpis.negative_reviews == baseline.negative_reviews
        assert kpis.percent_late_deliveries == baseline.percent_late_deliveries
        assert kpis.average_profit_ratio == baseline.average_profit_ratio

    def test_empty_frame_returns_baseline(self, catalog_store):
        baseline = compute_baseline_kpis(catalog_store.frame)
        frame = filter_frame(catalog_store, FilterState(region="nowhere"))

        assert compute_kpis(frame, baseline) == baseline

    def test_fallback_policy_covers_every_kpi(self, catalog_store):
        kpis = compute_baseline_kpis(catalog_store.frame)

        assert set(FALLBACK_POLICY) == set(kpis.model_dump())
        assert FALLBACK_POLICY["total_revenue"] is Fallback.ZERO

    def test_non_finite_inputs_never_leak(self):
        store = FactStore.from_records([
            FactRecord(
                record_id=1, category="A", region="X", order_date=date(2018, 1, 1),
                price=float("inf"), shipping_cost=float("nan"), rating=float("nan"),
                delivery_time=float("inf"), estimated_delivery_time=3.0, weight=0.0,
            ),
            FactRecord(record_id=2, category="A", region="X", order_date=date(2018, 1, 2), price=10.0, orders=0),
        ])

        kpis = compute_baseline_kpis(store.frame)

        assert _all_finite(kpis)
        assert kpis.total_revenue == 0.0
        assert kpis.average_customer_rating == 0.0


class TestBucketing:
    """Tests for Top-N + Others bucketing"""

    @staticmethod
    def _entries(values):
        return [ShareEntry(name=f"R{i}", value=value) for i, value in enumerate(values)]

    def test_ten_regions_scenario(self):
        entries = self._entries([50, 40, 30, 20, 10, 5, 4, 3, 2, 1])

        bucketed = bucket_top_n(entries, threshold_count=7, max_groups=6, min_share_pct=5.0, noun="regions")

        assert [e.value for e in bucketed[:6]] == [50, 40, 30, 20, 10, 5]
        others = bucketed[-1]
        assert len(bucketed) == 7
        assert others.name == "Others (4 regions)"
        assert others.value == 10
        assert others.group_count == 4
        assert others.is_others

    def test_pass_through_at_threshold(self):
        entries = self._entries([1, 2, 3, 4, 5, 6, 7])

        assert bucket_top_n(entries) == entries

    def test_never_keeps_more_than_max_groups(self):
        entries = self._entries([10] * 8)

        bucketed = bucket_top_n(entries)

        assert len(bucketed) == 7
        assert bucketed[-1].name == "Others (2 groups)"
        assert bucketed[-1].value == 20

    def test_large_shares_capped_at_max_groups(self):
        entries = self._entries([30, 20, 15, 10, 8, 7, 6, 2, 1, 1])

        bucketed = bucket_top_n(entries)

        assert [e.value for e in bucketed[:6]] == [30, 20, 15, 10, 8, 7]
        assert bucketed[-1].name == "Others (4 groups)"
        assert bucketed[-1].value == 10

    def test_small_share_stops_before_max_groups(self):
        entries = self._entries([60, 30, 2, 2, 2, 1, 1, 1, 1])

        bucketed = bucket_top_n(entries)

        # First group under 5% is the last one kept
        assert [e.value for e in bucketed[:-1]] == [60, 30, 2]
        assert bucketed[-1].name == "Others (6 groups)"
        assert bucketed[-1].value == 8

    def test_value_conservation(self):
        entries = self._entries([12.5, 3.25, 8, 0, 40, 1, 1, 9, 2.5])

        bucketed = bucket_top_n(entries)

        assert sum(e.value for e in bucketed) == pytest.approx(sum(e.value for e in entries))

    def test_all_zero_values(self):
        entries = self._entries([0] * 9)

        bucketed = bucket_top_n(entries)

        assert len(bucketed) == 7
        assert bucketed[-1].group_count == 3
        assert bucketed[-1].value == 0


class TestRankings:
    """Tests for product rankings"""

    def test_rating_distribution(self, catalog_store):
        buckets = rating_distribution(catalog_store.frame)

        assert [(b.rating, b.count) for b in buckets] == [(1, 1), (2, 1), (3, 0), (4, 2), (5, 1)]

    def test_top_and_worst_rated(self, catalog_store):
        frame = catalog_store.frame

        assert [p.product_id for p in top_rated(frame)] == [1, 2, 6, 3, 4]
        assert [p.product_id for p in worst_rated(frame, limit=2)] == [4, 3]

    def test_top_profitable(self, catalog_store):
        ranked = top_profitable(catalog_store.frame)

        assert [p.product_id for p in ranked] == [1, 2]
        assert ranked[0].profit_ratio == pytest.approx(0.18)

    def test_aggregate_rows_never_rank(self, scenario_store):
        assert top_rated(scenario_store.frame) == []


class TestAggregationEngine:
    """Tests for AggregationEngine snapshots"""

    def test_empty_result_scenario(self, scenario_store, engine_settings):
        engine = AggregationEngine(scenario_store, engine_settings)

        snapshot = engine.snapshot(FilterState(category="A", region="Z"))

        assert snapshot.is_empty
        assert snapshot.record_count == 0
        assert snapshot.kpis == engine.baseline_kpis()
        assert snapshot.kpis.total_revenue == 350.0
        assert snapshot.monthly == []
        assert snapshot.categories == []
        assert snapshot.region_shares == []

    def test_region_shares_bucketed(self, engine_settings):
        values = [50, 40, 30, 20, 10, 5, 4, 3, 2, 1]
        store = FactStore.from_records([
            FactRecord(record_id=i + 1, category="A", region=f"R{i}", order_date=date(2018, 1, 1), price=float(v))
            for i, v in enumerate(values)
        ])
        engine = AggregationEngine(store, engine_settings)

        shares = engine.snapshot(FilterState()).region_shares

        assert len(shares) == 7
        assert shares[-1].name == "Others (4 regions)"
        assert shares[-1].value == 10

    def test_profit_view_selection(self, catalog_store, engine_settings):
        engine = AggregationEngine(catalog_store, engine_settings)

        assert engine.snapshot(FilterState()).profit_view is ProfitView.PRICE
        weight = engine.snapshot(FilterState(), profit_view="weight")
        assert weight.profit_view is ProfitView.WEIGHT
        assert weight.kpis.average_profit_ratio == pytest.approx(0.15)

    def test_snapshot_carries_options(self, catalog_store, engine_settings):
        engine = AggregationEngine(catalog_store, engine_settings)

        snapshot = engine.snapshot(FilterState(region="SP"))

        assert snapshot.options.categories == ["electronics", "toys"]
        assert snapshot.filters.region == "SP"

    def test_snapshot_is_read_only(self, scenario_store, engine_settings):
        snapshot = AggregationEngine(scenario_store, engine_settings).snapshot(FilterState())

        with pytest.raises(ValidationError):
            snapshot.record_count = 0

    def test_kpis_finite_for_every_state(self, catalog_store, engine_settings):
        engine = AggregationEngine(catalog_store, engine_settings)
        years = [None, 2017, 2018, 1999]
        regions = [None, "SP", "RJ", "MG", "none"]
        categories = [None, "electronics", "toys", "garden", "none"]

        for year, region, category in itertools.product(years, regions, categories):
            state = FilterState(year=year, region=region, category=category)
            for view in ProfitView:
                snapshot = engine.snapshot(state, view)
                assert _all_finite(snapshot.kpis), state
                assert all(math.isfinite(c.profit_ratio) for c in snapshot.categories)

    def test_guard_then_snapshot_scenario(self, scenario_store, engine_settings):
        engine = AggregationEngine(scenario_store, engine_settings)
        state = FilterState(category="B", region="Y")

        reconciled = reconcile(scenario_store, state, pinned={Dimension.REGION})
        snapshot = engine.snapshot(reconciled.state)

        assert reconciled.state.category is None
        assert not snapshot.is_empty
