"""
Prometheus Metrics

Process-wide metrics of the dashboard engine, exposed on ``/metrics``.
"""

from prometheus_client import Counter, Gauge, Histogram

DASHBOARD_LOADS = Counter(
    "ecommerce_dashboard_loads_total",
    "Fact store load attempts",
    ["status"],
)

FACT_RECORDS = Gauge(
    "ecommerce_dashboard_fact_records",
    "Records in the loaded fact store",
)

SNAPSHOT_TIME = Histogram(
    "ecommerce_dashboard_snapshot_seconds",
    "Time spent computing dashboard snapshots",
    ["profit_view"],
)

FILTER_RESETS = Counter(
    "ecommerce_dashboard_filter_resets_total",
    "Filter selections reset by the consistency guard",
    ["dimension"],
)
