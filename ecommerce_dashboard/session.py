"""
Dashboard Session

Explicit holder of everything the dashboard shares between consumers:
load status, the fact store, the engine and the current filter state.
"""

import threading
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, Union

import structlog

from ecommerce_dashboard.aggregation import AggregationEngine, DashboardSnapshot, ProfitView
from ecommerce_dashboard.config import EngineSettings, get_settings
from ecommerce_dashboard.filters import (
    DimensionOptions,
    FilterState,
    FilterUpdate,
    ReconcileResult,
    apply_filter_update,
    reconcile,
    reset_filters,
)
from ecommerce_dashboard.metrics import DASHBOARD_LOADS, FACT_RECORDS, FILTER_RESETS
from ecommerce_dashboard.store import FactStore, LoadError, load_fact_store, load_fact_store_from_path
from ecommerce_dashboard.store.records import Dimension

logger = structlog.get_logger(__name__)


class LoadStatus(str, Enum):
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


class DashboardUnavailableError(Exception):
    """Aggregation requested while no fact store is loaded"""

    def __init__(self, message: str, load_error: Optional[LoadError] = None):
        super().__init__(message)
        self.load_error = load_error


class DashboardSession:
    """
    Single-user dashboard state.

    Filter changes go through ``update_filters``, which reduces the
    update, reconciles the result and returns the new snapshot. Mutations
    are serialised with a lock.

    Example:
        session = DashboardSession()
        session.load_from_path("data/dashboard.json")
        snapshot = session.update_filters({"region": "SP"})
    """

    def __init__(self, settings: Optional[EngineSettings] = None):
        self.settings = settings or get_settings().engine
        self.status = LoadStatus.PENDING
        self.last_error: Optional[LoadError] = None
        self.store: Optional[FactStore] = None
        self.engine: Optional[AggregationEngine] = None
        self.filters = FilterState()
        self._lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        return self.status is LoadStatus.READY

    def _install(self, store: FactStore) -> None:
        with self._lock:
            self.store = store
            self.engine = AggregationEngine(store, self.settings)
            self.filters = FilterState()
            self.status = LoadStatus.READY
            self.last_error = None
        DASHBOARD_LOADS.labels(status="success").inc()
        FACT_RECORDS.set(len(store))

    def _fail(self, error: LoadError) -> None:
        with self._lock:
            self.store = None
            self.engine = None
            self.status = LoadStatus.FAILED
            self.last_error = error
        DASHBOARD_LOADS.labels(status="failed").inc()
        FACT_RECORDS.set(0)
        logger.error("Dashboard load failed", error=str(error))

    def load(self, payload: Any) -> FactStore:
        """
        Build the fact store from a parsed payload.

        Raises:
            LoadError: Payload cannot be turned into a fact store
        """
        try:
            store = load_fact_store(payload)
        except LoadError as e:
            self._fail(e)
            raise
        self._install(store)
        return store

    def load_from_path(self, path: Union[str, Path]) -> FactStore:
        """Build the fact store from a JSON payload file"""
        try:
            store = load_fact_store_from_path(path)
        except LoadError as e:
            self._fail(e)
            raise
        self._install(store)
        logger.info("Dashboard ready", path=str(path), records=len(store))
        return store

    def _require_engine(self) -> AggregationEngine:
        if self.engine is None:
            if self.last_error is not None:
                raise DashboardUnavailableError(
                    f"Dashboard data failed to load: {self.last_error}",
                    load_error=self.last_error,
                )
            raise DashboardUnavailableError("Dashboard data has not been loaded")
        return self.engine

    def snapshot(self, profit_view: Optional[Union[ProfitView, str]] = None) -> DashboardSnapshot:
        """Snapshot of the current filter state"""
        engine = self._require_engine()
        return engine.snapshot(self.filters, profit_view)

    def options(self) -> DimensionOptions:
        """Option sets of the current filter state"""
        return self._require_engine().options(self.filters)

    def apply(self, update: Union[FilterUpdate, dict], pinned: Optional[Iterable[Dimension]] = None) -> ReconcileResult:
        """
        Reduce and reconcile a filter update without computing a snapshot.

        The dimensions the update explicitly set are pinned so the guard
        resets older selections before them.
        """
        engine = self._require_engine()
        if not isinstance(update, FilterUpdate):
            update = FilterUpdate.model_validate(update)

        with self._lock:
            state, changed = apply_filter_update(self.filters, update)
            if pinned is None:
                pinned = changed & update.dimensions
            result = reconcile(engine.store, state, pinned=pinned, scan_limit=self.settings.option_scan_limit)
            self.filters = result.state

        for dimension in result.reset:
            FILTER_RESETS.labels(dimension=dimension.value).inc()

        logger.info(
            "Filters updated",
            changed=sorted(d.value for d in changed),
            reset=[d.value for d in result.reset],
            filters=result.state.as_dict(),
        )
        return result

    def update_filters(
        self,
        update: Union[FilterUpdate, dict],
        profit_view: Optional[Union[ProfitView, str]] = None,
    ) -> DashboardSnapshot:
        """Apply a partial filter update and return the new snapshot"""
        self.apply(update)
        return self.snapshot(profit_view)

    def reset_filters(self, profit_view: Optional[Union[ProfitView, str]] = None) -> DashboardSnapshot:
        """Return every dimension to the wildcard"""
        self._require_engine()
        with self._lock:
            self.filters = reset_filters()
        logger.info("Filters reset")
        return self.snapshot(profit_view)
