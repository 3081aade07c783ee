"""
Consistency Guard

After a filter change, resets every selection that is no longer reachable
given the other filters.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import structlog

from ecommerce_dashboard.store.fact_store import FactStore
from ecommerce_dashboard.store.records import Dimension
from .options import is_available
from .state import FilterState

logger = structlog.get_logger(__name__)

# Most specific dimension first
RECONCILE_ORDER = (Dimension.PRODUCT, Dimension.CATEGORY, Dimension.REGION, Dimension.YEAR)


@dataclass(frozen=True)
class ReconcileResult:
    """Reconciled state and the dimensions that were reset"""
    state: FilterState
    reset: Tuple[Dimension, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.reset)


def reconcile(
    store: FactStore,
    state: FilterState,
    pinned: Iterable[Dimension] = (),
    scan_limit: Optional[int] = None,
) -> ReconcileResult:
    """
    Run one reconciliation pass over a filter state.

    Each non-wildcard dimension is checked against the options resolved
    from the state as reconciled so far. Pinned dimensions, the ones the
    user just chose, are checked last so an older selection gives way to
    the latest choice. A reset only widens the other dimensions' options,
    so values already confirmed stay valid for the rest of the pass.

    Args:
        store: Fact store
        state: Filter state after the user's change
        pinned: Dimensions set by the change being reconciled
        scan_limit: Forwarded to the option resolver

    Returns:
        ReconcileResult with the new state and the reset dimensions
    """
    pinned = frozenset(pinned)
    order = [d for d in RECONCILE_ORDER if d not in pinned] + [d for d in RECONCILE_ORDER if d in pinned]

    reset = []
    for dimension in order:
        value = state.get(dimension)
        if value is None:
            continue
        if not is_available(store, state, dimension, value, scan_limit):
            state = state.with_value(dimension, None)
            reset.append(dimension)

    if reset:
        logger.info(
            "Filters reconciled",
            reset=[d.value for d in reset],
            pinned=sorted(d.value for d in pinned),
        )

    return ReconcileResult(state=state, reset=tuple(reset))
