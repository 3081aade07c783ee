"""
Dashboard API Endpoints

Snapshot, cascading options and filter state of the dashboard session.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from ecommerce_dashboard.aggregation import DashboardSnapshot, FilterSelection, ProfitView
from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.filters import DimensionOptions, FilterUpdate
from ecommerce_dashboard.session import DashboardSession, DashboardUnavailableError
from ecommerce_dashboard.store import LoadError

router = APIRouter()


class FilterStateResponse(BaseModel):
    """Current filters and the dimensions the last update reset"""
    filters: FilterSelection
    options: DimensionOptions
    reset: List[str] = []


class ReloadResponse(BaseModel):
    status: str
    records: int


def get_session(request: Request) -> DashboardSession:
    return request.app.state.session


def _unavailable(error: DashboardUnavailableError) -> HTTPException:
    return HTTPException(status_code=503, detail=str(error))


@router.get("", response_model=DashboardSnapshot)
async def get_dashboard(
    profit_view: Optional[ProfitView] = Query(None, description="Profit ratio definition"),
    session: DashboardSession = Depends(get_session),
) -> DashboardSnapshot:
    """Snapshot of the current filter state"""
    try:
        return session.snapshot(profit_view)
    except DashboardUnavailableError as e:
        raise _unavailable(e)


@router.get("/options", response_model=DimensionOptions)
async def get_options(session: DashboardSession = Depends(get_session)) -> DimensionOptions:
    """Valid values of every dimension under the current filters"""
    try:
        return session.options()
    except DashboardUnavailableError as e:
        raise _unavailable(e)


@router.get("/filters", response_model=FilterStateResponse)
async def get_filters(session: DashboardSession = Depends(get_session)) -> FilterStateResponse:
    try:
        options = session.options()
    except DashboardUnavailableError as e:
        raise _unavailable(e)
    return FilterStateResponse(filters=FilterSelection.from_state(session.filters), options=options)


@router.patch("/filters", response_model=FilterStateResponse)
async def update_filters(
    update: FilterUpdate,
    session: DashboardSession = Depends(get_session),
) -> FilterStateResponse:
    """
    Apply a partial filter update.

    Fields left out are unchanged; ``null``, ``""`` or ``"all"`` select
    every value. Selections made unreachable by the update are reset and
    listed in ``reset``.
    """
    try:
        result = session.apply(update)
        options = session.options()
    except DashboardUnavailableError as e:
        raise _unavailable(e)
    return FilterStateResponse(
        filters=FilterSelection.from_state(result.state),
        options=options,
        reset=[d.value for d in result.reset],
    )


@router.post("/filters/reset", response_model=FilterStateResponse)
async def reset_filters(session: DashboardSession = Depends(get_session)) -> FilterStateResponse:
    try:
        session.reset_filters()
        options = session.options()
    except DashboardUnavailableError as e:
        raise _unavailable(e)
    return FilterStateResponse(filters=FilterSelection.from_state(session.filters), options=options)


@router.post("/reload", response_model=ReloadResponse)
async def reload_dashboard(session: DashboardSession = Depends(get_session)) -> ReloadResponse:
    """Reload the payload from the configured path"""
    path = get_settings().data.payload_path
    try:
        store = session.load_from_path(path)
    except LoadError as e:
        raise HTTPException(status_code=503, detail=f"Dashboard data failed to load: {e}")
    return ReloadResponse(status=session.status.value, records=len(store))
