"""
Fact Store

Immutable, in-memory columnar store of fact records. Built once at load
time; every filter or aggregation derives new frames from it and never
changes it.
"""

from typing import Any, Dict, Iterable, List, Optional

import polars as pl
import structlog

from .records import FACT_SCHEMA, FactRecord

logger = structlog.get_logger(__name__)


def _build_frame(records: List[FactRecord]) -> pl.DataFrame:
    """Columnar frame with derived dimension and matching columns"""
    columns: Dict[str, List[Any]] = {name: [] for name in FACT_SCHEMA}
    for record in records:
        for name in FACT_SCHEMA:
            if name == "revenue":
                columns[name].append(record.total_revenue)
            else:
                columns[name].append(getattr(record, name))

    frame = pl.DataFrame(columns, schema=FACT_SCHEMA)

    return frame.with_columns(
        pl.col("order_date").dt.year().cast(pl.Int64).alias("year"),
        pl.col("order_date").dt.strftime("%Y-%m").alias("month"),
        pl.col("region").str.to_lowercase().alias("region_key"),
        pl.col("category").str.to_lowercase().alias("category_key"),
    )


class FactStore:
    """
    Read-only collection of fact records backed by a Polars DataFrame.

    Besides the fact columns the frame carries ``year`` and ``month``
    (``YYYY-MM``) derived from the order date, and lower-cased
    ``region_key`` / ``category_key`` used for case-insensitive matching.

    Example:
        store = FactStore.from_records(records)
        store.frame.filter(pl.col("region_key") == "sp")
    """

    def __init__(
        self,
        frame: pl.DataFrame,
        declared_kpis: Optional[Dict[str, float]] = None,
        meta: Optional[Dict[str, List[Any]]] = None,
    ):
        self._frame = frame
        self._declared_kpis = dict(declared_kpis or {})
        self._meta = dict(meta or {})

    @classmethod
    def from_records(
        cls,
        records: Iterable[FactRecord],
        declared_kpis: Optional[Dict[str, float]] = None,
        meta: Optional[Dict[str, List[Any]]] = None,
    ) -> "FactStore":
        """Build a store from fact records"""
        records = list(records)
        frame = _build_frame(records)
        logger.debug("Fact store built", records=len(records))
        return cls(frame, declared_kpis=declared_kpis, meta=meta)

    @property
    def frame(self) -> pl.DataFrame:
        """Full fact frame (Polars frames are never modified in place)"""
        return self._frame

    @property
    def declared_kpis(self) -> Dict[str, float]:
        """KPIs declared by the source payload, keyed by KPI field name"""
        return dict(self._declared_kpis)

    @property
    def meta(self) -> Dict[str, List[Any]]:
        return dict(self._meta)

    @property
    def is_empty(self) -> bool:
        return self._frame.height == 0

    def __len__(self) -> int:
        return self._frame.height

    def records(self) -> List[FactRecord]:
        """Materialize the store back into fact records"""
        rows = self._frame.select(list(FACT_SCHEMA)).iter_rows(named=True)
        return [FactRecord(**row) for row in rows]
