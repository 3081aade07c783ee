"""
Fact Store Loading

Normalizes a parsed dashboard payload into fact records:
- Aggregate month/region/category rows become coarse records carrying
  orders and revenue
- Catalog products become per-product records carrying profitability and
  satisfaction attributes
- Invalid individual values are stored as absent, never fatal
- Structural problems raise ``LoadError``
"""

import json
import math
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, List, Optional, Tuple, Union

import structlog
from pydantic import ValidationError

from ecommerce_dashboard.config import get_settings
from ecommerce_dashboard.quality import ValidationResult, create_fact_validator
from .fact_store import FactStore
from .payload import AggregateRow, CatalogProduct, DashboardPayload
from .records import FactRecord

logger = structlog.get_logger(__name__)

UNSPECIFIED = "unspecified"


class LoadError(Exception):
    """The fact store could not be built from its source"""


@dataclass
class LoadReport:
    """Counters collected while normalizing a payload"""
    aggregate_rows: int = 0
    catalog_rows: int = 0
    records: int = 0
    skipped_rows: int = 0
    coerced_values: int = 0
    validation: Optional[ValidationResult] = None


def _parse_month(value: Optional[str], year: Optional[int]) -> Optional[date]:
    """First day of the month of a ``YYYY-MM`` (or longer ISO) or ``YYYYMM`` key"""
    if value:
        value = value.strip()
        fmt = "%Y%m" if len(value) == 6 and value.isdigit() else "%Y-%m"
        try:
            parsed = datetime.strptime(value[:7], fmt)
        except ValueError:
            return None
        return parsed.date()
    if year is not None and 1 <= year <= 9999:
        return date(year, 1, 1)
    return None


def _parse_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


class PayloadNormalizer:
    """
    Turns a validated payload into fact records.

    Example:
        normalizer = PayloadNormalizer()
        records = normalizer.normalize(payload)
        normalizer.report.coerced_values
    """

    def __init__(self, fallback_order_year: Optional[int] = None):
        self.fallback_order_year = fallback_order_year or get_settings().data.fallback_order_year
        self.report = LoadReport()

    def _number(self, value: Optional[float], minimum: float = 0.0, strict: bool = False) -> Optional[float]:
        """Finite value above the bound, else ``None`` (counted as coerced)"""
        if value is None:
            return None
        if not math.isfinite(value) or value < minimum or (strict and value == minimum):
            self.report.coerced_values += 1
            return None
        return float(value)

    def _rating(self, value: Optional[float]) -> Optional[float]:
        # A zero rating means the product has no review
        if value is None or value == 0:
            return None
        if not math.isfinite(value) or not 1 <= value <= 5:
            self.report.coerced_values += 1
            return None
        return float(value)

    def _normalize_aggregate(self, row: AggregateRow, record_id: int) -> Optional[FactRecord]:
        order_date = _parse_month(row.month, row.year)
        if order_date is None:
            logger.warning("Skipping aggregate row without a valid month", month=row.month, record_id=record_id)
            self.report.skipped_rows += 1
            return None

        orders = self._number(row.orders)
        revenue = self._number(row.revenue)
        orders = int(round(orders)) if orders is not None else 0
        revenue = revenue if revenue is not None else 0.0

        return FactRecord(
            record_id=record_id,
            category=row.category.strip() or UNSPECIFIED,
            region=row.region.strip() or UNSPECIFIED,
            order_date=order_date,
            price=revenue / orders if orders > 0 else revenue,
            orders=orders,
            revenue=revenue,
        )

    def _catalog_order_date(self, index: int, meta_years: List[int], meta_months: List[int], month_keys: List[date]) -> date:
        """Deterministic order date for a product exported without one"""
        day = (index % 28) + 1
        if meta_years:
            year = meta_years[index % len(meta_years)]
            month = meta_months[index % len(meta_months)] if meta_months else 1
            return date(year, month, day)
        if month_keys:
            key = month_keys[index % len(month_keys)]
            return date(key.year, key.month, day)
        return date(self.fallback_order_year, 1, day)

    def _normalize_product(
        self,
        product: CatalogProduct,
        index: int,
        record_id: int,
        regions: List[str],
        meta_years: List[int],
        meta_months: List[int],
        month_keys: List[date],
        default_orders: int,
    ) -> FactRecord:
        category = (product.category or "").strip() or UNSPECIFIED
        region = (product.region or "").strip()
        if not region:
            region = regions[index % len(regions)] if regions else UNSPECIFIED

        order_date = _parse_date(product.order_date)
        if order_date is None:
            if product.order_date:
                self.report.coerced_values += 1
            order_date = self._catalog_order_date(index, meta_years, meta_months, month_keys)

        price = self._number(product.price)
        if price is None:
            if product.price is not None:
                logger.debug("Product price coerced to zero", product_id=product.product_id)
            price = 0.0

        orders = self._number(product.orders)
        orders = int(round(orders)) if orders is not None else default_orders

        return FactRecord(
            record_id=record_id,
            category=category,
            region=region,
            order_date=order_date,
            price=price,
            shipping_cost=self._number(product.shipping_cost),
            weight=self._number(product.weight, strict=True),
            rating=self._rating(product.rating),
            delivery_time=self._number(product.delivery_time),
            estimated_delivery_time=self._number(product.estimated_delivery_time),
            orders=orders,
            product_id=index + 1,
            product_name=product.name or f"{category} #{index + 1}",
            source_product_id=str(product.product_id) if product.product_id is not None else None,
        )

    def normalize(self, payload: DashboardPayload) -> List[FactRecord]:
        """Normalize both payload sources into fact records"""
        records: List[FactRecord] = []
        self.report.aggregate_rows = len(payload.facts)
        self.report.catalog_rows = len(payload.profitability.products)

        for row in payload.facts:
            record = self._normalize_aggregate(row, record_id=len(records) + 1)
            if record is not None:
                records.append(record)

        meta = payload.overview.meta
        regions = sorted({r.region for r in records}, key=str.casefold) or list(meta.states)
        month_keys = sorted({r.order_date for r in records})
        meta_years = [year for year in meta.years if 1 <= year <= 9999]
        meta_months = []
        for value in meta.months:
            try:
                month = int(value[-2:])
            except ValueError:
                continue
            if 1 <= month <= 12:
                meta_months.append(month)

        # Aggregate rows already count the catalog's orders
        default_orders = 0 if records else 1

        for index, product in enumerate(payload.profitability.products):
            records.append(
                self._normalize_product(
                    product,
                    index=index,
                    record_id=len(records) + 1,
                    regions=regions,
                    meta_years=meta_years,
                    meta_months=meta_months,
                    month_keys=month_keys,
                    default_orders=default_orders,
                )
            )

        self.report.records = len(records)
        return records


def load_fact_store_with_report(
    payload: Any,
    fallback_order_year: Optional[int] = None,
) -> Tuple[FactStore, LoadReport]:
    """
    Build a fact store from a parsed payload.

    Args:
        payload: Parsed JSON structure (mapping) or a DashboardPayload
        fallback_order_year: Year for products without any derivable date

    Returns:
        The store and the normalization report

    Raises:
        LoadError: Payload is malformed, empty, or fails error-level checks
    """
    if isinstance(payload, DashboardPayload):
        parsed = payload
    else:
        try:
            parsed = DashboardPayload.model_validate(payload)
        except ValidationError as e:
            logger.error("Dashboard payload rejected", errors=e.error_count())
            raise LoadError(f"Malformed dashboard payload: {e}") from e

    normalizer = PayloadNormalizer(fallback_order_year=fallback_order_year)
    records = normalizer.normalize(parsed)
    report = normalizer.report

    if not records:
        raise LoadError("Dashboard payload contains no fact rows")

    meta = parsed.overview.meta.model_dump()
    store = FactStore.from_records(records, declared_kpis=parsed.declared_kpis(), meta=meta)

    report.validation = create_fact_validator().validate(store.frame)
    if report.validation.errors:
        names = ", ".join(check.name for check in report.validation.errors)
        raise LoadError(f"Fact store failed quality checks: {names}")

    logger.info(
        "Fact store loaded",
        aggregate_rows=report.aggregate_rows,
        catalog_rows=report.catalog_rows,
        records=report.records,
        skipped_rows=report.skipped_rows,
        coerced_values=report.coerced_values,
    )
    return store, report


def load_fact_store(payload: Any, fallback_order_year: Optional[int] = None) -> FactStore:
    """Build a fact store from a parsed payload (see ``load_fact_store_with_report``)"""
    store, _ = load_fact_store_with_report(payload, fallback_order_year=fallback_order_year)
    return store


def load_fact_store_from_path(path: Union[str, Path], fallback_order_year: Optional[int] = None) -> FactStore:
    """Read a JSON payload from disk and build the fact store"""
    path = Path(path)
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Dashboard payload unreadable", path=str(path), error=str(e))
        raise LoadError(f"Cannot read dashboard payload {path}: {e}") from e
    return load_fact_store(payload, fallback_order_year=fallback_order_year)
