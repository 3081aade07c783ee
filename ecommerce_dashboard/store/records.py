"""
Fact Records

The normalized product-in-order observation every aggregation works on,
and the filter dimensions that slice it.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional

import polars as pl


class Dimension(str, Enum):
    """Filter dimensions of the dashboard"""
    YEAR = "year"
    REGION = "region"
    CATEGORY = "category"
    PRODUCT = "product"


# Column holding the raw value of each dimension
DIMENSION_COLUMNS = {
    Dimension.YEAR: "year",
    Dimension.REGION: "region",
    Dimension.CATEGORY: "category",
    Dimension.PRODUCT: "product_id",
}

# Column used to match a dimension value (case-insensitive for text)
DIMENSION_MATCH_COLUMNS = {
    Dimension.YEAR: "year",
    Dimension.REGION: "region_key",
    Dimension.CATEGORY: "category_key",
    Dimension.PRODUCT: "product_id",
}

TEXT_DIMENSIONS = frozenset({Dimension.REGION, Dimension.CATEGORY})


@dataclass(frozen=True)
class FactRecord:
    """
    One normalized product-in-order observation.

    Optional attributes are ``None`` when the source did not carry a usable
    value; each metric only considers the records that carry its inputs.
    """
    record_id: int
    category: str
    region: str
    order_date: date
    price: float
    shipping_cost: Optional[float] = None
    weight: Optional[float] = None
    rating: Optional[float] = None
    delivery_time: Optional[float] = None
    estimated_delivery_time: Optional[float] = None
    orders: int = 1
    revenue: Optional[float] = None
    product_id: Optional[int] = None
    product_name: Optional[str] = None
    source_product_id: Optional[str] = None

    @property
    def total_revenue(self) -> float:
        """Explicit revenue, or price times order count"""
        if self.revenue is not None:
            return self.revenue
        return self.price * self.orders

    @property
    def year(self) -> int:
        return self.order_date.year

    @property
    def month(self) -> str:
        return self.order_date.strftime("%Y-%m")


FACT_SCHEMA = {
    "record_id": pl.Int64,
    "product_id": pl.Int64,
    "product_name": pl.Utf8,
    "source_product_id": pl.Utf8,
    "category": pl.Utf8,
    "region": pl.Utf8,
    "order_date": pl.Date,
    "price": pl.Float64,
    "shipping_cost": pl.Float64,
    "weight": pl.Float64,
    "rating": pl.Float64,
    "delivery_time": pl.Float64,
    "estimated_delivery_time": pl.Float64,
    "orders": pl.Int64,
    "revenue": pl.Float64,
}
