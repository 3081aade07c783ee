"""
Aggregation Output Models

Read-only result shapes shared by every consumer of the engine.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from ecommerce_dashboard.filters import DimensionOptions, FilterState


class ProfitView(str, Enum):
    """
    Profit ratio definitions.

    PRICE: (price - shipping) / price, a margin share of the price
    WEIGHT: (price - shipping) / weight, margin per weight unit
    """
    PRICE = "price"
    WEIGHT = "weight"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class FilterSelection(FrozenModel):
    """Filters a snapshot was computed for"""
    year: Optional[int] = None
    region: Optional[str] = None
    category: Optional[str] = None
    product: Optional[int] = None

    @classmethod
    def from_state(cls, state: FilterState) -> "FilterSelection":
        return cls(**state.as_dict())


class KpiSnapshot(FrozenModel):
    """Headline KPIs; every value is finite"""
    total_orders: int = 0
    total_revenue: float = 0.0
    average_product_price: float = 0.0
    average_delivery_time: float = 0.0
    average_customer_rating: float = 0.0
    percent_late_deliveries: float = 0.0
    negative_reviews: int = 0
    average_shipping_cost: float = 0.0
    average_profit_ratio: float = 0.0
    average_price_per_category: float = 0.0


class MonthlyPoint(FrozenModel):
    month: str
    orders: int
    revenue: float


class GroupTotal(FrozenModel):
    """Orders and revenue of one region"""
    name: str
    orders: int
    revenue: float


class CategoryPoint(FrozenModel):
    name: str
    orders: int
    revenue: float
    average_price: float
    average_rating: float
    average_delivery_time: float
    profit_ratio: float


class ShareEntry(FrozenModel):
    """Slice of a proportional view; ``group_count`` > 1 only for Others"""
    name: str
    value: float
    group_count: int = 1
    is_others: bool = False


class RatingBucket(FrozenModel):
    rating: int
    count: int


class ProductRanking(FrozenModel):
    product_id: int
    name: str
    category: str
    region: str
    price: float
    rating: Optional[float] = None
    profit_ratio: Optional[float] = None


class DashboardSnapshot(FrozenModel):
    """Everything the dashboard renders for one filter state"""
    filters: FilterSelection
    options: DimensionOptions
    record_count: int
    is_empty: bool
    profit_view: ProfitView
    kpis: KpiSnapshot
    monthly: List[MonthlyPoint] = Field(default_factory=list)
    regions: List[GroupTotal] = Field(default_factory=list)
    categories: List[CategoryPoint] = Field(default_factory=list)
    region_shares: List[ShareEntry] = Field(default_factory=list)
    category_shares: List[ShareEntry] = Field(default_factory=list)
    top_categories: List[CategoryPoint] = Field(default_factory=list)
    rating_distribution: List[RatingBucket] = Field(default_factory=list)
    top_rated: List[ProductRanking] = Field(default_factory=list)
    worst_rated: List[ProductRanking] = Field(default_factory=list)
    top_profitable: List[ProductRanking] = Field(default_factory=list)
