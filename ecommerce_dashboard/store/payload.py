"""
Dashboard Payload Schema

Pydantic models describing the parsed dashboard JSON: aggregate order and
revenue rows, the product catalog with profitability and satisfaction
attributes, and the KPIs and metadata declared by the export.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AggregateRow(BaseModel):
    """Orders and revenue for one month / region / category cell"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    month: Optional[str] = Field(default=None, validation_alias=AliasChoices("ym", "month"))
    year: Optional[int] = None
    region: str = Field(validation_alias=AliasChoices("state", "region"))
    category: str = Field(
        validation_alias=AliasChoices("category", "product_category_name_english", "product_category_name")
    )
    orders: Optional[float] = None
    revenue: Optional[float] = None

    @field_validator("month", mode="before")
    @classmethod
    def coerce_month(cls, v: Any) -> Any:
        """Accept numeric month keys such as 201703"""
        if isinstance(v, int):
            return str(v)
        return v


class CatalogProduct(BaseModel):
    """Per-product profitability and satisfaction attributes"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    product_id: Optional[Union[str, int]] = None
    name: Optional[str] = Field(default=None, validation_alias=AliasChoices("name", "product_name"))
    category_english: Optional[str] = Field(default=None, validation_alias="product_category_name_english")
    category_raw: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("product_category_name", "category")
    )
    price: Optional[float] = None
    shipping_cost: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("shippingCost", "shipping_cost", "freight_value")
    )
    weight: Optional[float] = None
    rating: Optional[float] = Field(default=None, validation_alias=AliasChoices("rating", "review_score"))
    delivery_time: Optional[float] = Field(default=None, validation_alias=AliasChoices("deliveryTime", "delivery_time"))
    estimated_delivery_time: Optional[float] = Field(
        default=None, validation_alias=AliasChoices("estimatedDeliveryTime", "estimated_delivery_time")
    )
    region: Optional[str] = Field(default=None, validation_alias=AliasChoices("region", "state"))
    order_date: Optional[str] = Field(default=None, validation_alias=AliasChoices("orderDate", "order_date"))
    orders: Optional[float] = None

    @property
    def category(self) -> Optional[str]:
        return self.category_english or self.category_raw


class DeclaredKpis(BaseModel):
    """KPIs precomputed by the export (camelCase keys)"""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

    total_orders: Optional[float] = None
    total_revenue: Optional[float] = None
    average_product_price: Optional[float] = None
    average_delivery_time: Optional[float] = None
    average_customer_rating: Optional[float] = None
    average_rating: Optional[float] = None
    percent_late_deliveries: Optional[float] = None
    negative_reviews: Optional[float] = None
    average_price_per_category: Optional[float] = None
    average_shipping_cost: Optional[float] = None
    average_profit_ratio: Optional[float] = None


class PayloadMeta(BaseModel):
    """Dimension values declared by the export"""

    model_config = ConfigDict(extra="ignore")

    years: List[int] = Field(default_factory=list)
    months: List[str] = Field(default_factory=list)
    states: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)

    @field_validator("months", mode="before")
    @classmethod
    def coerce_months(cls, v: Any) -> Any:
        if isinstance(v, list):
            return [str(item) for item in v]
        return v


class OverviewSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    kpis: DeclaredKpis = Field(default_factory=DeclaredKpis)
    meta: PayloadMeta = Field(default_factory=PayloadMeta)


class SatisfactionSection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    kpis: DeclaredKpis = Field(default_factory=DeclaredKpis)


class ProfitabilitySection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    kpis: DeclaredKpis = Field(default_factory=DeclaredKpis)
    products: List[CatalogProduct] = Field(default_factory=list)


class DashboardPayload(BaseModel):
    """Root of the dashboard JSON payload"""

    model_config = ConfigDict(extra="ignore")

    facts: List[AggregateRow] = Field(default_factory=list)
    overview: OverviewSection = Field(default_factory=OverviewSection)
    satisfaction: SatisfactionSection = Field(default_factory=SatisfactionSection)
    profitability: ProfitabilitySection = Field(default_factory=ProfitabilitySection)

    def declared_kpis(self) -> Dict[str, float]:
        """
        Merge the KPI blocks of every section.

        The overview block wins over satisfaction, which wins over
        profitability; ``averageRating`` fills the customer rating when
        no section declares it directly.
        """
        merged: Dict[str, float] = {}
        for block in (self.profitability.kpis, self.satisfaction.kpis, self.overview.kpis):
            for name, value in block.model_dump().items():
                if value is not None:
                    merged[name] = value
        rating = merged.pop("average_rating", None)
        if "average_customer_rating" not in merged and rating is not None:
            merged["average_customer_rating"] = rating
        return merged
