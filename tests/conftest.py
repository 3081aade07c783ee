"""
Test Suite Configuration
"""
from datetime import date
from typing import Any, Dict, List

import pytest

from ecommerce_dashboard.config import EngineSettings, Settings
from ecommerce_dashboard.store import FactRecord, FactStore


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings"""
    return Settings(
        app_env="testing",
        debug=True,
    )


@pytest.fixture
def engine_settings() -> EngineSettings:
    """Default engine settings, independent of the environment"""
    return EngineSettings(
        bucket_threshold_count=7,
        bucket_max_groups=6,
        bucket_min_share_pct=5.0,
        option_scan_limit=None,
        profit_view="price",
    )


@pytest.fixture
def scenario_records() -> List[FactRecord]:
    """Three single-order records over categories A/B and regions X/Y"""
    return [
        FactRecord(record_id=1, category="A", region="X", order_date=date(2018, 1, 5), price=100.0),
        FactRecord(record_id=2, category="A", region="Y", order_date=date(2018, 2, 5), price=50.0),
        FactRecord(record_id=3, category="B", region="X", order_date=date(2018, 2, 9), price=200.0),
    ]


@pytest.fixture
def scenario_store(scenario_records) -> FactStore:
    return FactStore.from_records(scenario_records)


@pytest.fixture
def catalog_records() -> List[FactRecord]:
    """Per-product records carrying profitability and satisfaction attributes"""
    rows = [
        # id, category, region, date, price, shipping, weight, rating, delivery, estimated
        (1, "electronics", "SP", date(2017, 3, 2), 200.0, 20.0, 1000.0, 5.0, 8.0, 10.0),
        (2, "electronics", "RJ", date(2017, 7, 14), 100.0, 30.0, 500.0, 4.0, 12.0, 10.0),
        (3, "Electronics", "sp", date(2018, 1, 20), 300.0, 60.0, 2000.0, 2.0, 20.0, 15.0),
        (4, "toys", "MG", date(2018, 5, 11), 50.0, 10.0, 250.0, 1.0, 30.0, 20.0),
        (5, "toys", "SP", date(2018, 6, 1), 80.0, None, 400.0, None, None, 12.0),
        (6, "garden", "RJ", date(2018, 6, 30), 120.0, 24.0, None, 4.0, 9.0, 9.0),
    ]
    return [
        FactRecord(
            record_id=record_id,
            category=category,
            region=region,
            order_date=order_date,
            price=price,
            shipping_cost=shipping,
            weight=weight,
            rating=rating,
            delivery_time=delivery,
            estimated_delivery_time=estimated,
            product_id=record_id,
            product_name=f"Product {record_id}",
        )
        for record_id, category, region, order_date, price, shipping, weight, rating, delivery, estimated in rows
    ]


@pytest.fixture
def catalog_store(catalog_records) -> FactStore:
    return FactStore.from_records(catalog_records)


@pytest.fixture
def sample_payload() -> Dict[str, Any]:
    """Payload in the JSON export shape with aggregate rows and a catalog"""
    return {
        "facts": [
            {"ym": "2017-01", "state": "SP", "category": "electronics", "orders": 10, "revenue": 1000.0},
            {"ym": "2017-02", "state": "RJ", "category": "electronics", "orders": 4, "revenue": 400.0},
            {"ym": "2017-02", "state": "SP", "category": "toys", "orders": 5, "revenue": 250.0},
            {"ym": "2018-03", "state": "MG", "category": "garden", "orders": 2, "revenue": 300.0},
        ],
        "overview": {
            "kpis": {"totalOrders": 21, "totalRevenue": 1950.0, "averageDeliveryTime": 11.5},
            "meta": {
                "years": [2017, 2018],
                "months": ["2017-01", "2017-02", "2018-03"],
                "states": ["MG", "RJ", "SP"],
                "categories": ["electronics", "garden", "toys"],
            },
        },
        "satisfaction": {"kpis": {"averageRating": 4.1, "percentLateDeliveries": 12.0, "negativeReviews": 3}},
        "profitability": {
            "kpis": {"averageShippingCost": 18.0},
            "products": [
                {
                    "product_id": "a1",
                    "product_category_name": "eletronicos",
                    "product_category_name_english": "electronics",
                    "price": 120.0,
                    "shippingCost": 12.0,
                    "weight": 800,
                    "rating": 5,
                    "deliveryTime": 7,
                    "estimatedDeliveryTime": 10,
                },
                {
                    "product_id": "b2",
                    "product_category_name": "brinquedos",
                    "price": 40.0,
                    "shippingCost": 8.0,
                    "weight": 0,
                    "rating": 0,
                    "deliveryTime": 15,
                    "estimatedDeliveryTime": 12,
                },
                {
                    "product_id": "c3",
                    "product_category_name_english": "garden",
                    "price": -5.0,
                    "shippingCost": 4.0,
                    "weight": 300,
                    "rating": 2,
                    "region": "RJ",
                    "orderDate": "2018-03-04",
                },
            ],
        },
    }
