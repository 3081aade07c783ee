"""
Synthetic Dashboard Payload Generator

Generates a realistic dashboard payload for development and demos.
Includes:
- Monthly order and revenue aggregates per region and category
- A product catalog with price, shipping, weight, rating and delivery times
- Declared KPIs and filter metadata

The output is deterministic for a given seed.
"""

import json
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np
from faker import Faker
import structlog

from ecommerce_dashboard.config import get_settings

logger = structlog.get_logger(__name__)


# =============================================================================
# CONFIGURATION
# =============================================================================

REGIONS = ["SP", "RJ", "MG", "RS", "PR", "SC", "BA", "DF", "GO", "ES", "PE", "CE"]

# Relative order volume per region
REGION_WEIGHTS = [0.40, 0.13, 0.12, 0.06, 0.05, 0.04, 0.04, 0.03, 0.03, 0.03, 0.04, 0.03]

# (english name, raw name, typical price)
CATEGORIES = [
    ("bed_bath_table", "cama_mesa_banho", 95.0),
    ("health_beauty", "beleza_saude", 130.0),
    ("sports_leisure", "esporte_lazer", 115.0),
    ("furniture_decor", "moveis_decoracao", 90.0),
    ("computers_accessories", "informatica_acessorios", 115.0),
    ("housewares", "utilidades_domesticas", 90.0),
    ("watches_gifts", "relogios_presentes", 200.0),
    ("telephony", "telefonia", 70.0),
    ("garden_tools", "ferramentas_jardim", 110.0),
    ("auto", "automotivo", 140.0),
]

RATING_WEIGHTS = [0.11, 0.03, 0.08, 0.19, 0.59]


# =============================================================================
# GENERATOR
# =============================================================================

class DemoPayloadGenerator:
    """
    Generate a dashboard payload in the JSON export shape.

    Example:
        generator = DemoPayloadGenerator(seed=7)
        payload = generator.generate(n_products=200)
        generator.write(payload, "data/dashboard.json")
    """

    def __init__(self, seed: int = 42, years: Optional[List[int]] = None):
        self.seed = seed
        self.years = years or [2017, 2018]
        self.rng = np.random.default_rng(seed)
        self.fake = Faker()
        self.fake.seed_instance(seed)

    @property
    def months(self) -> List[str]:
        return [f"{year}-{month:02d}" for year in self.years for month in range(1, 13)]

    def generate_facts(self, base_orders: int = 40) -> List[Dict[str, Any]]:
        """Monthly order and revenue rows per region and category"""
        rows = []
        for index, month in enumerate(self.months):
            # Slow growth with a year-end peak
            trend = 1.0 + 0.03 * index + (0.35 if month.endswith("-11") else 0.0)
            for region, weight in zip(REGIONS, REGION_WEIGHTS):
                for english, _, price in CATEGORIES:
                    expected = base_orders * weight * trend
                    orders = int(self.rng.poisson(expected))
                    if orders == 0:
                        continue
                    unit_price = price * float(self.rng.uniform(0.8, 1.2))
                    rows.append({
                        "ym": month,
                        "state": region,
                        "category": english,
                        "orders": orders,
                        "revenue": round(orders * unit_price, 2),
                    })
        return rows

    def generate_products(self, n: int = 300) -> List[Dict[str, Any]]:
        """Product catalog with profitability and satisfaction attributes"""
        products = []
        category_index = self.rng.integers(0, len(CATEGORIES), n)
        ratings = self.rng.choice([1, 2, 3, 4, 5], size=n, p=RATING_WEIGHTS)
        regions = self.rng.choice(REGIONS, size=n, p=REGION_WEIGHTS)

        for i in range(n):
            english, raw, typical_price = CATEGORIES[category_index[i]]
            price = round(float(self.rng.lognormal(np.log(typical_price), 0.5)), 2)
            estimated = int(self.rng.integers(15, 30))
            # Low ratings go with late deliveries
            delay = float(self.rng.normal(-8 if ratings[i] >= 4 else 4, 5))
            order_date = self.fake.date_between(
                start_date=date(self.years[0], 1, 1),
                end_date=date(self.years[-1], 12, 31),
            )
            products.append({
                "product_id": self.fake.uuid4().replace("-", ""),
                "name": f"{self.fake.word().title()} {english.replace('_', ' ').title()}",
                "product_category_name": raw,
                "product_category_name_english": english,
                "price": price,
                "shippingCost": round(float(self.rng.uniform(0.05, 0.35)) * price, 2),
                "weight": int(self.rng.integers(100, 15000)),
                "rating": int(ratings[i]),
                "deliveryTime": max(1, round(estimated + delay)),
                "estimatedDeliveryTime": estimated,
                "region": str(regions[i]),
                "orderDate": order_date.isoformat(),
            })
        return products

    def generate(self, n_products: int = 300, base_orders: int = 40) -> Dict[str, Any]:
        """Generate the complete payload"""
        facts = self.generate_facts(base_orders)
        products = self.generate_products(n_products)

        total_orders = sum(row["orders"] for row in facts)
        total_revenue = round(sum(row["revenue"] for row in facts), 2)
        ratings = [p["rating"] for p in products]
        late = sum(1 for p in products if p["deliveryTime"] > p["estimatedDeliveryTime"])

        payload = {
            "facts": facts,
            "overview": {
                "kpis": {
                    "totalOrders": total_orders,
                    "totalRevenue": total_revenue,
                    "averageProductPrice": round(total_revenue / total_orders, 2) if total_orders else 0,
                    "averageDeliveryTime": round(float(np.mean([p["deliveryTime"] for p in products])), 2),
                    "averageCustomerRating": round(float(np.mean(ratings)), 2),
                },
                "meta": {
                    "years": self.years,
                    "months": self.months,
                    "states": sorted(REGIONS),
                    "categories": sorted(c[0] for c in CATEGORIES),
                },
            },
            "satisfaction": {
                "kpis": {
                    "averageRating": round(float(np.mean(ratings)), 2),
                    "percentLateDeliveries": round(100.0 * late / len(products), 2) if products else 0,
                    "negativeReviews": sum(1 for r in ratings if r <= 2),
                },
            },
            "profitability": {
                "kpis": {
                    "averageShippingCost": round(float(np.mean([p["shippingCost"] for p in products])), 2),
                },
                "products": products,
            },
        }

        logger.info(
            "Demo payload generated",
            seed=self.seed,
            facts=len(facts),
            products=len(products),
            total_orders=total_orders,
        )
        return payload

    def write(self, payload: Dict[str, Any], path: Optional[Union[str, Path]] = None) -> Path:
        """Save a payload as JSON"""
        path = Path(path or get_settings().data.demo_output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Demo payload saved", path=str(path))
        return path
