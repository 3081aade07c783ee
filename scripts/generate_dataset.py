"""
Demo Dashboard Payload Generator

Writes a deterministic synthetic dashboard payload in the JSON export shape.
Usage:
    python scripts/generate_dataset.py
    python scripts/generate_dataset.py --products 500 --seed 7 --output data/dashboard.json
"""

import argparse

from ecommerce_dashboard.config.logging import configure_logging
from ecommerce_dashboard.data import DemoPayloadGenerator
from ecommerce_dashboard.store import load_fact_store_with_report


def main():
    parser = argparse.ArgumentParser(description="Generate a demo dashboard payload")
    parser.add_argument("--output", default=None, help="Output path (default: DATA_DEMO_OUTPUT_PATH)")
    parser.add_argument("--products", type=int, default=300, help="Catalog products (default: 300)")
    parser.add_argument("--base-orders", type=int, default=40, help="Average monthly orders per cell scale")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--years", type=int, nargs="+", default=[2017, 2018], help="Years covered")
    args = parser.parse_args()

    configure_logging()

    generator = DemoPayloadGenerator(seed=args.seed, years=args.years)
    payload = generator.generate(n_products=args.products, base_orders=args.base_orders)

    # Fail early when the payload would not load
    store, report = load_fact_store_with_report(payload)

    path = generator.write(payload, args.output)

    print("=" * 60)
    print("Demo Dashboard Payload")
    print("=" * 60)
    print(f"Output:          {path}")
    print(f"Aggregate rows:  {report.aggregate_rows:,}")
    print(f"Catalog rows:    {report.catalog_rows:,}")
    print(f"Fact records:    {len(store):,}")


if __name__ == "__main__":
    main()
