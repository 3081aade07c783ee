"""
Product and Rating Rankings

Satisfaction and profitability rankings over the filtered catalog
products. Aggregate rows carry no product identity and never rank.
"""

from typing import List

import polars as pl

from .expressions import finite, margin, valid_rating
from .models import CategoryPoint, ProductRanking, ProfitView, RatingBucket

RATING_SCALE = (1, 2, 3, 4, 5)


def rating_distribution(frame: pl.DataFrame) -> List[RatingBucket]:
    """Count of valid ratings per rounded star, every star listed"""
    counts = (
        frame.select(valid_rating().round(0).cast(pl.Int64).alias("rating"))
        .group_by("rating")
        .agg(pl.len().alias("count"))
    )
    by_star = dict(zip(counts.get_column("rating").to_list(), counts.get_column("count").to_list()))
    return [RatingBucket(rating=star, count=by_star.get(star, 0)) for star in RATING_SCALE]


def _products(frame: pl.DataFrame) -> pl.DataFrame:
    return frame.filter(pl.col("product_id").is_not_null()).with_columns(
        margin(ProfitView.WEIGHT).alias("weight_margin"),
    )


def _rankings(frame: pl.DataFrame) -> List[ProductRanking]:
    return [
        ProductRanking(
            product_id=row["product_id"],
            name=row["product_name"] or f"{row['category']} #{row['product_id']}",
            category=row["category"],
            region=row["region"],
            price=finite(row["price"]) or 0.0,
            rating=finite(row["rating"]),
            profit_ratio=finite(row["weight_margin"]),
        )
        for row in frame.iter_rows(named=True)
    ]


def _rated(frame: pl.DataFrame) -> pl.DataFrame:
    rating = pl.col("rating")
    return _products(frame).filter(rating.is_finite() & rating.is_between(1, 5))


def top_rated(frame: pl.DataFrame, limit: int = 5) -> List[ProductRanking]:
    """Best rated products, highest rating first"""
    ranked = _rated(frame).sort(["rating", "product_id"], descending=[True, False])
    return _rankings(ranked.head(limit))


def worst_rated(frame: pl.DataFrame, limit: int = 5) -> List[ProductRanking]:
    """Worst rated products, lowest rating first"""
    ranked = _rated(frame).sort(["rating", "product_id"])
    return _rankings(ranked.head(limit))


def top_profitable(frame: pl.DataFrame, limit: int = 10, min_rating: float = 4.0) -> List[ProductRanking]:
    """
    Most profitable well-rated products.

    Ranked by weight-normalised margin among products rated at least
    ``min_rating``; products without a usable margin are left out.
    """
    ranked = (
        _rated(frame)
        .filter((pl.col("rating") >= min_rating) & pl.col("weight_margin").is_finite())
        .sort(["weight_margin", "product_id"], descending=[True, False])
    )
    return _rankings(ranked.head(limit))


def top_categories(categories: List[CategoryPoint], limit: int = 10) -> List[CategoryPoint]:
    """Highest revenue categories of a revenue-sorted category rollup"""
    return categories[:limit]
