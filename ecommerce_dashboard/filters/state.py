"""
Filter State

The current partial selection across the four dashboard dimensions and
the pure reducer that applies user updates to it.
"""

from dataclasses import dataclass, replace
from typing import Any, FrozenSet, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, field_validator

from ecommerce_dashboard.store.records import Dimension

# Values a client may send to mean "all values"
WILDCARD_TOKENS = frozenset({"", "all", "*"})


@dataclass(frozen=True)
class FilterState:
    """
    Selection on each dimension; ``None`` is the wildcard.

    Region and category values are matched case-insensitively.
    """
    year: Optional[int] = None
    region: Optional[str] = None
    category: Optional[str] = None
    product: Optional[int] = None

    def get(self, dimension: Dimension) -> Any:
        return getattr(self, dimension.value)

    def with_value(self, dimension: Dimension, value: Any) -> "FilterState":
        return replace(self, **{dimension.value: value})

    def is_wildcard(self, dimension: Dimension) -> bool:
        return self.get(dimension) is None

    @property
    def active_dimensions(self) -> Tuple[Dimension, ...]:
        """Dimensions set to a specific value"""
        return tuple(d for d in Dimension if not self.is_wildcard(d))

    def as_dict(self) -> dict:
        return {d.value: self.get(d) for d in Dimension}


def _is_wildcard_token(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip().lower() in WILDCARD_TOKENS)


class FilterUpdate(BaseModel):
    """
    Partial filter update.

    Only the fields present in the update are applied. ``None``, ``""``
    and ``"all"`` reset a dimension to the wildcard.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: Optional[int] = None
    region: Optional[str] = None
    category: Optional[str] = None
    product: Optional[int] = None

    @field_validator("year", "product", mode="before")
    @classmethod
    def parse_identity(cls, v: Any) -> Any:
        if _is_wildcard_token(v):
            return None
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("region", "category", mode="before")
    @classmethod
    def parse_name(cls, v: Any) -> Any:
        if _is_wildcard_token(v):
            return None
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def dimensions(self) -> FrozenSet[Dimension]:
        """Dimensions explicitly present in the update"""
        return frozenset(Dimension(name) for name in self.model_fields_set)


def _same_value(dimension: Dimension, left: Any, right: Any) -> bool:
    if left is None or right is None:
        return left is right
    if dimension in (Dimension.REGION, Dimension.CATEGORY):
        return str(left).lower() == str(right).lower()
    return left == right


def apply_filter_update(
    state: FilterState,
    update: Union[FilterUpdate, dict],
) -> Tuple[FilterState, FrozenSet[Dimension]]:
    """
    Apply a partial update to a filter state.

    A product selection belongs to the region/category combination it was
    made under: when region or category changes and the update does not
    choose a product itself, product returns to the wildcard.

    Args:
        state: Current filter state
        update: Partial update (model or mapping of dimension names)

    Returns:
        The new state and the dimensions whose value changed
    """
    if not isinstance(update, FilterUpdate):
        update = FilterUpdate.model_validate(update)

    new_state = state
    changed = set()
    for dimension in update.dimensions:
        value = getattr(update, dimension.value)
        if not _same_value(dimension, state.get(dimension), value):
            new_state = new_state.with_value(dimension, value)
            changed.add(dimension)

    scope_changed = changed & {Dimension.REGION, Dimension.CATEGORY}
    if scope_changed and Dimension.PRODUCT not in update.dimensions and new_state.product is not None:
        new_state = new_state.with_value(Dimension.PRODUCT, None)
        changed.add(Dimension.PRODUCT)

    return new_state, frozenset(changed)


def reset_filters() -> FilterState:
    """All dimensions back to the wildcard"""
    return FilterState()
