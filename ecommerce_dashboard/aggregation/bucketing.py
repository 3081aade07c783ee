"""
Top-N + Others Bucketing

Keeps proportional views readable by merging the tail of small groups
into a single "Others" slice.
"""

from typing import Iterable, List, Sequence, Union

from .models import CategoryPoint, GroupTotal, ShareEntry


def bucket_top_n(
    entries: Iterable[ShareEntry],
    threshold_count: int = 7,
    max_groups: int = 6,
    min_share_pct: float = 5.0,
    noun: str = "groups",
) -> List[ShareEntry]:
    """
    Merge the smallest groups of a proportional view into "Others".

    At or below ``threshold_count`` groups the entries pass through
    unchanged. Above it, groups ranked by value (largest first) are kept
    until ``max_groups`` are kept or a group's share of the total falls
    below ``min_share_pct``. That first small group is the last one kept.
    The rest merge into one ``"Others (N <noun>)"`` entry. The total
    value is conserved.

    Args:
        entries: Groups of the view
        threshold_count: Group count above which bucketing applies
        max_groups: Most groups kept
        min_share_pct: Share (percent) below which keeping stops
        noun: Plural noun naming the merged groups

    Returns:
        Kept groups, largest first, followed by the Others entry if any
    """
    entries = list(entries)
    if len(entries) <= threshold_count:
        return entries

    ranked = sorted(entries, key=lambda entry: (-entry.value, entry.name.casefold()))
    total = sum(entry.value for entry in ranked)

    if total <= 0:
        kept = min(max_groups, len(ranked))
    else:
        kept = 0
        for entry in ranked[:max_groups]:
            kept += 1
            if 100.0 * entry.value / total < min_share_pct:
                break

    rest = ranked[kept:]
    if not rest:
        return ranked

    group_count = sum(entry.group_count for entry in rest)
    others = ShareEntry(
        name=f"Others ({group_count} {noun})",
        value=sum(entry.value for entry in rest),
        group_count=group_count,
        is_others=True,
    )
    return ranked[:kept] + [others]


def revenue_shares(groups: Sequence[Union[GroupTotal, CategoryPoint]]) -> List[ShareEntry]:
    """Revenue share entries of rollup groups"""
    return [ShareEntry(name=group.name, value=group.revenue) for group in groups]
