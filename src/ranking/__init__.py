"""Group ranking and palette assignment.

Counts how many people hold each group key in a dimension, features the
top N, and gives each featured group one palette color by rank. Everything
else shares the overflow color. The resulting GroupRanking is computed once
per generation pass and handed to both the network builder and the legend.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Sequence, Union

from config import OTHER_COLOR, PALETTE
from dimensions import Dimension, get_strategy, labels_for, rankable_keys


@dataclass(frozen=True)
class RankedGroup:
    """A featured group: key, display label, member count, rank and color."""

    key: str
    label: str
    count: int
    rank: int
    color: str


@dataclass(frozen=True)
class GroupRanking:
    """Result of ranking one population in one dimension.

    Attributes:
        dimension: Dimension that was ranked
        requested_top_n: top_n as requested by the caller
        effective_top_n: top_n after clamping to the palette
        top_groups: Featured groups in rank order
        counts: Member count for every group key (featured or not)
        labels: Display label for every group key
        other_color: Color for every non-featured key
    """

    dimension: Dimension
    requested_top_n: int
    effective_top_n: int
    top_groups: tuple[RankedGroup, ...] = ()
    counts: dict[str, int] = field(default_factory=dict)
    labels: dict[str, str] = field(default_factory=dict)
    other_color: str = OTHER_COLOR

    @property
    def colors(self) -> dict[str, str]:
        """key -> color for featured groups."""
        return {g.key: g.color for g in self.top_groups}

    def _by_key(self) -> dict[str, RankedGroup]:
        return {g.key: g for g in self.top_groups}

    def featured_keys(self) -> list[str]:
        return [g.key for g in self.top_groups]

    def is_featured(self, key: str) -> bool:
        return key in self._by_key()

    def rank_of(self, key: str) -> Optional[int]:
        group = self._by_key().get(key)
        return group.rank if group else None

    def color_for(self, key: Optional[str]) -> str:
        """Palette color for a featured key, overflow color otherwise."""
        if key is None:
            return self.other_color
        group = self._by_key().get(key)
        return group.color if group else self.other_color

    def label_for(self, key: str) -> str:
        return self.labels.get(key, key)

    def featured_memberships(self, person: Any) -> list[str]:
        """The person's featured keys, best rank first."""
        keys = [k for k in rankable_keys(person, self.dimension) if self.is_featured(k)]
        return sorted(keys, key=self.rank_of)

    def overflow_keys(self) -> list[str]:
        """Non-featured keys, ordered like the ranking (count desc, key asc)."""
        featured = self._by_key()
        rest = [k for k in self.counts if k not in featured]
        return sorted(rest, key=lambda k: (-self.counts[k], k))


def effective_top_n(top_n: Any, palette: Sequence[str] = PALETTE) -> int:
    """Clamp a requested top N into [1, len(palette)]."""
    try:
        value = int(top_n)
    except (TypeError, ValueError):
        value = len(palette)
    return max(1, min(value, len(palette))) if palette else 0


def tally_groups(people: Iterable[Any], dimension: Union[Dimension, str]) -> Counter:
    """Count people per group key (each person counts once per key)."""
    counts: Counter = Counter()
    for person in people:
        counts.update(set(rankable_keys(person, dimension)))
    return counts


def resolve_labels(people: Iterable[Any], dimension: Union[Dimension, str]) -> dict[str, str]:
    """Display label per key, taken from the first person holding it."""
    labels: dict[str, str] = {}
    for person in people:
        for key, label in labels_for(person, dimension).items():
            labels.setdefault(key, label)
    return labels


def rank_groups(
    people: Sequence[Any],
    dimension: Union[Dimension, str],
    top_n: Any,
    palette: Sequence[str] = PALETTE,
    other_color: str = OTHER_COLOR,
) -> GroupRanking:
    """Rank group keys by frequency and assign palette colors.

    Ties on count are broken by key so identical input always produces the
    same order and colors.

    Args:
        people: Retained population
        dimension: Relationship dimension
        top_n: Requested number of featured groups (clamped to the palette)
        palette: Colors assigned by rank
        other_color: Color for non-featured groups

    Returns:
        GroupRanking
    """
    dimension = get_strategy(dimension).dimension
    people = list(people)
    limit = effective_top_n(top_n, palette)

    counts = tally_groups(people, dimension)
    labels = resolve_labels(people, dimension)
    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    top_groups = tuple(
        RankedGroup(
            key=key,
            label=labels.get(key, key),
            count=count,
            rank=rank,
            color=palette[rank],
        )
        for rank, (key, count) in enumerate(ordered[:limit])
    )

    try:
        requested = int(top_n)
    except (TypeError, ValueError):
        requested = limit

    return GroupRanking(
        dimension=dimension,
        requested_top_n=requested,
        effective_top_n=limit,
        top_groups=top_groups,
        counts=dict(counts),
        labels=labels,
        other_color=other_color,
    )
