"""Legend aggregation for generated networks.

One row per featured group, ranked by member count. In pairwise mode the
people drawn in the overflow color collapse into a single "Other ..." row
whose count is the number of distinct such people.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Optional

from dimensions import get_strategy, rankable_keys
from ranking import GroupRanking


GROUP_ENTRY = "group"
OTHER_ENTRY = "other"
OTHER_KEY = "__other__"


@dataclass(frozen=True)
class LegendEntry:
    """One legend row.

    Attributes:
        key: Group key (OTHER_KEY for the collapsed row)
        label: Display label
        color: Swatch color
        count: People in the group (distinct people for the collapsed row)
        kind: "group" or "other"
        group_count: Number of groups collapsed into an "other" row
    """

    key: str
    label: str
    color: str
    count: int
    kind: str = GROUP_ENTRY
    group_count: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "key": self.key,
            "label": self.label,
            "color": self.color,
            "count": self.count,
            "type": self.kind,
        }
        if self.group_count is not None:
            data["groupCount"] = self.group_count
        return data


def featured_entries(ranking: GroupRanking) -> list[LegendEntry]:
    """Featured groups sorted by count descending, then label."""
    entries = [
        LegendEntry(key=g.key, label=g.label, color=g.color, count=g.count)
        for g in ranking.top_groups
    ]
    return sorted(entries, key=lambda e: (-e.count, e.label))


def other_entry(ranking: GroupRanking, people: Iterable[Any]) -> Optional[LegendEntry]:
    """Collapse the gray people into one row.

    Gray people hold at least one key but no featured one, so they are the
    ones drawn in the overflow color. The count is distinct people and k is
    the distinct keys they hold. People already counted in a featured row
    are left out. Returns None when nobody is gray.
    """
    gray_keys: set[str] = set()
    gray_people: set[str] = set()
    for person in people:
        keys = rankable_keys(person, ranking.dimension)
        if keys and not ranking.featured_memberships(person):
            gray_keys.update(keys)
            gray_people.add(getattr(person, "id", None) or id(person))

    if not gray_keys:
        return None

    name = get_strategy(ranking.dimension).name
    return LegendEntry(
        key=OTHER_KEY,
        label=f"Other {name} ({len(gray_keys)})",
        color=ranking.other_color,
        count=len(gray_people),
        kind=OTHER_ENTRY,
        group_count=len(gray_keys),
    )


def build_legend(ranking: GroupRanking, people: Iterable[Any], mode: str) -> list[LegendEntry]:
    """Build legend rows for a generated network.

    Args:
        ranking: Ranking computed for this generation pass
        people: Retained population
        mode: "pairwise" or "bipartite"

    Returns:
        Featured rows, plus the collapsed "Other" row in pairwise mode
    """
    entries = featured_entries(ranking)
    if mode == "pairwise":
        other = other_entry(ranking, people)
        if other is not None:
            entries.append(other)
    return entries
