"""Relationship dimensions and their attribute accessors.

Each dimension (education, company, location, skills) is one
DimensionStrategy: how to read a person's group keys, how to label them,
how similar two people are, and which group to fall back to when a person
has no featured group.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Union

from people import normalize_company_name
from util import collapse_whitespace, date_key, safe_ratio


# Location placeholder when a profile has a location without a city.
UNKNOWN_KEY = "unknown"

# Keys that never count as a group
SENTINEL_KEYS = frozenset([UNKNOWN_KEY])

COUNTRY_ONLY_STRENGTH = 0.3


class Dimension(str, Enum):
    EDUCATION = "education"
    COMPANY = "company"
    LOCATION = "location"
    SKILLS = "skills"


def school_key(school_id: Optional[str], school: Optional[str]) -> Optional[str]:
    """Group key for one education record.

    Prefers the canonical school id. Without one, the school text is folded
    into a "name_" key so identical school text always yields the same key.
    """
    if school_id:
        return str(school_id)
    if school:
        return "name_" + re.sub(r"[^a-z0-9]", "_", school.lower())
    return None


def skill_key(skill: str) -> str:
    return collapse_whitespace(skill).lower()


def _unique(keys: list[Optional[str]]) -> list[str]:
    seen: dict[str, None] = {}
    for key in keys:
        if key:
            seen.setdefault(key, None)
    return list(seen)


# --------------------------------------------------------------------------- #
# Per-dimension accessors
# --------------------------------------------------------------------------- #

def _education_keys(person: Any) -> list[str]:
    records = getattr(person, "education", None) or []
    return _unique([school_key(e.school_id, e.school) for e in records])


def _education_labels(person: Any) -> dict[str, str]:
    labels: dict[str, str] = {}
    for e in getattr(person, "education", None) or []:
        key = school_key(e.school_id, e.school)
        if key and key not in labels:
            labels[key] = e.school or key
    return labels


def _education_fallback(person: Any) -> Optional[tuple[str, str]]:
    """Most recent school: latest end date, undated meaning still enrolled."""
    records = [
        e for e in getattr(person, "education", None) or []
        if school_key(e.school_id, e.school)
    ]
    if not records:
        return None

    def recency(index_and_record):
        index, record = index_and_record
        end = date_key(record.end_date)
        # Undated end = current = most recent; earlier records win ties.
        return (1, (0, 0), -index) if end is None else (0, end, -index)

    _, latest = max(enumerate(records), key=recency)
    key = school_key(latest.school_id, latest.school)
    return key, latest.school or key


def _company_keys(person: Any) -> list[str]:
    return _unique([c.normalized_name for c in getattr(person, "companies", None) or []])


def _company_labels(person: Any) -> dict[str, str]:
    labels: dict[str, str] = {}
    for c in getattr(person, "companies", None) or []:
        if c.normalized_name and c.normalized_name not in labels:
            labels[c.normalized_name] = c.name or c.normalized_name
    return labels


def _company_fallback(person: Any) -> Optional[tuple[str, str]]:
    """Current employer, else the most recently started one."""
    companies = [c for c in getattr(person, "companies", None) or [] if c.normalized_name]
    if not companies:
        current = getattr(getattr(person, "current_company", None), "name", None)
        if current:
            return normalize_company_name(current), current
        return None
    for company in companies:
        if company.is_current:
            return company.normalized_name, company.name
    dated = [c for c in companies if c.latest_start is not None]
    latest = max(dated, key=lambda c: c.latest_start) if dated else companies[0]
    return latest.normalized_name, latest.name


def _location_keys(person: Any) -> list[str]:
    location = getattr(person, "location", None)
    if not location:
        return []
    if location.city:
        return [collapse_whitespace(location.city).lower()]
    return [UNKNOWN_KEY]


def _location_labels(person: Any) -> dict[str, str]:
    location = getattr(person, "location", None)
    if not location:
        return {}
    if location.city:
        return {collapse_whitespace(location.city).lower(): location.city}
    return {UNKNOWN_KEY: "Unknown"}


def _location_fallback(person: Any) -> Optional[tuple[str, str]]:
    location = getattr(person, "location", None)
    if not location:
        return None
    label = location.full or location.city or location.country
    if not label:
        return None
    return label.lower(), label


def _skill_keys(person: Any) -> list[str]:
    return _unique([skill_key(s) for s in getattr(person, "skills", None) or [] if s])


def _skill_labels(person: Any) -> dict[str, str]:
    labels: dict[str, str] = {}
    for skill in getattr(person, "skills", None) or []:
        if skill:
            labels.setdefault(skill_key(skill), skill)
    return labels


def _skill_fallback(person: Any) -> Optional[tuple[str, str]]:
    labels = _skill_labels(person)
    if not labels:
        return None
    key = next(iter(labels))
    return key, labels[key]


# --------------------------------------------------------------------------- #
# Strength scores
# --------------------------------------------------------------------------- #

def overlap_strength(keys_a: list[str], keys_b: list[str]) -> float:
    """Shared keys over the larger set size (education, company)."""
    a, b = set(keys_a), set(keys_b)
    shared = len(a & b)
    return min(1.0, safe_ratio(shared, max(1, len(a), len(b))))


def jaccard_strength(keys_a: list[str], keys_b: list[str]) -> float:
    """Shared keys over the union (skills)."""
    a, b = set(keys_a), set(keys_b)
    return min(1.0, safe_ratio(len(a & b), len(a | b)))


def _set_strength(accessor: Callable[[Any], list[str]], score: Callable[[list, list], float]):
    def strength(a: Any, b: Any) -> float:
        keys_a = [k for k in accessor(a) if k not in SENTINEL_KEYS]
        keys_b = [k for k in accessor(b) if k not in SENTINEL_KEYS]
        return score(keys_a, keys_b)
    return strength


def _location_strength(a: Any, b: Any) -> float:
    """1.0 for the same city, 0.3 for the same country only, else 0."""
    loc_a = getattr(a, "location", None)
    loc_b = getattr(b, "location", None)
    if not loc_a or not loc_b:
        return 0.0
    city_a = _location_keys(a)
    city_b = _location_keys(b)
    if city_a and city_a == city_b and city_a[0] not in SENTINEL_KEYS:
        return 1.0
    if loc_a.country and loc_b.country and loc_a.country.lower() == loc_b.country.lower():
        return COUNTRY_ONLY_STRENGTH
    return 0.0


def _shared_keys(accessor: Callable[[Any], list[str]]):
    def shared(a: Any, b: Any) -> list[str]:
        keys_b = set(accessor(b))
        return [k for k in accessor(a) if k in keys_b and k not in SENTINEL_KEYS]
    return shared


def _location_shared(a: Any, b: Any) -> list[str]:
    shared = _shared_keys(_location_keys)(a, b)
    if shared:
        return shared
    loc_a = getattr(a, "location", None)
    loc_b = getattr(b, "location", None)
    if loc_a and loc_b and loc_a.country and loc_b.country \
            and loc_a.country.lower() == loc_b.country.lower():
        return [f"country:{loc_a.country.lower()}"]
    return []


# --------------------------------------------------------------------------- #
# Strategy registry
# --------------------------------------------------------------------------- #

@dataclass(frozen=True)
class DimensionStrategy:
    """Accessors and display settings for one relationship dimension.

    Attributes:
        dimension: The Dimension this strategy implements
        name: Display name ("Education")
        description: One-line description for controls
        color: Edge color for pairwise similarity links
        max_distance: Longest preferred edge length for this dimension
        icon: Legend/control icon
        keys: person -> ordered, de-duplicated group keys
        labels: person -> {key: display label}
        strength: (person, person) -> similarity in [0, 1]
        shared: (person, person) -> keys behind the similarity
        fallback: person -> (key, label) used when no featured group applies
    """

    dimension: Dimension
    name: str
    description: str
    color: str
    max_distance: float
    icon: str
    keys: Callable[[Any], list[str]]
    labels: Callable[[Any], dict[str, str]]
    strength: Callable[[Any, Any], float]
    shared: Callable[[Any, Any], list[str]]
    fallback: Callable[[Any], Optional[tuple[str, str]]]


STRATEGIES: dict[Dimension, DimensionStrategy] = {
    Dimension.EDUCATION: DimensionStrategy(
        dimension=Dimension.EDUCATION,
        name="Education",
        description="Connect people who attended the same schools",
        color="#8B5CF6",
        max_distance=120.0,
        icon="🎓",
        keys=_education_keys,
        labels=_education_labels,
        strength=_set_strength(_education_keys, overlap_strength),
        shared=_shared_keys(_education_keys),
        fallback=_education_fallback,
    ),
    Dimension.COMPANY: DimensionStrategy(
        dimension=Dimension.COMPANY,
        name="Company",
        description="Connect people who worked at the same companies",
        color="#10B981",
        max_distance=100.0,
        icon="🏢",
        keys=_company_keys,
        labels=_company_labels,
        strength=_set_strength(_company_keys, overlap_strength),
        shared=_shared_keys(_company_keys),
        fallback=_company_fallback,
    ),
    Dimension.LOCATION: DimensionStrategy(
        dimension=Dimension.LOCATION,
        name="Location",
        description="Connect people from the same cities/regions",
        color="#F59E0B",
        max_distance=150.0,
        icon="📍",
        keys=_location_keys,
        labels=_location_labels,
        strength=_location_strength,
        shared=_location_shared,
        fallback=_location_fallback,
    ),
    Dimension.SKILLS: DimensionStrategy(
        dimension=Dimension.SKILLS,
        name="Skills",
        description="Connect people with similar skill sets",
        color="#EF4444",
        max_distance=80.0,
        icon="💼",
        keys=_skill_keys,
        labels=_skill_labels,
        strength=_set_strength(_skill_keys, jaccard_strength),
        shared=_shared_keys(_skill_keys),
        fallback=_skill_fallback,
    ),
}


def get_strategy(dimension: Union[Dimension, str]) -> DimensionStrategy:
    """Return the strategy for a dimension (enum member or its value).

    Raises:
        ValueError: If the dimension is unknown
    """
    return STRATEGIES[Dimension(dimension)]


def attributes_for(person: Any, dimension: Union[Dimension, str]) -> list[str]:
    """Group keys a person holds in a dimension; empty when data is missing."""
    if person is None:
        return []
    return get_strategy(dimension).keys(person)


def rankable_keys(person: Any, dimension: Union[Dimension, str]) -> list[str]:
    """Group keys minus sentinels such as the unknown location."""
    return [k for k in attributes_for(person, dimension) if k not in SENTINEL_KEYS]


def labels_for(person: Any, dimension: Union[Dimension, str]) -> dict[str, str]:
    if person is None:
        return {}
    return get_strategy(dimension).labels(person)


def strength_of(a: Any, b: Any, dimension: Union[Dimension, str]) -> float:
    """Similarity of two people in a dimension, in [0, 1]."""
    if a is None or b is None:
        return 0.0
    return get_strategy(dimension).strength(a, b)


def shared_keys(a: Any, b: Any, dimension: Union[Dimension, str]) -> list[str]:
    if a is None or b is None:
        return []
    return get_strategy(dimension).shared(a, b)


def fallback_group(person: Any, dimension: Union[Dimension, str]) -> Optional[tuple[str, str]]:
    if person is None:
        return None
    return get_strategy(dimension).fallback(person)
