"""Network builder: people to visual nodes, edges and legend.

Supports two topologies:
- pairwise: person-to-person similarity links (all-pairs scan, bounded by
  max_nodes)
- bipartite: person-to-group links, one group node per featured group

Both share people selection, group ranking and legend building.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Collection, Iterable, Optional, Sequence

from config import NODE_SIZE, NetworkConfig
from dimensions import DimensionStrategy, get_strategy
from legend import LegendEntry, build_legend
from ranking import GroupRanking, RankedGroup, rank_groups
from util import safe_ratio


PAIRWISE = "pairwise"
BIPARTITE = "bipartite"

PERSON = "person"
GROUP = "group"

SIMILARITY_EDGE = "similarity"
MEMBERSHIP_EDGE = "person-to-group"

GROUP_LABEL_LIMIT = 20


@dataclass
class Node:
    """A visual node: one person or, in bipartite mode, one featured group.

    Nodes hold data only. Click behaviour is registered separately by node
    id (see interaction.InteractionController).
    """

    id: str
    label: str
    kind: str
    radius: float
    color: str
    full_name: str = ""
    secondary_colors: list[str] = field(default_factory=list)
    group_key: Optional[str] = None
    group_label: Optional[str] = None
    featured_groups: list[str] = field(default_factory=list)
    is_isolated: bool = False
    member_count: Optional[int] = None
    degree: int = 0
    dimension: Optional[str] = None
    person: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Cytoscape-style node dict with a data property."""
        data: dict[str, Any] = {
            "id": self.id,
            "label": self.label,
            "type": self.kind,
            "size": self.radius,
            "color": self.color,
        }

        # Optional fields
        if self.full_name:
            data["fullName"] = self.full_name
        if self.secondary_colors:
            data["multiColors"] = list(self.secondary_colors)
        if self.group_key is not None:
            data["group"] = self.group_key
        if self.group_label is not None:
            data["groupLabel"] = self.group_label
        if self.featured_groups:
            data["topGroups"] = list(self.featured_groups)
        if self.kind == PERSON:
            data["isIsolated"] = self.is_isolated
            data["degree"] = self.degree
        if self.member_count is not None:
            data["memberCount"] = self.member_count
        if self.dimension:
            data["connectionType"] = self.dimension
        if self.person is not None and hasattr(self.person, "summary"):
            data["person"] = self.person.summary()

        return {"data": data}


@dataclass
class Edge:
    """A visual link between two node ids."""

    id: str
    source: str
    target: str
    strength: float
    color: str
    width: float
    opacity: float
    kind: str
    dimension: str
    distance: Optional[float] = None
    shared_keys: list[str] = field(default_factory=list)
    group_key: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "strength": self.strength,
            "color": self.color,
            "width": self.width,
            "opacity": self.opacity,
            "type": self.kind,
            "connectionType": self.dimension,
        }
        if self.distance is not None:
            data["distance"] = self.distance
        if self.shared_keys:
            data["sharedKeys"] = list(self.shared_keys)
        if self.group_key is not None:
            data["groupKey"] = self.group_key
        return {"data": data}


@dataclass(frozen=True)
class Connection:
    """Pairwise similarity between two people."""

    source: str
    target: str
    strength: float
    dimension: str
    shared_keys: tuple[str, ...] = ()


@dataclass
class NetworkResult:
    """Output of one generation pass."""

    nodes: list[Node]
    edges: list[Edge]
    legend: list[LegendEntry]
    metadata: dict[str, Any]
    connections: list[Connection] = field(default_factory=list)
    ranking: Optional[GroupRanking] = None

    def node_by_id(self) -> dict[str, Node]:
        return {n.id: n for n in self.nodes}

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe rendering: elements, legend and meta."""
        return {
            "elements": {
                "nodes": [n.to_dict() for n in self.nodes],
                "edges": [e.to_dict() for e in self.edges],
            },
            "legend": [entry.to_dict() for entry in self.legend],
            "meta": _camel_meta(self.metadata),
        }


def _camel_meta(metadata: dict[str, Any]) -> dict[str, Any]:
    out = {}
    for key, value in metadata.items():
        head, *rest = key.split("_")
        out[head + "".join(part.title() for part in rest)] = value
    return out


# --------------------------------------------------------------------------- #
# Selection and scoring
# --------------------------------------------------------------------------- #

def has_identity(person: Any) -> bool:
    return bool(getattr(person, "id", None))


def estimate_connections(person: Any) -> int:
    """Companies + schools + skills, the proxy for how connected a person is."""
    return sum(
        len(getattr(person, attr, None) or [])
        for attr in ("companies", "education", "skills")
    )


def select_people(people: Sequence[Any], max_nodes: int) -> list[Any]:
    """Keep at most max_nodes people, preferring the most connected.

    The sort is stable, so ties keep input order.
    """
    if len(people) <= max_nodes:
        return list(people)
    ranked = sorted(people, key=estimate_connections, reverse=True)
    return ranked[:max_nodes]


def find_connections(
    people: Sequence[Any],
    dimension: Any,
    threshold: float,
) -> list[Connection]:
    """All-pairs similarity scan.

    Args:
        people: Retained population
        dimension: Relationship dimension
        threshold: Minimum strength to keep a pair

    Returns:
        Connections with strength >= threshold (and > 0), in pair order
    """
    strategy = get_strategy(dimension)
    connections = []
    for i in range(len(people)):
        a = people[i]
        for j in range(i + 1, len(people)):
            b = people[j]
            strength = strategy.strength(a, b)
            if strength <= 0 or strength < threshold:
                continue
            connections.append(Connection(
                source=a.id,
                target=b.id,
                strength=strength,
                dimension=strategy.dimension.value,
                shared_keys=tuple(strategy.shared(a, b)),
            ))
    return connections


def person_radius(degree: int) -> float:
    """Radius grows with the square root of degree, within NODE_SIZE bounds."""
    radius = NODE_SIZE["base_size"] + NODE_SIZE["connection_multiplier"] * math.sqrt(max(0, degree))
    return max(NODE_SIZE["min_size"], min(NODE_SIZE["max_size"], radius))


def group_radius(member_count: int) -> float:
    """Log-scaled group node size, at least 1.5x a person node."""
    base = NODE_SIZE["base_size"]
    return max(
        base * 1.5,
        min(NODE_SIZE["max_size"], base + math.log(max(0, member_count) + 1) * 3),
    )


def truncate_label(label: str, limit: int = GROUP_LABEL_LIMIT) -> str:
    if len(label) > limit:
        return label[: limit - 3] + "..."
    return label


# --------------------------------------------------------------------------- #
# Node / edge construction
# --------------------------------------------------------------------------- #

def build_person_node(
    person: Any,
    ranking: GroupRanking,
    strategy: DimensionStrategy,
    degree: int = 0,
    use_fallback: bool = False,
) -> Node:
    """Color a person by their best-ranked featured group.

    People in two or more featured groups also carry every featured color,
    in rank order, as secondary colors. With no featured group the node is
    gray; if use_fallback is set its group label comes from the
    dimension's fallback (e.g. most recent school).
    """
    featured = ranking.featured_memberships(person)

    group_key: Optional[str] = None
    group_label: Optional[str] = None
    if featured:
        group_key = featured[0]
        group_label = ranking.label_for(group_key)
        color = ranking.color_for(group_key)
    else:
        color = ranking.other_color
        if use_fallback:
            fallback = strategy.fallback(person)
            if fallback:
                group_key, group_label = fallback

    secondary = [ranking.color_for(k) for k in featured] if len(featured) > 1 else []

    return Node(
        id=person.id,
        label=person.display_label if hasattr(person, "display_label") else str(person.id),
        kind=PERSON,
        radius=person_radius(degree),
        color=color,
        full_name=getattr(person, "name", "") or "",
        secondary_colors=secondary,
        group_key=group_key,
        group_label=group_label,
        featured_groups=featured,
        is_isolated=not featured,
        degree=degree,
        dimension=strategy.dimension.value,
        person=person,
    )


def group_node_id(key: str, taken: Collection[str] = ()) -> str:
    """Node id for a group, suffixed until it differs from every id in taken."""
    node_id = f"group_{key}"
    suffix = 2
    while node_id in taken:
        node_id = f"group_{key}~{suffix}"
        suffix += 1
    return node_id


def assign_group_ids(groups: Iterable[RankedGroup], person_ids: Iterable[str]) -> dict[str, str]:
    """key -> unique node id, never reusing a person id."""
    taken = set(person_ids)
    ids: dict[str, str] = {}
    for group in groups:
        ids[group.key] = group_node_id(group.key, taken)
        taken.add(ids[group.key])
    return ids


def build_group_node(group: RankedGroup, dimension: str, node_id: Optional[str] = None) -> Node:
    return Node(
        id=node_id or group_node_id(group.key),
        label=truncate_label(group.label),
        kind=GROUP,
        radius=group_radius(group.count),
        color=group.color,
        full_name=group.label,
        group_key=group.key,
        group_label=group.label,
        member_count=group.count,
        dimension=dimension,
    )


def build_similarity_edge(connection: Connection, strategy: DimensionStrategy) -> Edge:
    """Styled person-to-person edge; stronger links are wider and shorter."""
    strength = connection.strength
    return Edge(
        id=f"e:{connection.source}->{connection.target}",
        source=connection.source,
        target=connection.target,
        strength=strength,
        color=strategy.color,
        width=1.0 + 3.0 * strength,
        opacity=0.3 + 0.5 * strength,
        kind=SIMILARITY_EDGE,
        dimension=connection.dimension,
        distance=strategy.max_distance * (1.5 - strength) / 1.5,
        shared_keys=list(connection.shared_keys),
    )


def build_membership_edge(
    person_id: str,
    group: RankedGroup,
    dimension: str,
    target: Optional[str] = None,
) -> Edge:
    target = target or group_node_id(group.key)
    return Edge(
        id=f"e:{person_id}->{target}",
        source=person_id,
        target=target,
        strength=1.0,
        color=group.color,
        width=2.0,
        opacity=0.6,
        kind=MEMBERSHIP_EDGE,
        dimension=dimension,
        group_key=group.key,
    )


# --------------------------------------------------------------------------- #
# Generator
# --------------------------------------------------------------------------- #

class NetworkGenerator:
    """Build pairwise or bipartite networks from a people population.

    Every call to generate() is a full recomputation; nothing is carried
    over between calls except the people list itself.
    """

    def __init__(self, people: Optional[Iterable[Any]] = None):
        """Initialize generator.

        Args:
            people: Population to analyze (can be replaced via set_people)
        """
        self.people: list[Any] = list(people or [])

    def set_people(self, people: Iterable[Any]) -> None:
        self.people = list(people)

    def generate(self, config: Optional[NetworkConfig] = None) -> NetworkResult:
        """Generate nodes, edges, legend and metadata.

        Args:
            config: Network options (clamped before use)

        Returns:
            NetworkResult

        Raises:
            ValueError: If the dimension or mode is unknown
        """
        config = (config or NetworkConfig()).clamped()
        strategy = get_strategy(config.dimension)

        candidates, errors = self._with_identity(self.people)
        selected = select_people(candidates, config.max_nodes)

        if config.mode == PAIRWISE:
            result = self._generate_pairwise(selected, strategy, config)
        else:
            result = self._generate_bipartite(selected, strategy, config)

        result.metadata.update({
            "skipped_entities": len(errors),
            "processing_errors": errors,
        })
        return result

    def _with_identity(self, people: Iterable[Any]) -> tuple[list[Any], list[dict[str, str]]]:
        """Split out people with no id; they are reported, not fatal."""
        kept = []
        errors = []
        for person in people:
            if has_identity(person):
                kept.append(person)
            else:
                errors.append({
                    "entity": getattr(person, "name", None) or "Unknown",
                    "error": "missing identity",
                })
        return kept, errors

    def _base_metadata(
        self,
        config: NetworkConfig,
        ranking: GroupRanking,
        total_candidates: int,
        total_entities: int,
        nodes: list[Node],
        edges: list[Edge],
    ) -> dict[str, Any]:
        return {
            "dimension": config.dimension,
            "mode": config.mode,
            "top_n": config.top_n,
            "effective_top_n": ranking.effective_top_n,
            "total_candidates": total_candidates,
            "total_entities": total_entities,
            "total_groups": len(ranking.top_groups),
            "total_nodes": len(nodes),
            "total_edges": len(edges),
            "average_degree": safe_ratio(len(edges), max(1, total_entities)),
        }

    def _generate_pairwise(
        self,
        people: list[Any],
        strategy: DimensionStrategy,
        config: NetworkConfig,
    ) -> NetworkResult:
        connections = find_connections(people, strategy.dimension, config.threshold)

        degree: dict[str, int] = {p.id: 0 for p in people}
        for conn in connections:
            degree[conn.source] += 1
            degree[conn.target] += 1

        # Pairwise isolation means no similarity link at all. Ranking and
        # legend only see the people that stay in the graph.
        retained = [p for p in people if degree[p.id] or config.include_isolated]
        ranking = rank_groups(retained, strategy.dimension, config.top_n)

        nodes = []
        for person in retained:
            node = build_person_node(
                person, ranking, strategy, degree=degree[person.id], use_fallback=True,
            )
            node.is_isolated = degree[person.id] == 0
            nodes.append(node)

        edges = [build_similarity_edge(c, strategy) for c in connections]
        legend = build_legend(ranking, retained, PAIRWISE)

        metadata = self._base_metadata(config, ranking, len(people), len(nodes), nodes, edges)
        metadata["threshold"] = config.threshold

        return NetworkResult(
            nodes=nodes,
            edges=edges,
            legend=legend,
            metadata=metadata,
            connections=connections,
            ranking=ranking,
        )

    def _generate_bipartite(
        self,
        people: list[Any],
        strategy: DimensionStrategy,
        config: NetworkConfig,
    ) -> NetworkResult:
        dimension = strategy.dimension.value
        ranking = rank_groups(people, strategy.dimension, config.top_n)
        groups = {g.key: g for g in ranking.top_groups}
        group_ids = assign_group_ids(ranking.top_groups, (p.id for p in people))

        person_nodes = [build_person_node(p, ranking, strategy) for p in people]
        retained_non_isolated = sum(1 for n in person_nodes if not n.is_isolated)
        if not config.include_isolated:
            person_nodes = [n for n in person_nodes if not n.is_isolated]

        edges = []
        for node in person_nodes:
            for key in node.featured_groups:
                edges.append(
                    build_membership_edge(node.id, groups[key], dimension, group_ids[key])
                )
            node.degree = len(node.featured_groups)

        group_nodes = [
            build_group_node(g, dimension, group_ids[g.key]) for g in ranking.top_groups
        ]
        for group_node in group_nodes:
            group_node.degree = group_node.member_count or 0

        nodes = person_nodes + group_nodes
        legend = build_legend(ranking, people, BIPARTITE)

        metadata = self._base_metadata(
            config, ranking, len(people), len(person_nodes), nodes, edges,
        )
        metadata["isolated_count"] = len(people) - retained_non_isolated

        return NetworkResult(
            nodes=nodes,
            edges=edges,
            legend=legend,
            metadata=metadata,
            ranking=ranking,
        )


def generate_network(
    people: Iterable[Any],
    config: Optional[NetworkConfig] = None,
) -> NetworkResult:
    """Convenience wrapper: NetworkGenerator(people).generate(config)."""
    return NetworkGenerator(people).generate(config)
