"""Configuration loading for cohort_graph.

Loads network, physics and viewport settings from YAML files and clamps
every numeric option into its documented range.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml


# --------------------------------------------------------------------------- #
# Network generation defaults
# --------------------------------------------------------------------------- #

DIMENSIONS = ("education", "company", "location", "skills")
MODES = ("pairwise", "bipartite")

DEFAULT_DIMENSION = "education"
DEFAULT_MODE = "bipartite"
DEFAULT_THRESHOLD = 0.1
DEFAULT_MAX_NODES = 75
DEFAULT_TOP_N = 12
DEFAULT_INCLUDE_ISOLATED = False

DEFAULT_WIDTH = 800.0
DEFAULT_HEIGHT = 600.0

# 15 distinct, well-differentiated colors. Featured groups take them by rank.
PALETTE: tuple[str, ...] = (
    "#EF4444",  # Red
    "#F97316",  # Orange
    "#F59E0B",  # Amber
    "#EAB308",  # Yellow
    "#84CC16",  # Lime
    "#22C55E",  # Green
    "#10B981",  # Emerald
    "#14B8A6",  # Teal
    "#06B6D4",  # Cyan
    "#0EA5E9",  # Sky
    "#3B82F6",  # Blue
    "#6366F1",  # Indigo
    "#8B5CF6",  # Violet
    "#A855F7",  # Purple
    "#EC4899",  # Pink
)

# Shared color for every group outside the top N
OTHER_COLOR = "#9CA3AF"

NODE_SIZE = {
    "base_size": 8.0,
    "connection_multiplier": 4.0,
    "min_size": 6.0,
    "max_size": 30.0,
}

# Inclusive (min, max) bounds. Values outside are clamped, never rejected.
RANGES: dict[str, tuple[float, float]] = {
    "threshold": (0.0, 1.0),
    "max_nodes": (10, 100),
    "top_n": (6, 20),
    "repulsion": (-300.0, -10.0),
    "link_strength": (0.05, 1.0),
    "link_distance": (20.0, 200.0),
    "collision_radius": (0.5, 3.0),
    "velocity_decay": (0.1, 0.95),
    "alpha_decay": (0.001, 0.1),
    "centering_strength": (0.0, 0.5),
}


def clamp(value: Any, lo: float, hi: float, default: float) -> float:
    """Clamp a numeric value into [lo, hi].

    Non-numeric and non-finite values fall back to ``default``.
    """
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return max(lo, min(hi, number))


@dataclass(frozen=True)
class PhysicsParams:
    """Force simulation parameters.

    Attributes:
        repulsion: Many-body charge; negative values push nodes apart
        link_strength: Spring stiffness along edges (0-1)
        link_distance: Rest length for edges without their own distance
        collision_radius: Multiplier applied to each node radius for collisions
        velocity_decay: Fraction of velocity removed each tick
        alpha_decay: Rate at which the simulation temperature cools
        centering_strength: Pull toward the viewport center
    """

    repulsion: float = -80.0
    link_strength: float = 0.6
    link_distance: float = 50.0
    collision_radius: float = 1.0
    velocity_decay: float = 0.9
    alpha_decay: float = 0.03
    centering_strength: float = 0.1

    def clamped(self) -> PhysicsParams:
        """Return a copy with every field inside its documented range."""
        defaults = PhysicsParams()
        values = {}
        for name in (
            "repulsion", "link_strength", "link_distance", "collision_radius",
            "velocity_decay", "alpha_decay", "centering_strength",
        ):
            lo, hi = RANGES[name]
            values[name] = clamp(getattr(self, name), lo, hi, getattr(defaults, name))
        return PhysicsParams(**values)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> PhysicsParams:
        """Build clamped parameters from a (possibly partial) mapping.

        Accepts both snake_case keys and the legacy ``chargeStrength`` style
        keys used by exported presets.
        """
        if not data:
            return cls()
        aliases = {
            "chargeStrength": "repulsion",
            "charge_strength": "repulsion",
            "linkStrength": "link_strength",
            "linkDistance": "link_distance",
            "collisionRadius": "collision_radius",
            "collisionRadiusMultiplier": "collision_radius",
            "velocityDecay": "velocity_decay",
            "alphaDecay": "alpha_decay",
            "centeringStrength": "centering_strength",
        }
        known = {f for f in cls.__dataclass_fields__}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = aliases.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values).clamped()

    @classmethod
    def from_preset(cls, name: str) -> PhysicsParams:
        """Look up a named preset (tight, spread, floaty).

        Raises:
            ValueError: If the preset name is unknown
        """
        try:
            return PHYSICS_PRESETS[name]
        except KeyError:
            raise ValueError(
                f"Unknown physics preset: {name} (expected one of {', '.join(PHYSICS_PRESETS)})"
            ) from None

    def to_dict(self) -> dict[str, float]:
        return {
            "repulsion": self.repulsion,
            "linkStrength": self.link_strength,
            "linkDistance": self.link_distance,
            "collisionRadius": self.collision_radius,
            "velocityDecay": self.velocity_decay,
            "alphaDecay": self.alpha_decay,
            "centeringStrength": self.centering_strength,
        }


PHYSICS_PRESETS: dict[str, PhysicsParams] = {
    "tight": PhysicsParams(),
    "spread": PhysicsParams(
        repulsion=-200.0,
        link_strength=0.2,
        link_distance=120.0,
        collision_radius=1.5,
        velocity_decay=0.85,
        alpha_decay=0.02,
        centering_strength=0.02,
    ),
    "floaty": PhysicsParams(
        repulsion=-100.0,
        link_strength=0.1,
        link_distance=100.0,
        collision_radius=3.0,
        velocity_decay=0.7,
        alpha_decay=0.01,
        centering_strength=0.01,
    ),
}


@dataclass(frozen=True)
class ViewportConfig:
    """Drawing area in pixels."""

    width: float = DEFAULT_WIDTH
    height: float = DEFAULT_HEIGHT


@dataclass(frozen=True)
class NetworkConfig:
    """Options for one graph generation pass.

    Attributes:
        dimension: Relationship dimension (education, company, location, skills)
        mode: Topology mode (pairwise or bipartite)
        threshold: Minimum pairwise strength for a connection (pairwise only)
        max_nodes: Cap on the number of retained people
        top_n: Number of featured groups that receive a palette color
        include_isolated: Keep people with no connection as gray nodes
        physics: Layout simulation parameters
        viewport: Layout bounds
    """

    dimension: str = DEFAULT_DIMENSION
    mode: str = DEFAULT_MODE
    threshold: float = DEFAULT_THRESHOLD
    max_nodes: int = DEFAULT_MAX_NODES
    top_n: int = DEFAULT_TOP_N
    include_isolated: bool = DEFAULT_INCLUDE_ISOLATED
    physics: PhysicsParams = field(default_factory=PhysicsParams)
    viewport: ViewportConfig = field(default_factory=ViewportConfig)

    def clamped(self) -> NetworkConfig:
        """Return a copy with every option normalized.

        Raises:
            ValueError: If dimension or mode is not a recognized value
        """
        dimension = str(getattr(self.dimension, "value", self.dimension)).lower()
        if dimension not in DIMENSIONS:
            raise ValueError(f"Unknown dimension: {self.dimension}")
        mode = str(getattr(self.mode, "value", self.mode)).lower()
        if mode not in MODES:
            raise ValueError(f"Unknown mode: {self.mode}")

        lo, hi = RANGES["threshold"]
        threshold = clamp(self.threshold, lo, hi, DEFAULT_THRESHOLD)
        lo, hi = RANGES["max_nodes"]
        max_nodes = int(clamp(self.max_nodes, lo, hi, DEFAULT_MAX_NODES))
        lo, hi = RANGES["top_n"]
        top_n = int(clamp(self.top_n, lo, hi, DEFAULT_TOP_N))

        return replace(
            self,
            dimension=dimension,
            mode=mode,
            threshold=threshold,
            max_nodes=max_nodes,
            top_n=top_n,
            include_isolated=bool(self.include_isolated),
            physics=self.physics.clamped(),
        )

    @property
    def effective_top_n(self) -> int:
        """Top N after clamping to the palette size."""
        return min(int(self.top_n), len(PALETTE))


def load_config(config_path: Path, preset: Optional[str] = None) -> NetworkConfig:
    """Load a network configuration from a YAML file.

    Args:
        config_path: Path to the network.yaml configuration file
        preset: Optional physics preset name that overrides the file's physics

    Returns:
        Clamped NetworkConfig (defaults when the file does not exist)

    Raises:
        ValueError: If the YAML file contains invalid syntax or unknown values
    """
    data: dict[str, Any] = {}
    if config_path.exists():
        try:
            content = config_path.read_text(encoding="utf-8")
            data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid config in {config_path}: expected a mapping")

    network = data.get("network") or {}
    physics_data = data.get("physics") or {}
    viewport_data = data.get("viewport") or {}
    presets = data.get("presets") or {}

    preset_name = preset or data.get("preset")
    if preset_name:
        if preset_name in presets:
            physics = PhysicsParams.from_dict(presets[preset_name])
        else:
            physics = PhysicsParams.from_preset(preset_name)
    else:
        physics = PhysicsParams.from_dict(physics_data)

    viewport = ViewportConfig(
        width=clamp(viewport_data.get("width", DEFAULT_WIDTH), 100.0, 10000.0, DEFAULT_WIDTH),
        height=clamp(viewport_data.get("height", DEFAULT_HEIGHT), 100.0, 10000.0, DEFAULT_HEIGHT),
    )

    config = NetworkConfig(
        dimension=network.get("dimension", DEFAULT_DIMENSION),
        mode=network.get("mode", DEFAULT_MODE),
        threshold=network.get("threshold", DEFAULT_THRESHOLD),
        max_nodes=network.get("max_nodes", DEFAULT_MAX_NODES),
        top_n=network.get("top_n", DEFAULT_TOP_N),
        include_isolated=network.get("include_isolated", DEFAULT_INCLUDE_ISOLATED),
        physics=physics,
        viewport=viewport,
    )
    return config.clamped()
