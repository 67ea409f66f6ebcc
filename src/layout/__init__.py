"""Force-directed layout simulation.

The physics lives in a pure step(state, dt) -> state function so any
scheduler can drive it: an animation-frame callback, a timer, or a test
calling it N times. ForceSimulation wraps it with a status machine and a
position stream; LayoutSession guarantees only one simulation runs at a
time and carries positions across restarts.

Forces per tick (additive):
- link springs toward a rest length
- many-body repulsion bounded to [DISTANCE_MIN, DISTANCE_MAX]
- collision avoidance scaled by each node radius
- centering on the viewport center
followed by velocity damping and clamping into the viewport.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Iterable, Optional

from config import PhysicsParams, ViewportConfig


DISTANCE_MIN = 8.0
DISTANCE_MAX = 400.0
COLLISION_STRENGTH = 0.7
ALPHA_MIN = 0.001
DRAG_ALPHA_TARGET = 0.3
DEFAULT_RADIUS = 10.0


@dataclass(frozen=True)
class Viewport:
    width: float
    height: float

    @classmethod
    def from_config(cls, config: ViewportConfig) -> Viewport:
        return cls(width=float(config.width), height=float(config.height))

    @property
    def center(self) -> tuple[float, float]:
        return self.width / 2, self.height / 2

    def clamp(self, x: float, y: float, radius: float) -> tuple[float, float]:
        """Keep a circle of the given radius fully inside the viewport.

        Non-finite coordinates are moved to the center.
        """
        cx, cy = self.center
        return _clamp_axis(x, radius, self.width, cx), _clamp_axis(y, radius, self.height, cy)


def _clamp_axis(value: float, radius: float, size: float, center: float) -> float:
    if not math.isfinite(value):
        return center
    lo, hi = radius, size - radius
    if hi < lo:
        return center
    return max(lo, min(hi, value))


@dataclass(frozen=True)
class Body:
    """Simulated node. fx/fy set means pinned at that position."""

    id: str
    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    radius: float = DEFAULT_RADIUS
    fx: Optional[float] = None
    fy: Optional[float] = None

    @property
    def pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


@dataclass(frozen=True)
class Spring:
    """Link between two body indexes; distance None uses physics.link_distance."""

    source: int
    target: int
    distance: Optional[float] = None


@dataclass(frozen=True)
class LayoutState:
    """Complete simulation state; step() never mutates it."""

    bodies: tuple[Body, ...]
    springs: tuple[Spring, ...]
    viewport: Viewport
    physics: PhysicsParams
    alpha: float = 1.0
    alpha_target: float = 0.0
    alpha_min: float = ALPHA_MIN
    ticks: int = 0

    @property
    def settled(self) -> bool:
        return self.alpha < self.alpha_min and self.alpha_target < self.alpha_min

    def positions(self) -> dict[str, tuple[float, float]]:
        return {b.id: (b.x, b.y) for b in self.bodies}

    def index_of(self, node_id: str) -> Optional[int]:
        for i, body in enumerate(self.bodies):
            if body.id == node_id:
                return i
        return None


# --------------------------------------------------------------------------- #
# Construction
# --------------------------------------------------------------------------- #

def grid_positions(count: int, viewport: Viewport) -> list[tuple[float, float]]:
    """Cell centers of a ceil(sqrt(n))-column grid covering the viewport."""
    if count <= 0:
        return []
    cols = math.ceil(math.sqrt(count))
    cell_width = viewport.width / cols
    cell_height = viewport.height / cols
    positions = []
    for i in range(count):
        col = i % cols
        row = i // cols
        positions.append((col * cell_width + cell_width / 2, row * cell_height + cell_height / 2))
    return positions


def initial_state(
    nodes: Iterable[Any],
    edges: Iterable[Any],
    viewport: Viewport,
    physics: Optional[PhysicsParams] = None,
    previous: Optional[dict[str, tuple[float, float]]] = None,
) -> LayoutState:
    """Create the starting state for a node/edge set.

    Args:
        nodes: Objects with id and radius (network.Node works)
        edges: Objects with source, target and optional distance
        viewport: Layout bounds
        physics: Force parameters (clamped)
        previous: Last known positions by node id; nodes found here keep
            their position, the rest are placed on the grid

    Returns:
        LayoutState with alpha = 1
    """
    nodes = list(nodes)
    physics = (physics or PhysicsParams()).clamped()
    grid = grid_positions(len(nodes), viewport)
    previous = previous or {}

    bodies = []
    index: dict[str, int] = {}
    for i, node in enumerate(nodes):
        radius = float(getattr(node, "radius", DEFAULT_RADIUS) or DEFAULT_RADIUS)
        x, y = previous.get(node.id, grid[i])
        x, y = viewport.clamp(x, y, radius)
        index[node.id] = i
        bodies.append(Body(id=node.id, x=x, y=y, radius=radius))

    springs = []
    for edge in edges:
        s = index.get(edge.source)
        t = index.get(edge.target)
        if s is None or t is None or s == t:
            continue
        springs.append(Spring(source=s, target=t, distance=getattr(edge, "distance", None)))

    return LayoutState(
        bodies=tuple(bodies),
        springs=tuple(springs),
        viewport=viewport,
        physics=physics,
    )


# --------------------------------------------------------------------------- #
# Forces
# --------------------------------------------------------------------------- #

def _jiggle(i: int, j: int) -> float:
    """Tiny deterministic offset separating coincident bodies.

    Antisymmetric in (i, j) so the two bodies are pushed apart.
    """
    magnitude = 1e-6 * (1 + (min(i, j) * 7 + max(i, j) * 13) % 5)
    return magnitude if i < j else -magnitude


def _apply_links(state, alpha, x, y, vx, vy) -> None:
    springs = state.springs
    if not springs:
        return
    count = [0] * len(x)
    for spring in springs:
        count[spring.source] += 1
        count[spring.target] += 1

    strength = state.physics.link_strength
    default_distance = state.physics.link_distance
    for spring in springs:
        s, t = spring.source, spring.target
        dx = x[t] + vx[t] - x[s] - vx[s] or _jiggle(s, t)
        dy = y[t] + vy[t] - y[s] - vy[s] or _jiggle(s, t)
        length = math.sqrt(dx * dx + dy * dy)
        distance = spring.distance if spring.distance is not None else default_distance
        k = (length - distance) / length * alpha * strength
        dx *= k
        dy *= k
        bias = count[s] / (count[s] + count[t])
        vx[t] -= dx * bias
        vy[t] -= dy * bias
        vx[s] += dx * (1 - bias)
        vy[s] += dy * (1 - bias)


def _apply_charge(state, alpha, x, y, vx, vy) -> None:
    strength = state.physics.repulsion
    if not strength:
        return
    min2 = DISTANCE_MIN * DISTANCE_MIN
    max2 = DISTANCE_MAX * DISTANCE_MAX
    n = len(x)
    for i in range(n):
        for j in range(n):
            if i == j:
                continue
            dx = x[j] - x[i]
            dy = y[j] - y[i]
            l2 = dx * dx + dy * dy
            if l2 >= max2:
                continue
            if dx == 0:
                dx = _jiggle(i, j)
                l2 += dx * dx
            if dy == 0:
                dy = _jiggle(i, j)
                l2 += dy * dy
            if l2 < min2:
                l2 = math.sqrt(min2 * l2)
            w = strength * alpha / l2
            vx[i] += dx * w
            vy[i] += dy * w


def _apply_collision(state, x, y, vx, vy) -> None:
    multiplier = state.physics.collision_radius
    radii = [b.radius * multiplier for b in state.bodies]
    n = len(x)
    for i in range(n):
        ri = radii[i]
        ri2 = ri * ri
        xi = x[i] + vx[i]
        yi = y[i] + vy[i]
        for j in range(i + 1, n):
            rj = radii[j]
            r = ri + rj
            dx = xi - x[j] - vx[j]
            dy = yi - y[j] - vy[j]
            l2 = dx * dx + dy * dy
            if l2 >= r * r:
                continue
            if dx == 0:
                dx = _jiggle(j, i)
                l2 += dx * dx
            if dy == 0:
                dy = _jiggle(j, i)
                l2 += dy * dy
            length = math.sqrt(l2)
            k = (r - length) / length * COLLISION_STRENGTH
            dx *= k
            dy *= k
            rj2 = rj * rj
            w = rj2 / (ri2 + rj2) if ri2 + rj2 else 0.5
            vx[i] += dx * w
            vy[i] += dy * w
            vx[j] -= dx * (1 - w)
            vy[j] -= dy * (1 - w)


def _apply_centering(state, alpha, x, y, vx, vy) -> None:
    n = len(x)
    cx, cy = state.viewport.center

    # Translate the centroid onto the center
    sx = sum(x) / n - cx
    sy = sum(y) / n - cy
    for i in range(n):
        x[i] -= sx
        y[i] -= sy

    strength = state.physics.centering_strength * alpha
    if not strength:
        return
    for i in range(n):
        vx[i] += (cx - x[i]) * strength
        vy[i] += (cy - y[i]) * strength


def step(state: LayoutState, dt: float = 1.0) -> LayoutState:
    """Advance the simulation by one tick.

    Never raises for numeric reasons: any non-finite coordinate or
    velocity is reset to the viewport center at rest.

    Args:
        state: Current state (left untouched)
        dt: Integration time step

    Returns:
        New LayoutState
    """
    physics = state.physics
    alpha = state.alpha + (state.alpha_target - state.alpha) * physics.alpha_decay
    bodies = state.bodies
    if not bodies:
        return replace(state, alpha=alpha, ticks=state.ticks + 1)

    viewport = state.viewport
    cx, cy = viewport.center

    # A single non-finite body would poison the centroid for everyone
    x = [b.x if math.isfinite(b.x) else cx for b in bodies]
    y = [b.y if math.isfinite(b.y) else cy for b in bodies]
    vx = [b.vx if math.isfinite(b.vx) else 0.0 for b in bodies]
    vy = [b.vy if math.isfinite(b.vy) else 0.0 for b in bodies]

    _apply_links(state, alpha, x, y, vx, vy)
    _apply_charge(state, alpha, x, y, vx, vy)
    _apply_collision(state, x, y, vx, vy)
    _apply_centering(state, alpha, x, y, vx, vy)

    decay = 1.0 - physics.velocity_decay
    next_bodies = []
    for i, body in enumerate(bodies):
        if body.pinned:
            nx, ny, nvx, nvy = body.fx, body.fy, 0.0, 0.0
        else:
            nvx = vx[i] * decay
            nvy = vy[i] * decay
            nx = x[i] + nvx * dt
            ny = y[i] + nvy * dt
        if not (math.isfinite(nx) and math.isfinite(nvx)):
            nx, nvx = cx, 0.0
        if not (math.isfinite(ny) and math.isfinite(nvy)):
            ny, nvy = cy, 0.0
        nx, ny = viewport.clamp(nx, ny, body.radius)
        next_bodies.append(replace(body, x=nx, y=ny, vx=nvx, vy=nvy))

    return replace(state, bodies=tuple(next_bodies), alpha=alpha, ticks=state.ticks + 1)


# --------------------------------------------------------------------------- #
# Runner
# --------------------------------------------------------------------------- #

class SimulationStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    SETTLED = "settled"
    STOPPED = "stopped"


PositionListener = Callable[[dict[str, tuple[float, float]]], None]


class ForceSimulation:
    """Stateful wrapper around step() with a position stream.

    Status moves IDLE -> RUNNING -> SETTLED, or to STOPPED from anywhere.
    A stopped simulation is finished: create a new one to lay out again.
    """

    def __init__(
        self,
        nodes: Iterable[Any],
        edges: Iterable[Any],
        physics: Optional[PhysicsParams] = None,
        viewport: Optional[Viewport] = None,
        previous: Optional[dict[str, tuple[float, float]]] = None,
    ):
        self.viewport = viewport or Viewport.from_config(ViewportConfig())
        self.state = initial_state(nodes, edges, self.viewport, physics, previous)
        self.status = SimulationStatus.IDLE
        self._listeners: list[PositionListener] = []

    @property
    def physics(self) -> PhysicsParams:
        return self.state.physics

    @property
    def alpha(self) -> float:
        return self.state.alpha

    def subscribe(self, listener: PositionListener) -> Callable[[], None]:
        """Register a position listener; returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def positions(self) -> dict[str, tuple[float, float]]:
        return self.state.positions()

    def start(self) -> None:
        """Begin (or resume) ticking.

        Raises:
            RuntimeError: If the simulation has been stopped
        """
        if self.status == SimulationStatus.STOPPED:
            raise RuntimeError("Simulation has been stopped")
        self.status = SimulationStatus.RUNNING

    def stop(self) -> None:
        self.status = SimulationStatus.STOPPED
        self._listeners.clear()

    def tick(self, dt: float = 1.0) -> dict[str, tuple[float, float]]:
        """Advance one tick while running and publish positions.

        Outside RUNNING this is a no-op returning current positions.
        """
        if self.status != SimulationStatus.RUNNING:
            return self.positions()
        self.state = step(self.state, dt)
        if self.state.settled:
            self.status = SimulationStatus.SETTLED
        positions = self.positions()
        for listener in list(self._listeners):
            listener(positions)
        return positions

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Tick until settled, stopped, or max_ticks reached.

        Returns:
            Number of ticks executed
        """
        if self.status == SimulationStatus.IDLE:
            self.start()
        ticks = 0
        while self.status == SimulationStatus.RUNNING:
            if max_ticks is not None and ticks >= max_ticks:
                break
            self.tick()
            ticks += 1
        return ticks

    def reheat(self, alpha_target: float) -> None:
        """Set the temperature target; a positive target wakes a settled run."""
        self.state = replace(self.state, alpha_target=max(0.0, float(alpha_target)))
        if alpha_target > 0 and self.status == SimulationStatus.SETTLED:
            self.status = SimulationStatus.RUNNING

    def _update_body(self, node_id: str, **changes: Any) -> Optional[Body]:
        index = self.state.index_of(node_id)
        if index is None:
            return None
        bodies = list(self.state.bodies)
        bodies[index] = replace(bodies[index], **changes)
        self.state = replace(self.state, bodies=tuple(bodies))
        return bodies[index]

    def body(self, node_id: str) -> Optional[Body]:
        index = self.state.index_of(node_id)
        return None if index is None else self.state.bodies[index]

    def pin(self, node_id: str, x: Optional[float] = None, y: Optional[float] = None) -> Optional[Body]:
        """Fix a node in place (at its current position by default)."""
        body = self.body(node_id)
        if body is None:
            return None
        x = body.x if x is None else x
        y = body.y if y is None else y
        x, y = self.viewport.clamp(x, y, body.radius)
        return self._update_body(node_id, fx=x, fy=y, x=x, y=y, vx=0.0, vy=0.0)

    def move_pinned(self, node_id: str, x: float, y: float) -> Optional[Body]:
        return self.pin(node_id, x, y)

    def unpin(self, node_id: str) -> Optional[Body]:
        """Return a node to force control."""
        return self._update_body(node_id, fx=None, fy=None)


class LayoutSession:
    """Owns the active simulation for one render target.

    Loading a new node/edge set, or new physics, stops and discards the
    previous simulation first and seeds the new one with its last known
    positions.
    """

    def __init__(self, viewport: Optional[Viewport] = None, physics: Optional[PhysicsParams] = None):
        self.viewport = viewport or Viewport.from_config(ViewportConfig())
        self.physics = (physics or PhysicsParams()).clamped()
        self.simulation: Optional[ForceSimulation] = None
        self._nodes: list[Any] = []
        self._edges: list[Any] = []

    def load(
        self,
        nodes: Iterable[Any],
        edges: Iterable[Any],
        physics: Optional[PhysicsParams] = None,
    ) -> ForceSimulation:
        """Replace the running simulation with one for a new graph.

        Returns:
            The new, already started, simulation
        """
        if physics is not None:
            self.physics = physics.clamped()
        self._nodes = list(nodes)
        self._edges = list(edges)

        previous = None
        if self.simulation is not None:
            previous = self.simulation.positions()
            self.simulation.stop()

        self.simulation = ForceSimulation(
            self._nodes, self._edges, self.physics, self.viewport, previous,
        )
        self.simulation.start()
        return self.simulation

    def update_physics(self, physics: PhysicsParams) -> ForceSimulation:
        """Restart the current graph with new physics from its last positions."""
        return self.load(self._nodes, self._edges, physics)

    def stop(self) -> None:
        if self.simulation is not None:
            self.simulation.stop()
