"""Pointer gestures and view transform for a laid-out network.

Drag pins a node under the pointer; release hands it back to the forces.
A gesture only counts as a click if the pointer never moved more than
the drag threshold. Click handlers are registered per node id, so node
records stay plain data.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Optional

from layout import DRAG_ALPHA_TARGET, ForceSimulation


MIN_SCALE = 0.5
MAX_SCALE = 3.0
DRAG_THRESHOLD = 5.0

ClickHandler = Callable[[Any], None]


@dataclass
class ViewTransform:
    """Pan/zoom transform: screen = scene * k + (x, y)."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def apply(self, point: tuple[float, float]) -> tuple[float, float]:
        """Scene coordinates to screen coordinates."""
        return point[0] * self.k + self.x, point[1] * self.k + self.y

    def invert(self, point: tuple[float, float]) -> tuple[float, float]:
        """Screen coordinates to scene coordinates."""
        return (point[0] - self.x) / self.k, (point[1] - self.y) / self.k

    def translate(self, dx: float, dy: float) -> ViewTransform:
        self.x += dx
        self.y += dy
        return self

    def scale_by(self, factor: float, origin: tuple[float, float] = (0.0, 0.0)) -> ViewTransform:
        """Zoom around a screen point, keeping k within [MIN_SCALE, MAX_SCALE].

        The scene point under origin stays under origin.
        """
        if not math.isfinite(factor) or factor <= 0:
            return self
        k = max(MIN_SCALE, min(MAX_SCALE, self.k * factor))
        scene = self.invert(origin)
        self.k = k
        self.x = origin[0] - scene[0] * k
        self.y = origin[1] - scene[1] * k
        return self

    def reset(self) -> ViewTransform:
        self.x, self.y, self.k = 0.0, 0.0, 1.0
        return self

    @property
    def is_identity(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.k == 1.0


@dataclass
class Gesture:
    """Pointer gesture in progress on one node."""

    node_id: str
    start: tuple[float, float]
    dragged: bool = False


class InteractionController:
    """Translate pointer events into simulation pins and click dispatch.

    Pointer coordinates are screen coordinates; they go through the view
    transform before touching the simulation.
    """

    def __init__(
        self,
        simulation: ForceSimulation,
        nodes: Iterable[Any],
        transform: Optional[ViewTransform] = None,
        drag_threshold: float = DRAG_THRESHOLD,
    ):
        """Initialize controller.

        Args:
            simulation: Simulation whose bodies are dragged
            nodes: Node records, passed whole to click handlers
            transform: Shared pan/zoom transform (identity by default)
            drag_threshold: Screen pixels the pointer may move before a
                press stops counting as a click
        """
        self.simulation = simulation
        self.nodes = {n.id: n for n in nodes}
        self.transform = transform or ViewTransform()
        self.drag_threshold = drag_threshold
        self.gesture: Optional[Gesture] = None
        self._handlers: dict[str, ClickHandler] = {}
        self._default_handler: Optional[ClickHandler] = None

    def register_handler(self, node_id: str, handler: ClickHandler) -> None:
        self._handlers[node_id] = handler

    def unregister_handler(self, node_id: str) -> None:
        self._handlers.pop(node_id, None)

    def set_default_handler(self, handler: Optional[ClickHandler]) -> None:
        """Handler for nodes without their own."""
        self._default_handler = handler

    def pointer_down(self, node_id: str, screen_x: float, screen_y: float) -> bool:
        """Start a gesture on a node and pin it where it is.

        Returns:
            False when the node is unknown to the simulation
        """
        if self.simulation.body(node_id) is None:
            return False
        self.gesture = Gesture(node_id=node_id, start=(screen_x, screen_y))
        self.simulation.pin(node_id)
        self.simulation.reheat(DRAG_ALPHA_TARGET)
        return True

    def pointer_move(self, screen_x: float, screen_y: float) -> None:
        gesture = self.gesture
        if gesture is None:
            return
        dx = screen_x - gesture.start[0]
        dy = screen_y - gesture.start[1]
        if math.hypot(dx, dy) > self.drag_threshold:
            gesture.dragged = True
        x, y = self.transform.invert((screen_x, screen_y))
        self.simulation.move_pinned(gesture.node_id, x, y)

    def pointer_up(self, screen_x: Optional[float] = None, screen_y: Optional[float] = None) -> bool:
        """Finish the gesture: unpin, cool down, and maybe dispatch a click.

        Returns:
            True if a click was dispatched
        """
        gesture = self.gesture
        if gesture is None:
            return False
        self.gesture = None

        if screen_x is not None and screen_y is not None:
            dx = screen_x - gesture.start[0]
            dy = screen_y - gesture.start[1]
            if math.hypot(dx, dy) > self.drag_threshold:
                gesture.dragged = True

        self.simulation.unpin(gesture.node_id)
        self.simulation.reheat(0.0)

        if gesture.dragged:
            return False
        return self.click(gesture.node_id)

    def click(self, node_id: str) -> bool:
        """Invoke the handler registered for a node with its full record."""
        node = self.nodes.get(node_id)
        if node is None:
            return False
        handler = self._handlers.get(node_id, self._default_handler)
        if handler is None:
            return False
        handler(node)
        return True

    def pan(self, dx: float, dy: float) -> ViewTransform:
        return self.transform.translate(dx, dy)

    def zoom(self, factor: float, origin: tuple[float, float] = (0.0, 0.0)) -> ViewTransform:
        return self.transform.scale_by(factor, origin)

    def reset_view(self) -> ViewTransform:
        return self.transform.reset()
