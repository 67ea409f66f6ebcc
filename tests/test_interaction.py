"""Tests for interaction module: drag, click and pan/zoom."""

import pytest

from config import NetworkConfig
from factories import make_person
from interaction import (
    DRAG_THRESHOLD,
    MAX_SCALE,
    MIN_SCALE,
    InteractionController,
    ViewTransform,
)
from layout import DRAG_ALPHA_TARGET, ForceSimulation, SimulationStatus, Viewport
from network import generate_network


@pytest.fixture
def result():
    people = [
        make_person("ada", name="Ada Chen", companies=("Stripe",)),
        make_person("ben", name="Ben Diaz", companies=("Stripe",)),
        make_person("cy", name="Cy Ito", companies=("Meta",)),
    ]
    return generate_network(people, NetworkConfig(dimension="company", mode="bipartite"))


@pytest.fixture
def simulation(result):
    return ForceSimulation(result.nodes, result.edges, viewport=Viewport(800.0, 600.0))


@pytest.fixture
def controller(simulation, result):
    return InteractionController(simulation, result.nodes)


class TestViewTransform:
    """Test pan/zoom transform."""

    def test_identity(self):
        transform = ViewTransform()
        assert transform.is_identity
        assert transform.apply((10.0, 20.0)) == (10.0, 20.0)

    def test_apply_and_invert(self):
        transform = ViewTransform(x=50.0, y=-20.0, k=2.0)
        assert transform.apply((10.0, 10.0)) == (70.0, 0.0)
        assert transform.invert((70.0, 0.0)) == (10.0, 10.0)

    def test_translate(self):
        transform = ViewTransform().translate(5.0, 7.0)
        assert (transform.x, transform.y) == (5.0, 7.0)

    def test_zoom_keeps_origin_fixed(self):
        transform = ViewTransform(x=30.0, y=40.0, k=1.0)
        origin = (200.0, 150.0)
        before = transform.invert(origin)
        transform.scale_by(1.5, origin)
        assert transform.k == 1.5
        assert transform.invert(origin) == pytest.approx(before)

    def test_zoom_bounded(self):
        transform = ViewTransform()
        transform.scale_by(100.0)
        assert transform.k == MAX_SCALE
        transform.scale_by(0.0001)
        assert transform.k == MIN_SCALE

    def test_invalid_factor_ignored(self):
        transform = ViewTransform()
        transform.scale_by(0.0)
        transform.scale_by(-2.0)
        transform.scale_by(float("nan"))
        assert transform.is_identity

    def test_reset(self):
        transform = ViewTransform(x=5.0, y=5.0, k=2.5)
        assert transform.reset().is_identity


class TestClick:
    """Test click dispatch."""

    def test_press_and_release_is_click(self, controller):
        clicked = []
        controller.register_handler("ada", clicked.append)
        assert controller.pointer_down("ada", 100.0, 100.0)
        assert controller.pointer_up(100.0, 100.0)
        assert [n.id for n in clicked] == ["ada"]
        assert clicked[0].person.name == "Ada Chen"

    def test_small_jitter_still_clicks(self, controller):
        clicked = []
        controller.register_handler("ada", clicked.append)
        controller.pointer_down("ada", 100.0, 100.0)
        controller.pointer_move(103.0, 102.0)
        assert controller.pointer_up(103.0, 102.0)
        assert len(clicked) == 1

    def test_default_handler(self, controller):
        clicked = []
        controller.set_default_handler(clicked.append)
        assert controller.click("group_stripe")
        assert clicked[0].kind == "group"

    def test_own_handler_wins_over_default(self, controller):
        own, default = [], []
        controller.set_default_handler(default.append)
        controller.register_handler("ben", own.append)
        controller.click("ben")
        assert len(own) == 1
        assert default == []

    def test_unregister(self, controller):
        clicked = []
        controller.register_handler("ada", clicked.append)
        controller.unregister_handler("ada")
        assert not controller.click("ada")
        assert clicked == []

    def test_unknown_node(self, controller):
        controller.set_default_handler(lambda node: None)
        assert not controller.click("nobody")
        assert not controller.pointer_down("nobody", 0.0, 0.0)
        assert controller.gesture is None


class TestDrag:
    """Test drag gestures."""

    def test_press_pins_and_reheats(self, controller, simulation):
        simulation.run()
        assert simulation.status == SimulationStatus.SETTLED
        body = simulation.body("ada")
        controller.pointer_down("ada", body.x, body.y)
        assert simulation.body("ada").pinned
        assert simulation.state.alpha_target == DRAG_ALPHA_TARGET
        assert simulation.status == SimulationStatus.RUNNING

    def test_drag_moves_node_and_suppresses_click(self, controller, simulation):
        clicked = []
        controller.register_handler("ada", clicked.append)
        controller.pointer_down("ada", 100.0, 100.0)
        controller.pointer_move(100.0 + DRAG_THRESHOLD + 20.0, 100.0)
        assert controller.gesture.dragged
        body = simulation.body("ada")
        assert (body.fx, body.fy) == (120.0 + DRAG_THRESHOLD, 100.0)

        assert not controller.pointer_up()
        assert clicked == []
        assert not simulation.body("ada").pinned
        assert simulation.state.alpha_target == 0.0
        assert controller.gesture is None

    def test_drag_out_and_back_is_not_click(self, controller):
        clicked = []
        controller.register_handler("ada", clicked.append)
        controller.pointer_down("ada", 100.0, 100.0)
        controller.pointer_move(140.0, 100.0)
        controller.pointer_move(100.0, 100.0)
        assert not controller.pointer_up(100.0, 100.0)
        assert clicked == []

    def test_release_far_away_is_not_click(self, controller):
        clicked = []
        controller.register_handler("ada", clicked.append)
        controller.pointer_down("ada", 100.0, 100.0)
        assert not controller.pointer_up(200.0, 200.0)
        assert clicked == []

    def test_drag_respects_zoom(self, simulation, result):
        controller = InteractionController(simulation, result.nodes, ViewTransform(k=2.0))
        controller.pointer_down("ada", 0.0, 0.0)
        controller.pointer_move(300.0, 200.0)
        body = simulation.body("ada")
        assert (body.fx, body.fy) == (150.0, 100.0)

    def test_drag_clamped_to_viewport(self, controller, simulation):
        controller.pointer_down("ada", 0.0, 0.0)
        controller.pointer_move(-500.0, 5000.0)
        body = simulation.body("ada")
        assert body.fx == body.radius
        assert body.fy == 600.0 - body.radius

    def test_move_without_gesture_is_noop(self, controller, simulation):
        before = simulation.positions()
        controller.pointer_move(10.0, 10.0)
        assert simulation.positions() == before
        assert not controller.pointer_up()


class TestViewControls:
    """Test pan, zoom and reset through the controller."""

    def test_pan_zoom_reset(self, controller):
        controller.pan(10.0, -5.0)
        controller.zoom(2.0, (0.0, 0.0))
        assert controller.transform.k == 2.0
        assert (controller.transform.x, controller.transform.y) == (20.0, -10.0)
        assert controller.reset_view().is_identity

    def test_zoom_does_not_touch_simulation(self, controller, simulation):
        before = simulation.positions()
        controller.zoom(2.0, (400.0, 300.0))
        assert simulation.positions() == before
