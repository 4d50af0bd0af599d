"""
Unit tests for dispatching action sequences against a page.

Uses the fake page from conftest; its viewport is 800x600.
"""

import asyncio
import time

import pytest

from wptrun.actions.dispatcher import Actions, ELEMENT_CENTER_JS
from wptrun.core.exceptions import (
    InvalidArgumentError,
    MoveTargetOutOfBoundsError,
    UnsupportedOperationError,
)


def mouse(*actions, pointer_type=None):
    sequence = {"type": "pointer", "id": "mouse", "actions": list(actions)}
    if pointer_type:
        sequence["parameters"] = {"pointerType": pointer_type}
    return sequence


def move(x, y, origin=None, duration=None):
    action = {"type": "pointerMove", "x": x, "y": y}
    if origin is not None:
        action["origin"] = origin
    if duration is not None:
        action["duration"] = duration
    return action


class TestKeyActions:
    """Test cases for keyDown/keyUp."""

    @pytest.mark.asyncio
    async def test_key_values_passed_literally(self, fake_page):
        actions = Actions(
            [
                {
                    "type": "key",
                    "id": "kbd",
                    "actions": [
                        {"type": "keyDown", "value": "Shift"},
                        {"type": "keyUp", "value": "Shift"},
                    ],
                }
            ]
        )

        await actions.dispatch(fake_page)

        fake_page.keyboard.down.assert_awaited_once_with("Shift")
        fake_page.keyboard.up.assert_awaited_once_with("Shift")


class TestPointerButtons:
    """Test cases for pointerDown/pointerUp."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("button,name", [(0, "left"), (1, "middle"), (2, "right")])
    async def test_button_mapping(self, fake_page, button, name):
        actions = Actions(
            [
                mouse(
                    {"type": "pointerDown", "button": button},
                    {"type": "pointerUp", "button": button},
                )
            ]
        )

        await actions.dispatch(fake_page)

        fake_page.mouse.down.assert_awaited_once_with(button=name)
        fake_page.mouse.up.assert_awaited_once_with(button=name)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action_type", ["pointerDown", "pointerUp"])
    async def test_unsupported_button_rejected(self, fake_page, action_type):
        actions = Actions([mouse({"type": action_type, "button": 3})])

        with pytest.raises(UnsupportedOperationError, match="unsupported button"):
            await actions.dispatch(fake_page)

        fake_page.mouse.down.assert_not_awaited()
        fake_page.mouse.up.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_mouse_pointer_rejected(self, fake_page):
        actions = Actions(
            [mouse({"type": "pointerDown", "button": 0}, pointer_type="touch")]
        )

        with pytest.raises(UnsupportedOperationError):
            await actions.dispatch(fake_page)

    @pytest.mark.asyncio
    async def test_pointer_cancel_always_rejected(self, fake_page):
        actions = Actions([mouse({"type": "pointerCancel"})])

        with pytest.raises(UnsupportedOperationError) as exc_info:
            await actions.dispatch(fake_page)

        assert exc_info.value.error_code == "unsupported operation"


class TestPointerMove:
    """Test cases for pointerMove origins and bounds."""

    @pytest.mark.asyncio
    async def test_viewport_origin(self, fake_page):
        await Actions([mouse(move(10, 20, origin="viewport"))]).dispatch(fake_page)

        fake_page.mouse.move.assert_awaited_once_with(10, 20)

    @pytest.mark.asyncio
    async def test_missing_origin_is_viewport(self, fake_page):
        await Actions([mouse(move(5, 5))]).dispatch(fake_page)

        fake_page.mouse.move.assert_awaited_once_with(5, 5)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("x,y", [(0, 0), (800, 600), (800, 0), (0, 600)])
    async def test_boundaries_accepted(self, fake_page, x, y):
        await Actions([mouse(move(x, y))]).dispatch(fake_page)

        fake_page.mouse.move.assert_awaited_once_with(x, y)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("x,y", [(-1, 0), (0, -1), (801, 0), (0, 601)])
    async def test_out_of_bounds_rejected(self, fake_page, x, y):
        with pytest.raises(MoveTargetOutOfBoundsError, match="out of bounds"):
            await Actions([mouse(move(x, y))]).dispatch(fake_page)

        fake_page.mouse.move.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fractional_coordinates(self, fake_page):
        await Actions([mouse(move(10.5, 20.25, duration=1.5))]).dispatch(fake_page)

        fake_page.mouse.move.assert_awaited_once_with(10.5, 20.25)

    @pytest.mark.asyncio
    async def test_fractional_offset_from_element(self, fake_page):
        fake_page.evaluate.return_value = [100, 50]

        await Actions([mouse(move(0.5, -0.75, origin="#target"))]).dispatch(fake_page)

        fake_page.mouse.move.assert_awaited_once_with(100.5, 49.25)

    @pytest.mark.asyncio
    async def test_fractional_target_past_edge_rejected(self, fake_page):
        with pytest.raises(MoveTargetOutOfBoundsError):
            await Actions([mouse(move(800.5, 0))]).dispatch(fake_page)

    @pytest.mark.asyncio
    async def test_pointer_origin_rejected(self, fake_page):
        with pytest.raises(UnsupportedOperationError):
            await Actions([mouse(move(0, 0, origin="pointer"))]).dispatch(fake_page)

    @pytest.mark.asyncio
    async def test_element_origin_offsets_target(self, fake_page):
        fake_page.evaluate.return_value = [100, 50]

        await Actions([mouse(move(10, -5, origin="#target"))]).dispatch(fake_page)

        fake_page.evaluate.assert_awaited_once_with(ELEMENT_CENTER_JS, "#target")
        fake_page.mouse.move.assert_awaited_once_with(110, 45)

    @pytest.mark.asyncio
    async def test_element_without_client_rect_rejected(self, fake_page):
        fake_page.evaluate.return_value = [-1, -1]

        with pytest.raises(MoveTargetOutOfBoundsError):
            await Actions([mouse(move(5, 5, origin="#hidden"))]).dispatch(fake_page)

    @pytest.mark.asyncio
    async def test_missing_element_rejected(self, fake_page):
        fake_page.evaluate.return_value = None

        with pytest.raises(InvalidArgumentError):
            await Actions([mouse(move(0, 0, origin="#gone"))]).dispatch(fake_page)

    @pytest.mark.asyncio
    async def test_viewport_queried_when_not_fixed(self, fake_page):
        fake_page.viewport_size = None
        fake_page.evaluate.return_value = [300, 200]

        with pytest.raises(MoveTargetOutOfBoundsError):
            await Actions([mouse(move(301, 0))]).dispatch(fake_page)

    @pytest.mark.asyncio
    async def test_move_with_duration_waits(self, fake_page):
        start = time.monotonic()

        await Actions([mouse(move(1, 1, duration=50))]).dispatch(fake_page)

        assert time.monotonic() - start >= 0.045
        fake_page.mouse.move.assert_awaited_once_with(1, 1)


class TestTicks:
    """Test cases for tick ordering and failure propagation."""

    @pytest.mark.asyncio
    async def test_ticks_run_in_order(self, fake_page):
        calls = []
        fake_page.keyboard.down.side_effect = lambda value: calls.append(("down", value))
        fake_page.mouse.move.side_effect = lambda x, y: calls.append(("move", x, y))

        actions = Actions(
            [
                {
                    "type": "key",
                    "id": "kbd",
                    "actions": [
                        {"type": "pause", "duration": 30},
                        {"type": "keyDown", "value": "a"},
                    ],
                },
                mouse(move(1, 1), move(2, 2)),
            ]
        )

        await actions.dispatch(fake_page)

        assert calls == [("move", 1, 1), ("down", "a"), ("move", 2, 2)]

    @pytest.mark.asyncio
    async def test_actions_in_a_tick_run_concurrently(self, fake_page):
        actions = Actions(
            [
                {"type": "none", "id": "a", "actions": [{"type": "pause", "duration": 80}]},
                {"type": "none", "id": "b", "actions": [{"type": "pause", "duration": 80}]},
            ]
        )

        start = time.monotonic()
        await actions.dispatch(fake_page)

        assert time.monotonic() - start < 0.15

    @pytest.mark.asyncio
    async def test_next_tick_waits_for_slowest_action(self, fake_page):
        actions = Actions(
            [
                {"type": "none", "id": "slow", "actions": [{"type": "pause", "duration": 60}]},
                {
                    "type": "key",
                    "id": "kbd",
                    "actions": [
                        {"type": "pause", "duration": 0},
                        {"type": "keyDown", "value": "x"},
                    ],
                },
            ]
        )

        async def assert_not_pressed_early():
            await asyncio.sleep(0.03)
            fake_page.keyboard.down.assert_not_awaited()

        await asyncio.gather(actions.dispatch(fake_page), assert_not_pressed_early())

        fake_page.keyboard.down.assert_awaited_once_with("x")

    @pytest.mark.asyncio
    async def test_rejected_action_fails_dispatch_and_stops_later_ticks(self, fake_page):
        actions = Actions(
            [
                mouse({"type": "pointerCancel"}, {"type": "pointerDown", "button": 0}),
                {"type": "key", "id": "kbd", "actions": [{"type": "keyDown", "value": "a"}]},
            ]
        )

        with pytest.raises(UnsupportedOperationError):
            await actions.dispatch(fake_page)

        fake_page.mouse.down.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_dispatch_processes_when_needed(self, fake_page):
        actions = Actions([mouse(move(3, 4))])

        await actions.dispatch(fake_page)

        assert len(actions.ticks) == 1
