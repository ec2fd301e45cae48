from __future__ import annotations

import time

import pytest

from flashwin.config import DisplayConfig, settings
from flashwin.display import controller as controller_mod
from flashwin.display.controller import TransientDisplayController
from flashwin.errors import InvalidArgumentError, InvalidContentError, NotLiveError, SurfaceTypeError
from flashwin.host.base import Visibility
from flashwin.host.memory import MemoryHost


class RecordingWaiter:
    """Stands in for hold_until; records what the host looked like while held."""

    def __init__(self, host: MemoryHost, result: bool = False) -> None:
        self.host = host
        self.result = result
        self.calls: list[tuple[object, float]] = []
        self.seen: list[dict] = []

    def __call__(self, condition, delay):
        self.calls.append((condition, delay))
        frame = self.host.selected_frame()
        self.seen.append(
            {
                "frame": frame,
                "visibility": self.host.frame_visibility(frame),
                "redraws": self.host.redraw_count,
                "front": self.host.stacking_order()[0],
            }
        )
        return self.result


def _controller(host, **cfg):
    waiter = RecordingWaiter(host)
    return TransientDisplayController(host, DisplayConfig(**cfg), waiter), waiter


@pytest.mark.parametrize("initial", list(Visibility))
def test_restores_visibility_and_focus(host, initial) -> None:
    target = host.add_frame("target", initial)
    other = host.selected_frame()
    ctl, waiter = _controller(host)

    ctl.display_frame_until(target)

    assert waiter.seen[0]["visibility"] is Visibility.VISIBLE
    assert waiter.seen[0]["frame"] is target
    assert host.frame_visibility(target) is initial
    assert host.focused_frame() is other


def test_forces_target_to_front_before_timing(host) -> None:
    target = host.add_frame("target", Visibility.ICONIFIED)
    ctl, waiter = _controller(host)

    ctl.display_frame_until(target)

    assert waiter.seen[0]["front"] is target
    assert waiter.seen[0]["redraws"] == 1
    ops = [op for op, _ in host.calls]
    assert ops.index("raise_frame") < ops.index("redraw") < ops.index("iconify_frame")


def test_stacking_depth_is_not_restored(host) -> None:
    main = host.selected_frame()
    target = host.add_frame("target")
    ctl, _ = _controller(host)

    ctl.display_frame_until(target)

    assert host.stacking_order()[0] is target
    assert host.stacking_order()[1] is main


def test_uses_configured_delay_read_at_call_time(host) -> None:
    cfg = DisplayConfig(hold_delay_seconds=0.5)
    waiter = RecordingWaiter(host)
    ctl = TransientDisplayController(host, cfg, waiter)

    cfg.hold_delay_seconds = 1.25
    ctl.display_frame_until()
    ctl.display_frame_until(delay=0.1)

    assert [d for _, d in waiter.calls] == [1.25, 0.1]


def test_passes_condition_through_and_returns_its_outcome(host) -> None:
    waiter = RecordingWaiter(host, result=True)
    ctl = TransientDisplayController(host, DisplayConfig(), waiter)
    condition = lambda: True  # noqa: E731

    assert ctl.display_frame_until(None, None, condition) is True
    assert waiter.calls[0][0] is condition


def test_shows_requested_content_with_same_window_hint(host) -> None:
    notes = host.add_buffer("notes")
    target = host.add_frame("target")
    hints = []
    host.show_buffer = lambda w, b, h: (hints.append(dict(h)), setattr(w, "buffer", b))
    ctl, _ = _controller(host, creation_parameters={"width": 80})

    ctl.display_frame_until(target, "notes")

    assert host.primary_window(target).buffer is notes
    assert hints == [{"placement": "same-window", "width": 80}]


def test_empty_window_gets_current_buffer(host) -> None:
    scratch = host.current_buffer()
    target = host.add_frame("target")
    ctl, _ = _controller(host)

    ctl.display_frame_until(target)

    assert host.primary_window(target).buffer is scratch


def test_invalid_content_fails_fast_without_mutation(host) -> None:
    target = host.add_frame("target", Visibility.ICONIFIED)
    ctl, waiter = _controller(host)

    with pytest.raises(InvalidContentError, match="nope"):
        ctl.display_frame_until(target, "nope")

    assert host.frame_visibility(target) is Visibility.ICONIFIED
    assert host.calls == [("redraw", None)]
    assert waiter.calls == []


def test_killed_buffer_is_invalid_content(host) -> None:
    gone = host.add_buffer("gone")
    host.kill_buffer(gone)
    ctl, _ = _controller(host)

    with pytest.raises(InvalidContentError):
        ctl.display_frame_until(None, gone)


def test_name_miss_creates_frame_with_creation_parameters(host) -> None:
    ctl, waiter = _controller(host, creation_parameters={"visible": False})

    ctl.display_frame_until("Aux")
    aux = ctl.find_surface_by_name("Aux")
    ctl.display_frame_until("Aux")

    assert aux is not None
    assert aux.parameters == {"visible": False}
    assert [s["visibility"] for s in waiter.seen] == [Visibility.VISIBLE, Visibility.VISIBLE]
    assert host.frame_visibility(aux) is Visibility.INVISIBLE
    assert len([f for f in host.frames() if f.name == "Aux"]) == 1


def test_scenario_visibility_false_creation_parameter(host) -> None:
    ctl, waiter = _controller(host, creation_parameters={"visibility": False})

    ctl.display_frame_until("Aux")
    aux = ctl.find_surface_by_name("Aux")

    assert waiter.seen[0]["frame"] is aux
    assert waiter.seen[0]["visibility"] is Visibility.VISIBLE
    assert host.frame_visibility(aux) is Visibility.INVISIBLE


def test_invalid_content_with_new_name_creates_nothing(host) -> None:
    before = host.frames()
    ctl, waiter = _controller(host)

    with pytest.raises(InvalidContentError, match="nope"):
        ctl.display_frame_until("Aux", "nope")

    assert host.frames() == before
    assert ctl.find_surface_by_name("Aux") is None
    assert host.calls == [("redraw", None)]
    assert waiter.calls == []


@pytest.mark.parametrize("bad", [42, object(), 1.5])
def test_non_frame_target_is_a_type_error(host, bad) -> None:
    ctl, _ = _controller(host)
    with pytest.raises(SurfaceTypeError) as info:
        ctl.display_frame_until(bad)
    assert isinstance(info.value, TypeError)
    assert host.calls == []


def test_window_handle_is_not_a_frame(host) -> None:
    ctl, _ = _controller(host)
    with pytest.raises(SurfaceTypeError):
        ctl.display_frame_until(host.selected_window())


def test_deleted_frame_is_not_live(host) -> None:
    target = host.add_frame("target")
    host.delete_frame(target)
    ctl, _ = _controller(host)

    with pytest.raises(NotLiveError):
        ctl.display_frame_until(target)


@pytest.mark.parametrize("delay", [0, -0.5, "1"])
def test_bad_delay_rejected_before_mutation(host, delay) -> None:
    ctl, _ = _controller(host)
    with pytest.raises(InvalidArgumentError):
        ctl.display_frame_until(delay=delay)
    assert host.calls == []


def test_frame_deleted_during_hold_restores_softly(host, warnings) -> None:
    main = host.selected_frame()
    target = host.add_frame("target", Visibility.INVISIBLE)

    def waiter(condition, delay):
        host.delete_frame(target)
        return True

    TransientDisplayController(host, DisplayConfig(), waiter).display_frame_until(target)

    assert host.focused_frame() is main
    assert "make_frame_invisible" not in [op for op, _ in host.calls]
    assert warnings == []


def test_restore_errors_are_logged_not_raised(host, warnings) -> None:
    target = host.add_frame("target", Visibility.ICONIFIED)

    def broken(frame):
        raise RuntimeError("iconify refused")

    host.iconify_frame = broken
    ctl, _ = _controller(host)

    assert ctl.display_frame_until(target) is False
    assert any("iconify refused" in m for m in warnings)
    assert host.focused_frame() is not target


def test_condition_error_propagates_after_restore(host) -> None:
    target = host.add_frame("target", Visibility.INVISIBLE)

    def waiter(condition, delay):
        raise RuntimeError("condition exploded")

    ctl = TransientDisplayController(host, DisplayConfig(), waiter)
    with pytest.raises(RuntimeError, match="condition exploded"):
        ctl.display_frame_until(target)

    assert host.frame_visibility(target) is Visibility.INVISIBLE


def test_restores_exactly_once(host) -> None:
    target = host.add_frame("target", Visibility.ICONIFIED)
    ctl, _ = _controller(host)

    ctl.display_frame_until(target)

    assert [c for c in host.calls if c[0] == "iconify_frame"] == [("iconify_frame", "target")]


def test_scenario_invisible_selected_frame_real_hold(host) -> None:
    main = host.selected_frame()
    main.visibility = Visibility.INVISIBLE
    settings.hold_delay_seconds = 0.2
    seen = []

    def watch() -> bool:
        seen.append(host.frame_visibility(main))
        return False

    t0 = time.monotonic()
    controller_mod.set_default_host(host)
    satisfied = controller_mod.display_frame_until(None, None, watch)
    elapsed = time.monotonic() - t0

    assert satisfied is False
    assert set(seen) == {Visibility.VISIBLE}
    assert host.frame_visibility(main) is Visibility.INVISIBLE
    assert 0.2 - 0.05 <= elapsed < 1.0


def test_scenario_condition_short_circuits_real_hold(host) -> None:
    settings.hold_delay_seconds = 2.0
    t0 = time.monotonic()
    controller_mod.set_default_host(host)

    satisfied = controller_mod.display_frame_until(None, None, lambda: time.monotonic() - t0 >= 0.1)

    assert satisfied is True
    assert time.monotonic() - t0 < 1.0
