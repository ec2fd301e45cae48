from __future__ import annotations

import sys
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from loguru import logger

from flashwin.config import DisplayConfig, settings
from flashwin.errors import (
    HostUnavailableError,
    InvalidArgumentError,
    InvalidContentError,
    NotLiveError,
    SurfaceTypeError,
    describe,
)
from flashwin.host.base import SurfaceHost, Visibility
from flashwin.registry import SurfaceRegistry
from flashwin.waiter import Condition, hold_until


SAME_WINDOW = "same-window"


class Phase(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    DISPLAYING = "displaying"
    HOLDING = "holding"
    RESTORING = "restoring"
    DONE = "done"


@dataclass(frozen=True)
class DisplayRequest:
    target: Any
    content: Any
    condition: Optional[Condition]
    delay: float


@dataclass(frozen=True)
class PriorState:
    frame: Any
    visibility: Visibility
    focus: Any
    window: Any = None


class TransientDisplayController:
    """Force a surface to the front, hold it there, then put visibility and focus back.

    Per call: resolve the target, validate content, capture prior state, display,
    hold until the condition or the delay, restore. Restoration runs exactly once on every
    exit path and never raises; stacking depth is not restored.
    """

    def __init__(
        self,
        host: SurfaceHost,
        config: DisplayConfig | None = None,
        waiter: Callable[[Optional[Condition], float], bool] = hold_until,
    ) -> None:
        self.host = host
        self.config = config if config is not None else settings
        self.registry = SurfaceRegistry(host)
        self._waiter = waiter

    # public entry points

    def display_frame_until(
        self,
        frame: Any = None,
        content: Any = None,
        condition: Optional[Condition] = None,
        *,
        delay: float | None = None,
    ) -> bool:
        """Show `frame` (handle, name, or None for the selected frame) until `condition` or the delay.

        A frame name with no live match is created with the configured creation parameters.
        The focus holder active at call start is restored, even when it is another frame.
        """
        cfg = self.config.snapshot()
        request = self._request(frame, content, condition, delay)
        self._phase(Phase.RESOLVING, request)
        if isinstance(frame, str):
            # a name may create a frame, so bad content has to fail first
            buffer = self._resolve_content(content)
            target = self._resolve_frame(frame, cfg)
        else:
            target = self._resolve_frame(frame, cfg)
            buffer = self._resolve_content(content)
        prior = PriorState(
            frame=target,
            visibility=self.host.frame_visibility(target),
            focus=self.host.focused_frame(),
        )
        return self._run(request, prior, self.host.primary_window(target), buffer, cfg)

    def display_window_until(
        self,
        window_or_content: Any = None,
        content: Any = None,
        condition: Optional[Condition] = None,
        *,
        delay: float | None = None,
    ) -> bool:
        """Show a window until `condition` or the delay, then restore the selected window too.

        `window_or_content` is a window, a buffer, a buffer name or None (selected window).
        A buffer is looked up in every frame; when no window shows it the selected window is
        used and, without explicit `content`, the buffer itself becomes the content.
        """
        cfg = self.config.snapshot()
        request = self._request(window_or_content, content, condition, delay)
        self._phase(Phase.RESOLVING, request)
        window, content = self._resolve_window(window_or_content, content)
        buffer = self._resolve_content(content)
        frame = self.host.window_frame(window)
        if not self.host.is_live(frame):
            raise NotLiveError(f"Window {window!r} belongs to a deleted frame {frame!r}")
        prior = PriorState(
            frame=frame,
            visibility=self.host.frame_visibility(frame),
            focus=self.host.focused_frame(),
            window=self.host.selected_window(),
        )
        return self._run(request, prior, window, buffer, cfg, select=window)

    def find_surface_by_name(self, name: str) -> Optional[Any]:
        return self.registry.find_by_name(name)

    # phases

    def _request(self, target: Any, content: Any, condition: Optional[Condition], delay: float | None) -> DisplayRequest:
        if condition is not None and not callable(condition):
            raise InvalidArgumentError(f"condition must be callable or None, got {describe('condition', condition)}")
        if delay is None:
            delay = self.config.hold_delay_seconds
        if isinstance(delay, bool) or not isinstance(delay, (int, float)) or not delay > 0:
            raise InvalidArgumentError(f"Hold delay must be > 0, got {describe('delay', delay)}")
        return DisplayRequest(target, content, condition, float(delay))

    def _phase(self, phase: Phase, request: DisplayRequest) -> None:
        logger.debug(f"display {request.target!r}: {phase.value}")

    def _resolve_frame(self, frame: Any, cfg: DisplayConfig) -> Any:
        if frame is None:
            frame = self.host.selected_frame()
        elif isinstance(frame, str):
            frame, _ = self.registry.find_or_create(frame, cfg.creation_parameters)
        if frame is None or not self.host.is_frame(frame):
            raise SurfaceTypeError(f"Expected a frame handle or name, got {describe('frame', frame)}")
        if not self.host.is_live(frame):
            raise NotLiveError(f"Frame is not live: {frame!r}")
        return frame

    def _resolve_window(self, target: Any, content: Any) -> tuple[Any, Any]:
        if target is None:
            window = self.host.selected_window()
        elif self.host.is_window(target):
            window = target
        elif isinstance(target, str) or self.host.is_buffer(target):
            buffer = self.registry.find_buffer_by_name(target) if isinstance(target, str) else target
            window = self.registry.find_window_showing(buffer) if buffer is not None else None
            if window is None:
                window = self.host.selected_window()
                if content is None:
                    content = target
        else:
            raise SurfaceTypeError(f"Expected a window, buffer or buffer name, got {describe('window_or_content', target)}")
        if window is None or not self.host.is_window(window):
            raise SurfaceTypeError(f"No window to display in, got {describe('window', window)}")
        if not self.host.is_live(window):
            raise NotLiveError(f"Window is not live: {window!r}")
        return window, content

    def _resolve_content(self, content: Any) -> Any:
        if content is None:
            return None
        if isinstance(content, str):
            buffer = self.registry.find_buffer_by_name(content) if content else None
        elif self.host.is_buffer(content) and self.host.is_live(content):
            buffer = content
        else:
            buffer = None
        if buffer is None:
            # let the caller see the environment as it is at the point of failure
            self.host.redraw()
            raise InvalidContentError(f"Content does not name an existing buffer: {describe('content', content)}")
        return buffer

    def _display(self, prior: PriorState, window: Any, buffer: Any, cfg: DisplayConfig, select: Any) -> None:
        host = self.host
        if buffer is None and host.window_buffer(window) is None:
            # current content of the caller's selection, read before selection moves
            buffer = host.current_buffer()
        host.select_frame(prior.frame)
        if select is not None:
            host.select_window(select)
        host.raise_frame(prior.frame)
        if buffer is not None and host.window_buffer(window) != buffer:
            host.show_buffer(window, buffer, {"placement": SAME_WINDOW, **cfg.creation_parameters})
        host.redraw()

    def _run(
        self,
        request: DisplayRequest,
        prior: PriorState,
        window: Any,
        buffer: Any,
        cfg: DisplayConfig,
        select: Any = None,
    ) -> bool:
        try:
            self._phase(Phase.DISPLAYING, request)
            self._display(prior, window, buffer, cfg, select)
            self._phase(Phase.HOLDING, request)
            satisfied = bool(self._waiter(request.condition, request.delay))
            logger.info(
                f"Held {prior.frame!r} "
                f"({'condition met' if satisfied else f'{request.delay:g}s elapsed'})"
            )
        finally:
            self._phase(Phase.RESTORING, request)
            self._restore(prior)
            self._phase(Phase.DONE, request)
        return satisfied

    def _restore(self, prior: PriorState) -> None:
        host = self.host
        frame = prior.frame
        try:
            if not host.is_live(frame):
                logger.debug(f"restore: frame {frame!r} is gone, nothing to restore")
            elif prior.visibility is Visibility.ICONIFIED:
                host.iconify_frame(frame)
            elif prior.visibility is Visibility.INVISIBLE:
                host.make_frame_invisible(frame)
        except Exception as exc:
            logger.warning(f"restore visibility of {frame!r} failed: {exc}")

        try:
            if prior.focus is not None and host.is_live(prior.focus):
                host.focus_frame(prior.focus)
        except Exception as exc:
            logger.warning(f"restore focus to {prior.focus!r} failed: {exc}")

        if prior.window is None:
            return
        try:
            if host.is_live(prior.window):
                host.select_window(prior.window)
                owner = host.window_frame(prior.window)
                if host.is_live(owner):
                    host.focus_frame(owner)
        except Exception as exc:
            logger.warning(f"restore selected window {prior.window!r} failed: {exc}")


_default_host: SurfaceHost | None = None


def set_default_host(host: SurfaceHost | None) -> None:
    global _default_host
    _default_host = host


def get_default_host() -> SurfaceHost:
    global _default_host
    if _default_host is None:
        if sys.platform != "win32":
            raise HostUnavailableError("No surface host installed; call set_default_host() first")
        from flashwin.win.win32_host import Win32Host

        _default_host = Win32Host()
    return _default_host


def display_frame_until(
    frame: Any = None,
    content: Any = None,
    condition: Optional[Condition] = None,
    *,
    delay: float | None = None,
) -> bool:
    return TransientDisplayController(get_default_host()).display_frame_until(frame, content, condition, delay=delay)


def display_window_until(
    window_or_content: Any = None,
    content: Any = None,
    condition: Optional[Condition] = None,
    *,
    delay: float | None = None,
) -> bool:
    return TransientDisplayController(get_default_host()).display_window_until(
        window_or_content, content, condition, delay=delay
    )
