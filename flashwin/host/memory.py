from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Mapping

from loguru import logger

from flashwin.host.base import Visibility, initial_visibility


_ids = itertools.count(1)


@dataclass(eq=False)
class MemBuffer:
    name: str
    live: bool = True
    id: int = field(default_factory=lambda: next(_ids))

    def __repr__(self) -> str:
        return f"<MemBuffer {self.name!r}{'' if self.live else ' killed'}>"


@dataclass(eq=False)
class MemWindow:
    frame: "MemFrame"
    buffer: MemBuffer | None = None
    live: bool = True
    id: int = field(default_factory=lambda: next(_ids))

    def __repr__(self) -> str:
        shown = self.buffer.name if self.buffer else None
        return f"<MemWindow {self.id} on {self.frame.name!r} showing {shown!r}>"


@dataclass(eq=False)
class MemFrame:
    name: str
    visibility: Visibility = Visibility.VISIBLE
    parameters: dict[str, Any] = field(default_factory=dict)
    windows: list[MemWindow] = field(default_factory=list)
    selected_window: MemWindow | None = None
    live: bool = True
    id: int = field(default_factory=lambda: next(_ids))

    def __repr__(self) -> str:
        return f"<MemFrame {self.name!r} {self.visibility.value}{'' if self.live else ' deleted'}>"


class MemoryHost:
    """In-process surface host.

    Keeps frames, windows and buffers as plain objects so the display controller can be
    embedded without a real windowing system. Every mutating call is appended to `calls`
    as `(operation, name)` so callers can inspect the sequence afterwards.
    """

    def __init__(self, frame_name: str = "main", buffer_name: str = "scratch") -> None:
        self._frames: list[MemFrame] = []
        self._buffers: list[MemBuffer] = []
        self._stack: list[MemFrame] = []  # front first
        self._selected_frame: MemFrame | None = None
        self._focused_frame: MemFrame | None = None
        self.calls: list[tuple[str, str | None]] = []
        self.redraw_count = 0

        buffer = self.add_buffer(buffer_name)
        frame = self.add_frame(frame_name)
        frame.windows[0].buffer = buffer
        self._selected_frame = frame
        self._focused_frame = frame

    # setup helpers

    def add_buffer(self, name: str) -> MemBuffer:
        buffer = MemBuffer(name=name)
        self._buffers.append(buffer)
        return buffer

    def add_frame(self, name: str, visibility: Visibility = Visibility.VISIBLE, **parameters: Any) -> MemFrame:
        frame = MemFrame(name=name, visibility=visibility, parameters=dict(parameters))
        window = MemWindow(frame=frame)
        frame.windows.append(window)
        frame.selected_window = window
        self._frames.append(frame)
        self._stack.append(frame)
        return frame

    def split_window(self, frame: MemFrame, buffer: MemBuffer | None = None) -> MemWindow:
        window = MemWindow(frame=frame, buffer=buffer)
        frame.windows.append(window)
        return window

    def delete_frame(self, frame: MemFrame) -> None:
        self.calls.append(("delete_frame", frame.name))
        frame.live = False
        for window in frame.windows:
            window.live = False
        if frame in self._frames:
            self._frames.remove(frame)
        if frame in self._stack:
            self._stack.remove(frame)
        fallback = self._frames[0] if self._frames else None
        if self._selected_frame is frame:
            self._selected_frame = fallback
        if self._focused_frame is frame:
            self._focused_frame = fallback

    def kill_buffer(self, buffer: MemBuffer) -> None:
        self.calls.append(("kill_buffer", buffer.name))
        buffer.live = False
        if buffer in self._buffers:
            self._buffers.remove(buffer)
        replacement = self._buffers[0] if self._buffers else None
        for frame in self._frames:
            for window in frame.windows:
                if window.buffer is buffer:
                    window.buffer = replacement

    def stacking_order(self) -> list[MemFrame]:
        return list(self._stack)

    # frames

    def frames(self) -> list[MemFrame]:
        return list(self._frames)

    def frame_name(self, frame: MemFrame) -> str | None:
        return frame.name

    def is_frame(self, obj: object) -> bool:
        return isinstance(obj, MemFrame)

    def frame_visibility(self, frame: MemFrame) -> Visibility:
        return frame.visibility

    def create_frame(self, name: str, parameters: Mapping[str, Any]) -> MemFrame:
        params = dict(parameters)
        frame = self.add_frame(name, initial_visibility(params))
        frame.parameters = params
        frame.windows[0].buffer = self.current_buffer()
        self.calls.append(("create_frame", name))
        logger.debug(f"MemoryHost: created {frame!r} with {params}")
        return frame

    def selected_frame(self) -> MemFrame | None:
        return self._selected_frame

    def select_frame(self, frame: MemFrame) -> None:
        self.calls.append(("select_frame", frame.name))
        self._selected_frame = frame

    def raise_frame(self, frame: MemFrame) -> None:
        self.calls.append(("raise_frame", frame.name))
        frame.visibility = Visibility.VISIBLE
        if frame in self._stack:
            self._stack.remove(frame)
        self._stack.insert(0, frame)

    def iconify_frame(self, frame: MemFrame) -> None:
        self.calls.append(("iconify_frame", frame.name))
        frame.visibility = Visibility.ICONIFIED

    def make_frame_invisible(self, frame: MemFrame) -> None:
        self.calls.append(("make_frame_invisible", frame.name))
        frame.visibility = Visibility.INVISIBLE

    def focused_frame(self) -> MemFrame | None:
        return self._focused_frame

    def focus_frame(self, frame: MemFrame) -> None:
        self.calls.append(("focus_frame", frame.name))
        self._focused_frame = frame
        self._selected_frame = frame

    def primary_window(self, frame: MemFrame) -> MemWindow:
        return frame.windows[0]

    # windows

    def is_window(self, obj: object) -> bool:
        return isinstance(obj, MemWindow)

    def window_frame(self, window: MemWindow) -> MemFrame:
        return window.frame

    def frame_windows(self, frame: MemFrame) -> list[MemWindow]:
        return [w for w in frame.windows if w.live]

    def selected_window(self) -> MemWindow | None:
        frame = self._selected_frame
        return frame.selected_window if frame else None

    def select_window(self, window: MemWindow) -> None:
        self.calls.append(("select_window", window.frame.name))
        window.frame.selected_window = window
        self._selected_frame = window.frame

    def window_buffer(self, window: MemWindow) -> MemBuffer | None:
        return window.buffer

    # buffers

    def buffers(self) -> list[MemBuffer]:
        return list(self._buffers)

    def buffer_name(self, buffer: MemBuffer) -> str | None:
        return buffer.name

    def is_buffer(self, obj: object) -> bool:
        return isinstance(obj, MemBuffer)

    def current_buffer(self) -> MemBuffer | None:
        window = self.selected_window()
        return window.buffer if window else None

    def show_buffer(self, window: MemWindow, buffer: MemBuffer, hints: Mapping[str, Any]) -> None:
        self.calls.append(("show_buffer", buffer.name))
        window.buffer = buffer

    # common

    def is_live(self, handle: Any) -> bool:
        return bool(getattr(handle, "live", False))

    def redraw(self) -> None:
        self.redraw_count += 1
        self.calls.append(("redraw", None))
