from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Mapping

import win32api
import win32con
import win32gui

from loguru import logger

from flashwin.host.base import Visibility, initial_visibility
from flashwin.win.window_finder import list_top_level_hwnds


SW_RESTORE = win32con.SW_RESTORE
FOREGROUND_RETRIES = 3
FOREGROUND_RETRY_DELAY = 0.05


@dataclass(frozen=True)
class Win32Frame:
    """A top-level window."""
    hwnd: int


@dataclass(frozen=True)
class Win32Pane:
    """The client area of a top-level window; each frame has exactly one."""
    hwnd: int


@dataclass(frozen=True)
class Win32Content:
    """A window used as content, reparented into a pane when shown."""
    hwnd: int


def _set_foreground(hwnd: int) -> bool:
    # SetForegroundWindow is refused now and then while another process owns the foreground
    for _ in range(FOREGROUND_RETRIES):
        try:
            win32gui.SetForegroundWindow(hwnd)
        except Exception:
            pass
        if win32gui.GetForegroundWindow() == hwnd:
            return True
        time.sleep(FOREGROUND_RETRY_DELAY)
    return False


class Win32Host:
    """Surface host over the Win32 window manager.

    Selection and focus both map to the foreground window; the selection is tracked
    locally so that selecting a frame does not steal the foreground by itself.
    """

    def __init__(self) -> None:
        self._selected: Win32Frame | None = None
        self._bound: dict[int, int] = {}  # pane hwnd -> content hwnd

    # frames

    def frames(self) -> list[Win32Frame]:
        return [Win32Frame(h) for h in list_top_level_hwnds()]

    def frame_name(self, frame: Win32Frame) -> str | None:
        return win32gui.GetWindowText(frame.hwnd) or None

    def is_frame(self, obj: object) -> bool:
        return isinstance(obj, Win32Frame)

    def frame_visibility(self, frame: Win32Frame) -> Visibility:
        if win32gui.IsIconic(frame.hwnd):
            return Visibility.ICONIFIED
        if win32gui.IsWindowVisible(frame.hwnd):
            return Visibility.VISIBLE
        return Visibility.INVISIBLE

    def create_frame(self, name: str, parameters: Mapping[str, Any]) -> Win32Frame:
        start = initial_visibility(parameters)
        style = win32con.WS_OVERLAPPEDWINDOW
        if start is Visibility.VISIBLE:
            style |= win32con.WS_VISIBLE
        hwnd = win32gui.CreateWindowEx(
            0,
            "STATIC",
            name,
            style,
            int(parameters.get("left", win32con.CW_USEDEFAULT)),
            int(parameters.get("top", win32con.CW_USEDEFAULT)),
            int(parameters.get("width", 640)),
            int(parameters.get("height", 480)),
            0,
            0,
            win32api.GetModuleHandle(None),
            None,
        )
        if start is Visibility.ICONIFIED:
            win32gui.ShowWindow(hwnd, win32con.SW_SHOWMINNOACTIVE)
        logger.debug(f"Win32Host: created hwnd={hwnd} title={name!r}")
        return Win32Frame(hwnd)

    def selected_frame(self) -> Win32Frame | None:
        if self._selected is not None and win32gui.IsWindow(self._selected.hwnd):
            return self._selected
        return self.focused_frame()

    def select_frame(self, frame: Win32Frame) -> None:
        self._selected = frame

    def raise_frame(self, frame: Win32Frame) -> None:
        hwnd = frame.hwnd
        if win32gui.IsIconic(hwnd):
            win32gui.ShowWindow(hwnd, SW_RESTORE)
        else:
            # Ensure shown
            win32gui.ShowWindow(hwnd, win32con.SW_SHOW)
        win32gui.BringWindowToTop(hwnd)
        if not _set_foreground(hwnd):
            logger.debug(f"raise_frame: hwnd={hwnd} shown but not foreground")

    def iconify_frame(self, frame: Win32Frame) -> None:
        win32gui.ShowWindow(frame.hwnd, win32con.SW_SHOWMINNOACTIVE)

    def make_frame_invisible(self, frame: Win32Frame) -> None:
        win32gui.ShowWindow(frame.hwnd, win32con.SW_HIDE)

    def focused_frame(self) -> Win32Frame | None:
        hwnd = win32gui.GetForegroundWindow()
        return Win32Frame(hwnd) if hwnd else None

    def focus_frame(self, frame: Win32Frame) -> None:
        self._selected = frame
        _set_foreground(frame.hwnd)

    def primary_window(self, frame: Win32Frame) -> Win32Pane:
        return Win32Pane(frame.hwnd)

    # windows

    def is_window(self, obj: object) -> bool:
        return isinstance(obj, Win32Pane)

    def window_frame(self, window: Win32Pane) -> Win32Frame:
        return Win32Frame(window.hwnd)

    def frame_windows(self, frame: Win32Frame) -> list[Win32Pane]:
        return [Win32Pane(frame.hwnd)]

    def selected_window(self) -> Win32Pane | None:
        frame = self.selected_frame()
        return Win32Pane(frame.hwnd) if frame else None

    def select_window(self, window: Win32Pane) -> None:
        self._selected = Win32Frame(window.hwnd)

    def window_buffer(self, window: Win32Pane) -> Win32Content | None:
        child = self._bound.get(window.hwnd)
        if child and win32gui.IsWindow(child) and win32gui.GetParent(child) == window.hwnd:
            return Win32Content(child)
        return None

    # buffers

    def buffers(self) -> list[Win32Content]:
        hwnds = list_top_level_hwnds()
        hwnds += [h for h in self._bound.values() if h not in hwnds and win32gui.IsWindow(h)]
        return [Win32Content(h) for h in hwnds]

    def buffer_name(self, buffer: Win32Content) -> str | None:
        return win32gui.GetWindowText(buffer.hwnd) or None

    def is_buffer(self, obj: object) -> bool:
        return isinstance(obj, Win32Content)

    def current_buffer(self) -> Win32Content | None:
        window = self.selected_window()
        return self.window_buffer(window) if window else None

    def show_buffer(self, window: Win32Pane, buffer: Win32Content, hints: Mapping[str, Any]) -> None:
        if buffer.hwnd == window.hwnd:
            # a top-level window named as its own content; it is already on screen
            logger.debug(f"show_buffer: hwnd={buffer.hwnd} is the pane itself, not reparenting")
            return
        previous = self._bound.get(window.hwnd)
        if previous and previous != buffer.hwnd and win32gui.IsWindow(previous):
            win32gui.ShowWindow(previous, win32con.SW_HIDE)
        win32gui.SetParent(buffer.hwnd, window.hwnd)
        left, top, right, bottom = win32gui.GetClientRect(window.hwnd)
        win32gui.MoveWindow(buffer.hwnd, left, top, right - left, bottom - top, True)
        win32gui.ShowWindow(buffer.hwnd, win32con.SW_SHOW)
        self._bound[window.hwnd] = buffer.hwnd
        logger.debug(f"show_buffer: hwnd={buffer.hwnd} into pane={window.hwnd} hints={dict(hints)}")

    # common

    def is_live(self, handle: Any) -> bool:
        hwnd = getattr(handle, "hwnd", None)
        return bool(hwnd) and bool(win32gui.IsWindow(hwnd))

    def redraw(self) -> None:
        frame = self.selected_frame()
        if frame is not None and win32gui.IsWindow(frame.hwnd):
            win32gui.RedrawWindow(
                frame.hwnd,
                None,
                None,
                win32con.RDW_INVALIDATE | win32con.RDW_UPDATENOW | win32con.RDW_ALLCHILDREN,
            )
        win32gui.PumpWaitingMessages()
