from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Protocol, Sequence


class Visibility(str, Enum):
    VISIBLE = "visible"
    ICONIFIED = "iconified"
    INVISIBLE = "invisible"


def initial_visibility(parameters: Mapping[str, Any]) -> Visibility:
    """Visibility a new frame starts with, from its creation parameters.

    Accepts `visibility` (False -> invisible, "icon" -> iconified) as well as the
    `visible` / `iconified` booleans.
    """
    visibility = parameters.get("visibility", True)
    if parameters.get("iconified") or visibility in ("icon", Visibility.ICONIFIED):
        return Visibility.ICONIFIED
    if visibility is False or visibility == Visibility.INVISIBLE or parameters.get("visible", True) is False:
        return Visibility.INVISIBLE
    return Visibility.VISIBLE


class SurfaceHost(Protocol):
    """Windowing environment the display controller drives.

    Handles are opaque: the controller only passes back what the host gave it.
    A handle may stop being live at any time; callers check `is_live` before acting.
    UI mutation is assumed to be serialized by the host.
    """

    # frames

    def frames(self) -> Sequence[Any]:
        ...

    def frame_name(self, frame: Any) -> str | None:
        ...

    def is_frame(self, obj: object) -> bool:
        ...

    def frame_visibility(self, frame: Any) -> Visibility:
        ...

    def create_frame(self, name: str, parameters: Mapping[str, Any]) -> Any:
        ...

    def selected_frame(self) -> Any:
        ...

    def select_frame(self, frame: Any) -> None:
        ...

    def raise_frame(self, frame: Any) -> None:
        """De-iconify, make visible and put the frame in front of the others."""
        ...

    def iconify_frame(self, frame: Any) -> None:
        ...

    def make_frame_invisible(self, frame: Any) -> None:
        ...

    def focused_frame(self) -> Any:
        ...

    def focus_frame(self, frame: Any) -> None:
        """Give the frame input focus; it also becomes the selected frame."""
        ...

    def primary_window(self, frame: Any) -> Any:
        ...

    # windows

    def is_window(self, obj: object) -> bool:
        ...

    def window_frame(self, window: Any) -> Any:
        ...

    def frame_windows(self, frame: Any) -> Sequence[Any]:
        ...

    def selected_window(self) -> Any:
        ...

    def select_window(self, window: Any) -> None:
        ...

    def window_buffer(self, window: Any) -> Any | None:
        ...

    # buffers

    def buffers(self) -> Sequence[Any]:
        ...

    def buffer_name(self, buffer: Any) -> str | None:
        ...

    def is_buffer(self, obj: object) -> bool:
        ...

    def current_buffer(self) -> Any | None:
        ...

    def show_buffer(self, window: Any, buffer: Any, hints: Mapping[str, Any]) -> None:
        ...

    # common

    def is_live(self, handle: Any) -> bool:
        ...

    def redraw(self) -> None:
        """Flush pending display changes so they are visible before returning."""
        ...
