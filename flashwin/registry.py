from __future__ import annotations

from typing import Any, Mapping, Optional

from loguru import logger

from flashwin.errors import InvalidArgumentError, describe
from flashwin.host.base import SurfaceHost


def _check_name(name: object) -> str:
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(f"Surface name must be a non-empty string, got {describe('name', name)}")
    return name


class SurfaceRegistry:
    """Name lookups over the host's live frames, windows and buffers. Never mutates the host."""

    def __init__(self, host: SurfaceHost) -> None:
        self.host = host

    def find_by_name(self, name: str) -> Optional[Any]:
        """Return the first live frame named exactly `name`, or None.

        Order follows the host's enumeration; at most one frame is expected to carry a name.
        """
        _check_name(name)
        for frame in self.host.frames():
            if self.host.is_live(frame) and self.host.frame_name(frame) == name:
                logger.debug(f"Found frame for name {name!r}: {frame!r}")
                return frame

        logger.debug(f"No live frame named {name!r}")
        return None

    def find_buffer_by_name(self, name: str) -> Optional[Any]:
        _check_name(name)
        for buffer in self.host.buffers():
            if self.host.is_live(buffer) and self.host.buffer_name(buffer) == name:
                return buffer
        return None

    def find_window_showing(self, buffer: Any) -> Optional[Any]:
        """First live window, searching every frame, whose content is `buffer`."""
        for frame in self.host.frames():
            if not self.host.is_live(frame):
                continue
            for window in self.host.frame_windows(frame):
                if self.host.is_live(window) and self.host.window_buffer(window) == buffer:
                    return window
        return None

    def describe_frames(self, contains: str = "") -> list[str]:
        """One line per live frame: title, visibility and the content of each of its windows."""
        needle = contains.lower()
        lines = []
        for frame in self.host.frames():
            if not self.host.is_live(frame):
                continue
            name = self.host.frame_name(frame) or ""
            if needle and needle not in name.lower():
                continue
            buffers = [self.host.window_buffer(w) for w in self.host.frame_windows(frame)]
            names = [self.host.buffer_name(b) for b in buffers if b is not None]
            lines.append(f"{name!r:40} {self.host.frame_visibility(frame).value:10} {names}")
        return lines

    def find_or_create(self, name: str, parameters: Mapping[str, Any]) -> tuple[Any, bool]:
        frame = self.find_by_name(name)
        if frame is not None:
            return frame, False
        frame = self.host.create_frame(name, dict(parameters))
        logger.info(f"Created frame {name!r} with parameters {dict(parameters)}")
        return frame, True


def find_surface_by_name(name: str, host: SurfaceHost | None = None) -> Optional[Any]:
    """Return the live frame named `name` on `host` (default host if omitted), or None."""
    if host is None:
        from flashwin.display.controller import get_default_host

        host = get_default_host()
    return SurfaceRegistry(host).find_by_name(name)
