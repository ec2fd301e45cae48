from __future__ import annotations


class FlashwinError(Exception):
    """Base class for errors raised by flashwin."""


class InvalidArgumentError(FlashwinError, ValueError):
    """Raised when an argument has the wrong type or shape (empty name, non-positive timeout...)."""


class SurfaceTypeError(InvalidArgumentError, TypeError):
    """Raised when a target does not resolve to a frame or window handle."""


class NotLiveError(FlashwinError):
    """Raised when a handle refers to a surface the host has already destroyed."""


class InvalidContentError(FlashwinError):
    """Raised when the requested content does not resolve to an existing buffer."""


class HostUnavailableError(FlashwinError):
    """Raised when no surface host is installed and none can be built on this platform."""


def describe(name: str, value: object) -> str:
    return f"{name}={value!r} ({type(value).__name__})"
