from __future__ import annotations

"""Transient display of frames and windows.

Submodules:
 - controller: resolve a target, force it to the front, hold it, restore visibility and focus
"""

__all__ = [
    "controller",
]
