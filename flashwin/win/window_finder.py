from __future__ import annotations

from typing import Optional

from loguru import logger

from pywinauto import findwindows


def list_top_level_hwnds(visible_only: bool = False) -> list[int]:
    """Return top-level window handles in z-order as reported by pywinauto."""
    try:
        return [int(h) for h in findwindows.find_windows(top_level_only=True, visible_only=visible_only)]
    except findwindows.ElementNotFoundError:
        return []
    except Exception as exc:
        logger.warning(f"find_windows enumeration error: {exc}")
        return []


def find_hwnd_by_title(title: str, visible_only: bool = False) -> Optional[int]:
    """Return the first top-level window handle whose title equals `title` exactly."""
    try:
        hwnds = findwindows.find_windows(title=title, top_level_only=True, visible_only=visible_only)
    except findwindows.ElementNotFoundError:
        return None
    except Exception as exc:
        logger.warning(f"find_windows error for {title!r}: {exc}")
        return None
    if hwnds:
        logger.debug(f"Found window(s) for title {title!r}: {hwnds}")
        return int(hwnds[0])
    return None
