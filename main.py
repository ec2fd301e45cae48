from __future__ import annotations

import argparse
from pathlib import Path

from loguru import logger

from flashwin.logging_setup import setup_logging
from flashwin.config import apply_env_overrides
from flashwin.errors import FlashwinError
from flashwin.display.controller import display_frame_until, display_window_until, get_default_host
from flashwin.registry import SurfaceRegistry, find_surface_by_name


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Bring a frame or window to the front for a moment, then put it back")
    ap.add_argument("--frame", type=str, default=None, help="Frame title (created if missing); default: selected frame")
    ap.add_argument("--window", action="store_true", help="Target the window showing --content instead of a frame")
    ap.add_argument("--content", type=str, default=None, help="Name of the content to show while held")
    ap.add_argument("--delay", type=float, default=None, help="Hold delay in seconds (default: FLASHWIN_HOLD_DELAY or 0.5)")
    ap.add_argument("--until-file", type=str, default="", help="End the hold early once this file exists")
    ap.add_argument("--find", type=str, default="", help="Only look up a frame by title and print it")
    ap.add_argument("--list", action="store_true", help="Print live frames with their visibility and content, then exit")
    return ap.parse_args()


def main() -> int:
    args = parse_args()
    setup_logging()
    try:
        cfg = apply_env_overrides()
        if args.list:
            for line in SurfaceRegistry(get_default_host()).describe_frames():
                print(line)
            return 0
        if args.find:
            frame = find_surface_by_name(args.find)
            logger.info(f"{args.find!r} -> {frame!r}")
            return 0 if frame is not None else 1

        condition = None
        if args.until_file:
            marker = Path(args.until_file)
            condition = marker.exists

        logger.info(f"Holding for up to {args.delay or cfg.hold_delay_seconds:g}s…")
        if args.window:
            satisfied = display_window_until(args.content, None, condition, delay=args.delay)
        else:
            satisfied = display_frame_until(args.frame, args.content, condition, delay=args.delay)
    except FlashwinError as exc:
        logger.error(f"{type(exc).__name__}: {exc}")
        return 1
    logger.info("Condition met" if satisfied else "Hold delay elapsed")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
