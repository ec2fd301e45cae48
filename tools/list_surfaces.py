from __future__ import annotations

import argparse

from loguru import logger

from flashwin.display.controller import get_default_host
from flashwin.errors import FlashwinError
from flashwin.registry import SurfaceRegistry


def parse_args() -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="List live frames and the content each one shows")
    ap.add_argument("--contains", type=str, default="", help="Only frames whose title contains this text (case-insensitive)")
    return ap.parse_args()


def main() -> int:
    args = parse_args()
    try:
        host = get_default_host()
    except FlashwinError as exc:
        logger.error(str(exc))
        return 1

    lines = SurfaceRegistry(host).describe_frames(args.contains)
    for line in lines:
        print(line)
    logger.info(f"{len(lines)} frame(s)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
