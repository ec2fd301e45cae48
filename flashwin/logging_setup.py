from __future__ import annotations

import os
from pathlib import Path
from loguru import logger

from dotenv import load_dotenv


def setup_logging(logs_dir: str | os.PathLike[str] | None = None, console_level: str | None = None) -> Path:
    """Configure loguru sinks for flashwin and return the log file path.

    `logs_dir` defaults to FLASHWIN_LOG_DIR (or `logs`), `console_level` to FLASHWIN_LOG_LEVEL
    (or INFO). The file sink always records DEBUG, which includes every hold phase.
    """
    load_dotenv(override=False)
    logs_path = Path(logs_dir if logs_dir is not None else os.getenv("FLASHWIN_LOG_DIR", "logs"))
    level = (console_level or os.getenv("FLASHWIN_LOG_LEVEL", "INFO")).upper()
    logs_path.mkdir(parents=True, exist_ok=True)
    log_file = logs_path / "flashwin.log"

    logger.remove()
    logger.add(
        log_file,
        rotation="5 MB",
        retention=10,
        compression="zip",
        enqueue=True,
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {thread.name} | {name}:{function}:{line} | {message}",
    )
    logger.add(
        lambda msg: print(msg, end=""),
        level=level,
        colorize=True,
        format="<green>{time:HH:mm:ss}</green> | <level>{level:<8}</level> | <cyan>{message}</cyan>",
    )
    return log_file
