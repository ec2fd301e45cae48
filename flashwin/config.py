from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from dotenv import load_dotenv

from flashwin.errors import InvalidArgumentError


@dataclass
class DisplayConfig:
    """Process-wide settings read by the display controller at call time.

    - `hold_delay_seconds`: How long a surface stays forced to the front when no condition ends the hold.
    - `creation_parameters`: Key/value pairs handed to the host when a named frame has to be created
      (e.g. `{"visible": False}`); also passed as placement hints when content is shown.
    - `poll_interval_seconds`: Quantum between two evaluations of a hold condition.
    """
    hold_delay_seconds: float = 0.5
    creation_parameters: dict[str, Any] = field(default_factory=dict)
    poll_interval_seconds: float = 0.05

    def snapshot(self) -> "DisplayConfig":
        return DisplayConfig(
            hold_delay_seconds=self.hold_delay_seconds,
            creation_parameters=dict(self.creation_parameters),
            poll_interval_seconds=self.poll_interval_seconds,
        )


# Mutable by the embedding application at any time
settings = DisplayConfig()


def _parse_float(env_name: str, raw: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise InvalidArgumentError(f"{env_name} must be a number, got {raw!r}") from None
    if value <= 0:
        raise InvalidArgumentError(f"{env_name} must be > 0, got {raw!r}")
    return value


def _parse_value(raw: str) -> Any:
    lowered = raw.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    for conv in (int, float):
        try:
            return conv(raw)
        except ValueError:
            continue
    return raw


def parse_creation_parameters(raw: str) -> dict[str, Any]:
    """Parse `visible=false,width=640` into `{"visible": False, "width": 640}`."""
    params: dict[str, Any] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise InvalidArgumentError(f"Malformed creation parameter {item!r}, expected key=value")
        params[key.strip()] = _parse_value(value.strip())
    return params


def load_display_config() -> DisplayConfig:
    load_dotenv(override=False)

    # Allow overrides through env vars
    delay_env = os.getenv("FLASHWIN_HOLD_DELAY", "").strip()
    poll_env = os.getenv("FLASHWIN_POLL_INTERVAL", "").strip()
    params_env = os.getenv("FLASHWIN_CREATION_PARAMS", "").strip()

    cfg = DisplayConfig()
    if delay_env:
        cfg.hold_delay_seconds = _parse_float("FLASHWIN_HOLD_DELAY", delay_env)
    if poll_env:
        cfg.poll_interval_seconds = _parse_float("FLASHWIN_POLL_INTERVAL", poll_env)
    if params_env:
        cfg.creation_parameters = parse_creation_parameters(params_env)
    return cfg


def apply_env_overrides(cfg: DisplayConfig | None = None) -> DisplayConfig:
    """Update the process-wide `settings` in place from the environment (or from `cfg`)."""
    loaded = cfg if cfg is not None else load_display_config()
    settings.hold_delay_seconds = loaded.hold_delay_seconds
    settings.poll_interval_seconds = loaded.poll_interval_seconds
    settings.creation_parameters = dict(loaded.creation_parameters)
    return settings
