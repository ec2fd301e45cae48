from __future__ import annotations

import pytest
from loguru import logger

from flashwin.config import settings
from flashwin.display import controller as controller_mod
from flashwin.host.memory import MemoryHost


@pytest.fixture(autouse=True)
def _reset_process_state():
    saved = settings.snapshot()
    yield
    settings.hold_delay_seconds = saved.hold_delay_seconds
    settings.poll_interval_seconds = saved.poll_interval_seconds
    settings.creation_parameters = saved.creation_parameters
    controller_mod.set_default_host(None)


@pytest.fixture
def host() -> MemoryHost:
    return MemoryHost()


@pytest.fixture
def warnings():
    messages: list[str] = []
    sink_id = logger.add(lambda msg: messages.append(msg.record["message"]), level="WARNING")
    yield messages
    logger.remove(sink_id)


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
