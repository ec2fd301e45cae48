from __future__ import annotations

import math
import threading
import time
from typing import Callable, Optional

from loguru import logger

from flashwin.config import settings
from flashwin.errors import InvalidArgumentError, describe


Condition = Callable[[], object]

# float slack so a budget of N quanta sleeps exactly N times
_EPSILON = 1e-9


def _check_args(condition: Optional[Condition], timeout_seconds: float, poll_interval: Optional[float]) -> float:
    if condition is not None and not callable(condition):
        raise InvalidArgumentError(f"condition must be callable or None, got {describe('condition', condition)}")
    if isinstance(timeout_seconds, bool) or not isinstance(timeout_seconds, (int, float)):
        raise InvalidArgumentError(f"timeout must be a number, got {describe('timeout_seconds', timeout_seconds)}")
    if math.isnan(timeout_seconds) or timeout_seconds <= 0:
        raise InvalidArgumentError(f"timeout must be > 0, got {describe('timeout_seconds', timeout_seconds)}")
    quantum = settings.poll_interval_seconds if poll_interval is None else poll_interval
    if isinstance(quantum, bool) or not isinstance(quantum, (int, float)) or not quantum > 0:
        raise InvalidArgumentError(f"poll interval must be > 0, got {describe('poll_interval', quantum)}")
    return float(quantum)


def _poll(
    condition: Optional[Condition],
    timeout_seconds: float,
    quantum: float,
    sleep: Callable[[float], object],
) -> bool:
    remaining = float(timeout_seconds)
    while remaining > _EPSILON:
        if condition is not None and condition():
            return True
        step = min(quantum, remaining)
        sleep(step)
        remaining -= step
    return False


def hold_until(
    condition: Optional[Condition],
    timeout_seconds: float,
    *,
    poll_interval: Optional[float] = None,
    sleep: Callable[[float], object] = time.sleep,
) -> bool:
    """Block until `condition()` is truthy or `timeout_seconds` have passed.

    Without a condition this sleeps for the whole timeout. The condition is evaluated,
    then one quantum is slept, then the budget is decremented. Plain sleeping is used so the
    hold can never end early without the condition being true.

    Returns True when the condition ended the hold, False on timeout.
    """
    quantum = _check_args(condition, timeout_seconds, poll_interval)
    return _poll(condition, timeout_seconds, quantum, sleep)


class HoldTask:
    """Handle for a hold running on a background thread.

    The worker only evaluates the condition; it never touches surfaces.
    """

    def __init__(
        self,
        condition: Optional[Condition],
        timeout_seconds: float,
        quantum: float,
        on_done: Optional[Callable[["HoldTask"], object]] = None,
    ) -> None:
        self._condition = condition
        self._timeout = timeout_seconds
        self._quantum = quantum
        self._on_done = on_done
        self._cancel = threading.Event()
        self._finished = threading.Event()
        self.satisfied: bool | None = None
        self.cancelled = False
        self.error: BaseException | None = None
        self._thread = threading.Thread(target=self._run, name="flashwin-hold", daemon=True)

    def start(self) -> "HoldTask":
        self._thread.start()
        return self

    def _sleep(self, seconds: float) -> None:
        # Event.wait only returns early when cancel() was called
        if self._cancel.wait(seconds):
            raise _Cancelled()

    def _run(self) -> None:
        try:
            self.satisfied = _poll(self._condition, self._timeout, self._quantum, self._sleep)
        except _Cancelled:
            self.cancelled = True
            self.satisfied = False
        except Exception as exc:
            self.error = exc
            logger.warning(f"Background hold condition failed: {exc}")
        finally:
            logger.debug(f"Background hold finished: satisfied={self.satisfied} cancelled={self.cancelled}")
            if self._on_done is not None:
                try:
                    self._on_done(self)
                except Exception as exc:
                    logger.warning(f"Background hold callback failed: {exc}")
            self._finished.set()

    @property
    def done(self) -> bool:
        return self._finished.is_set()

    def join(self, timeout: float | None = None) -> bool:
        self._finished.wait(timeout)
        return self.done

    def cancel(self) -> None:
        """Ask the worker to stop at its next quantum boundary."""
        self._cancel.set()


class _Cancelled(Exception):
    pass


def hold_until_async(
    condition: Optional[Condition],
    timeout_seconds: float,
    *,
    poll_interval: Optional[float] = None,
    on_done: Optional[Callable[[HoldTask], object]] = None,
) -> HoldTask:
    """Run the same poll loop as `hold_until` on a daemon thread and return immediately."""
    quantum = _check_args(condition, timeout_seconds, poll_interval)
    return HoldTask(condition, timeout_seconds, quantum, on_done).start()
