"""
Ticker - runs a step function on a background thread at a given cadence.

The interval is re-read after every tick, so a game that speeds up as its
score grows is picked up on the next wait. stop() joins the thread, and
because each tick is one synchronous call no tick is ever left half-applied.
"""

import logging
import threading
from typing import Callable, Optional, Union

logger = logging.getLogger(__name__)

Interval = Union[int, float, Callable[[], float]]


class Ticker:
    """
    Calls ``step`` every ``interval_ms`` milliseconds until stopped.

    Args:
        step: Called once per tick. Return False to stop the ticker.
        interval_ms: Milliseconds between ticks, or a callable returning them.
        name: Thread name, used in logs.
    """

    def __init__(self, step: Callable[[], Optional[bool]], interval_ms: Interval, name: str = "ticker"):
        self._step = step
        self._interval_ms = interval_ms
        self.name = name
        self._thread: Optional[threading.Thread] = None
        self._stop_requested = threading.Event()
        self.ticks = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def interval_seconds(self) -> float:
        interval = self._interval_ms() if callable(self._interval_ms) else self._interval_ms
        return max(float(interval), 0.0) / 1000.0

    def start(self) -> None:
        if self.is_running:
            return
        self._stop_requested.clear()
        self._thread = threading.Thread(target=self._run_loop, name=self.name, daemon=True)
        self._thread.start()
        logger.info("Ticker %s started (interval=%.3fs)", self.name, self.interval_seconds())

    def stop(self, timeout: float = 5.0, wait: bool = True) -> None:
        """Request a stop; with wait, also join the thread."""
        self._stop_requested.set()
        thread = self._thread
        if not wait:
            return
        # A step that stops its own ticker must not join itself
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        logger.info("Ticker %s stopped after %d ticks", self.name, self.ticks)

    def _run_loop(self) -> None:
        while not self._stop_requested.wait(self.interval_seconds()):
            try:
                keep_going = self._step()
            except Exception:
                logger.exception("Ticker %s step failed; stopping", self.name)
                break
            self.ticks += 1
            if keep_going is False:
                break
        self._stop_requested.set()
