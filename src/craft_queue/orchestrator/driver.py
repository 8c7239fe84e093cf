"""Fixed-interval tick source for the orchestrator."""

from __future__ import annotations

import logging
import signal
import threading
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from craft_queue.agent.bridge import AgentBridge
from craft_queue.config import DEFAULT_POLLING_INTERVAL_MS, clamp_polling_interval
from craft_queue.orchestrator.engine import Orchestrator
from craft_queue.orchestrator.models import TickSummary

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DriverRunSummary:
    """Aggregate loop counters for CLI reporting."""

    ticks: int = 0
    completed: int = 0
    dispatched: int = 0
    failed: int = 0


class PollingDriver:
    """Calls probe, status refresh and ``Orchestrator.tick`` on a throttled interval.

    ``poll`` may be invoked as often as the host likes; it only ticks once
    the configured interval has elapsed since the previous tick.
    """

    def __init__(
        self,
        *,
        bridge: AgentBridge,
        orchestrator: Orchestrator,
        interval_ms: int = DEFAULT_POLLING_INTERVAL_MS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.bridge = bridge
        self.orchestrator = orchestrator
        self.interval_ms = clamp_polling_interval(interval_ms)
        self._clock = clock
        self._last_tick_at: float | None = None
        self._tick_lock = threading.Lock()
        self._stop_requested = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def interval_seconds(self) -> float:
        return self.interval_ms / 1000

    def poll(self, now: float | None = None) -> TickSummary | None:
        """Tick if the interval elapsed, otherwise return ``None``."""

        current = self._clock() if now is None else now
        with self._tick_lock:
            if (
                self._last_tick_at is not None
                and (current - self._last_tick_at) < self.interval_seconds
            ):
                return None
            self._last_tick_at = current
            self.bridge.probe()
            status = self.bridge.refresh_status()
            return self.orchestrator.tick(status)

    def run_loop(
        self,
        *,
        max_ticks: int | None = None,
        until_idle: bool = False,
    ) -> DriverRunSummary:
        """Tick until stopped, ``max_ticks`` reached, or (optionally) the session idles."""

        aggregate = DriverRunSummary()
        with self._signal_handlers():
            while not self._stop_requested.is_set():
                if max_ticks is not None and aggregate.ticks >= max_ticks:
                    break
                summary = self.poll()
                if summary is None:
                    self._sleep_with_stop(self._remaining_interval())
                    continue

                aggregate.ticks += 1
                aggregate.completed += int(summary.completed_item_id is not None)
                aggregate.dispatched += int(summary.dispatched_item_id is not None)
                aggregate.failed += int(summary.failed_item_id is not None)
                if until_idle and not self.orchestrator.state.running:
                    break
        return aggregate

    def start(self) -> None:
        """Run the loop on a daemon thread."""

        if self._thread is not None:
            return
        self._stop_requested.clear()
        self._thread = threading.Thread(
            target=self._thread_main,
            daemon=True,
            name="craft-queue-driver",
        )
        self._thread.start()
        logger.info("Polling driver started (interval=%dms)", self.interval_ms)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_requested.set()
        if self._thread is None:
            return
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Polling driver stopped")

    def request_stop(self) -> None:
        self._stop_requested.set()

    def _thread_main(self) -> None:
        while not self._stop_requested.is_set():
            try:
                self.poll()
            except Exception:
                logger.exception("Polling driver tick failed")
            self._stop_requested.wait(timeout=self._remaining_interval())

    def _remaining_interval(self) -> float:
        if self._last_tick_at is None:
            return 0.0
        elapsed = self._clock() - self._last_tick_at
        return max(0.0, self.interval_seconds - elapsed)

    def _sleep_with_stop(self, seconds: float) -> None:
        deadline = time.monotonic() + seconds
        while not self._stop_requested.is_set() and time.monotonic() < deadline:
            time.sleep(min(0.05, max(0.0, deadline - time.monotonic())))

    @contextmanager
    def _signal_handlers(self) -> Iterator[None]:
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        original_sigint = signal.getsignal(signal.SIGINT)
        original_sigterm = signal.getsignal(signal.SIGTERM)

        def _handler(signum: int, _: object | None) -> None:
            try:
                name = signal.Signals(signum).name
            except ValueError:
                name = str(signum)
            logger.info("Received %s, stopping polling loop", name)
            self._stop_requested.set()

        signal.signal(signal.SIGINT, _handler)
        signal.signal(signal.SIGTERM, _handler)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, original_sigint)
            signal.signal(signal.SIGTERM, original_sigterm)
