"""
Background sweep of expired attempts.

Runs AttemptStateMachine.sweep() in a daemon thread at a fixed interval so
that attempts whose deadline passed are timed out even when the user never
comes back to submit or complete.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from loguru import logger

from .tracker import AttemptStateMachine


@dataclass
class SweepStatus:
    """Current sweeper status."""

    is_running: bool = False
    is_sweeping: bool = False
    last_sweep_at: datetime | None = None
    last_sweep_success: bool = True
    last_timed_out: int = 0
    total_timed_out: int = 0
    total_sweeps: int = 0
    error_message: str | None = None


@dataclass
class BackgroundSweeper:
    """
    Periodic expired-attempt sweeper.

    Usage:
        sweeper = BackgroundSweeper(tracker, interval_seconds=60)
        sweeper.start()
        # ... service runs ...
        sweeper.stop()
    """

    tracker: AttemptStateMachine
    interval_seconds: float = 60
    on_sweep_complete: Callable[[SweepStatus], None] | None = None

    # Internal state
    _status: SweepStatus = field(default_factory=SweepStatus)
    _thread: threading.Thread | None = field(default=None, repr=False)
    _stop_event: threading.Event = field(default_factory=threading.Event, repr=False)
    _sweep_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    @property
    def status(self) -> SweepStatus:
        """Get current sweep status."""
        return self._status

    def start(self) -> None:
        """Start the background sweep thread."""
        if self._status.is_running:
            logger.warning("Background sweeper already running")
            return

        self._stop_event.clear()
        self._status.is_running = True
        self._thread = threading.Thread(
            target=self._sweep_loop,
            name="attempt-sweeper",
            daemon=True,
        )
        self._thread.start()
        logger.info("Background sweeper started (interval: {}s)", self.interval_seconds)

    def stop(self) -> None:
        """Stop the sweeper gracefully."""
        if not self._status.is_running:
            return

        logger.info("Stopping background sweeper...")
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

        self._status.is_running = False
        logger.info("Background sweeper stopped")

    def sweep_now(self) -> int:
        """
        Run one sweep immediately (blocking).

        Returns:
            Number of attempts timed out, or 0 when a sweep is already running
        """
        return self._do_sweep()

    def _sweep_loop(self) -> None:
        while not self._stop_event.is_set():
            # Wait for interval or stop event
            if self._stop_event.wait(timeout=self.interval_seconds):
                break
            self._do_sweep()

    def _do_sweep(self) -> int:
        if not self._sweep_lock.acquire(blocking=False):
            logger.debug("Sweep already in progress - skipping")
            return 0

        self._status.is_sweeping = True
        timed_out = 0
        try:
            timed_out = self.tracker.sweep()
            self._status.last_sweep_success = True
            self._status.error_message = None
        except Exception as exc:
            # Keep the loop alive; the next cycle retries
            logger.error("Background sweep error: {}", exc)
            self._status.last_sweep_success = False
            self._status.error_message = str(exc)
        finally:
            self._status.last_sweep_at = datetime.now(timezone.utc)
            self._status.last_timed_out = timed_out
            self._status.total_timed_out += timed_out
            self._status.total_sweeps += 1
            self._status.is_sweeping = False
            self._sweep_lock.release()

        if self.on_sweep_complete:
            try:
                self.on_sweep_complete(self._status)
            except Exception as exc:
                logger.warning("Sweep callback failed: {}", exc)

        return timed_out
