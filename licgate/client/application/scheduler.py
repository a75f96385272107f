"""
Application layer: background revalidation scheduler.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Callable

SECONDS_PER_HOUR = 3600


class RevalidationScheduler:
    """Recurring timer that queues a revalidation job.

    The timer runs in a daemon thread and only enqueues work; the job itself
    runs on a single worker so ticks never overlap. A tick that arrives while
    the previous job is still running is skipped.
    """

    def __init__(
        self,
        job: Callable[[], Any],
        interval_hours: float = 24,
        *,
        interval_seconds: float | None = None,
        on_error: Callable[[BaseException], None] | None = None,
    ):
        self.job = job
        self.interval_seconds = (
            interval_seconds
            if interval_seconds is not None
            else interval_hours * SECONDS_PER_HOUR
        )
        if self.interval_seconds <= 0:
            msg = "Revalidation interval must be positive"
            raise ValueError(msg)
        self.on_error = on_error
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._current: Future | None = None
        self._next_run_at: datetime | None = None
        self.tick_count = 0

    @property
    def is_armed(self) -> bool:
        """True while a next tick is scheduled."""
        return (
            self._thread is not None
            and self._thread.is_alive()
            and not self._stop_event.is_set()
        )

    @property
    def next_run_at(self) -> datetime | None:
        return self._next_run_at if self.is_armed else None

    def start(self) -> None:
        """Arm the timer."""
        with self._lock:
            if self.is_armed:
                self.logger.debug("Revalidation scheduler is already armed")
                return
            self._stop_event = threading.Event()
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="licgate-revalidate"
            )
            self._schedule_next()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="licgate-scheduler",
                daemon=True,
            )
            self._thread.start()
        self.logger.info(
            "Revalidation scheduled every %.0f seconds", self.interval_seconds
        )

    def stop(self, *, wait: bool = True) -> None:
        """Disarm the timer and release the worker."""
        with self._lock:
            self._stop_event.set()
            thread, self._thread = self._thread, None
            executor, self._executor = self._executor, None
            self._next_run_at = None
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=5)
        if executor is not None:
            executor.shutdown(wait=wait)
        self.logger.info("Revalidation scheduler stopped")

    def run_now(self) -> Future | None:
        """Queue the job immediately, outside the regular interval."""
        return self._enqueue()

    def _schedule_next(self) -> None:
        self._next_run_at = datetime.now(timezone.utc) + timedelta(
            seconds=self.interval_seconds
        )

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval_seconds):
            self._schedule_next()
            self._enqueue()

    def _enqueue(self) -> Future | None:
        with self._lock:
            if self._executor is None or self._stop_event.is_set():
                self.logger.debug("Scheduler not armed, revalidation skipped")
                return None
            if self._current is not None and not self._current.done():
                self.logger.warning("Previous revalidation still running, tick skipped")
                return None
            self.tick_count += 1
            self._current = self._executor.submit(self.job)
            self._current.add_done_callback(self._on_done)
            return self._current

    def _on_done(self, future: Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is None:
            return
        self.logger.error(
            "Revalidation job failed", exc_info=(type(error), error, error.__traceback__)
        )
        if self.on_error:
            self.on_error(error)
