"""
Timer-driven polling of one feed at a time.
"""

import logging
import threading
from typing import Any, Callable, Hashable, Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

logger = logging.getLogger(__name__)

Runner = Callable[[Callable[[], None]], None]


def run_in_thread(job: Callable[[], None]) -> None:
    """Run a fetch job on a daemon thread."""
    threading.Thread(target=job, daemon=True).start()


class PollScheduler(QObject):
    """
    Repeatedly fetches the feed for the current key and hands each result
    to the consumer.

    Every request is tagged with the key, a generation token and a sequence
    number at issue time. A completion is applied only while its generation
    is still current and no later request of the same key has been applied,
    so a slow response for a previous tab or market never overwrites newer
    state. Failures are logged and leave the last result in place.
    """

    result_ready = pyqtSignal(object, object)  # key, records
    fetch_failed = pyqtSignal(object, str)  # key, message

    # generation, seq, key, records, error message; crosses threads as a queued call
    _fetch_done = pyqtSignal(int, int, object, object, object)

    def __init__(
        self,
        fetcher: Callable[[Any], Any],
        interval_ms: int = 3000,
        runner: Optional[Runner] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._fetcher = fetcher
        self._runner = runner or run_in_thread

        self._timer = QTimer(self)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self._tick)

        self._fetch_done.connect(self._on_fetch_done)

        self._key: Optional[Hashable] = None
        self._on_result: Optional[Callable[[Any], None]] = None
        self._generation = 0
        self._next_seq = 0
        self._applied_seq = -1
        self._in_flight = 0

    def start(self, key: Hashable, on_result: Optional[Callable[[Any], None]] = None):
        """Poll ``key`` now and on every interval, replacing any previous key."""
        self.stop()

        self._generation += 1
        self._key = key
        self._on_result = on_result
        self._next_seq = 0
        self._applied_seq = -1

        logger.info(f"Starting polling for {key} every {self._timer.interval()} ms")
        self._timer.start()
        self._tick()

    def stop(self):
        """Stop the timer. Requests already in flight are discarded when they finish."""
        if self._timer.isActive():
            logger.info(f"Stopping polling for {self._key}")
            self._timer.stop()
        if self._key is not None:
            self._generation += 1
        self._key = None
        self._on_result = None

    def is_active(self) -> bool:
        return self._timer.isActive()

    def current_key(self) -> Optional[Hashable]:
        return self._key

    def in_flight(self) -> int:
        """Requests issued but not yet completed."""
        return self._in_flight

    def set_interval(self, interval_ms: int):
        self._timer.setInterval(interval_ms)

    def _tick(self):
        if self._key is None:
            return

        key = self._key
        generation = self._generation
        seq = self._next_seq
        self._next_seq += 1
        self._in_flight += 1

        def job():
            try:
                records = self._fetcher(key)
            except Exception as e:
                self._fetch_done.emit(generation, seq, key, None, str(e) or e.__class__.__name__)
            else:
                self._fetch_done.emit(generation, seq, key, records, None)

        logger.debug(f"Polling {key} (request #{seq})")
        self._runner(job)

    def _on_fetch_done(self, generation: int, seq: int, key, records, error):
        self._in_flight = max(0, self._in_flight - 1)

        if generation != self._generation or key != self._key:
            logger.debug(f"Discarding stale response for {key} (request #{seq})")
            return

        if error is not None:
            logger.error(f"Polling error for {key}: {error}")
            self.fetch_failed.emit(key, error)
            return

        if seq <= self._applied_seq:
            logger.debug(f"Discarding out-of-order response for {key} (request #{seq})")
            return

        self._applied_seq = seq
        if self._on_result is not None:
            self._on_result(records)
        self.result_ready.emit(key, records)
