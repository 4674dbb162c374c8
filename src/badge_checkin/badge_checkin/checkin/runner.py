from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from ..core.enums import ScanOutcome
from ..core.exceptions import ReaderError, Timeout
from .model import ScanResult
from .service import CheckInOrchestrator

logger = logging.getLogger(__name__)


class ScanLoop:
    """Keeps scanning badges on a background thread until stopped.

    Each iteration is a complete, independent scan; read timeouts pause for
    ``idle_delay`` and start the next wait. The reader's ``read_tag_bytes``
    is expected to block until a badge is newly presented: a badge left on
    the reader is not filtered here and would be submitted again, which the
    service then answers as already checked in.
    """

    def __init__(
        self,
        orchestrator: CheckInOrchestrator,
        *,
        checkin: bool = True,
        on_result: Optional[Callable[[ScanResult], None]] = None,
        reader_retry_delay: float = 1.0,
        idle_delay: float = 0.2,
    ):
        self._orchestrator = orchestrator
        self._checkin = checkin
        self._on_result = on_result
        self._retry_delay = reader_retry_delay
        self._idle_delay = idle_delay
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last: Optional[ScanResult] = None
        self._last_lock = threading.Lock()

    @property
    def last_result(self) -> Optional[ScanResult]:
        with self._last_lock:
            return self._last

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.is_running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="badge-scan-loop", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if not self._thread.is_alive():
                self._thread = None
            else:
                logger.warning("Scan loop still finishing a scan after stop()")

    def run(self) -> None:
        logger.info("Scan loop started")
        while not self._stop.is_set():
            self.run_once()
        logger.info("Scan loop stopped")

    def run_once(self) -> ScanResult:
        result = self._orchestrator.scan(checkin=self._checkin, cancel=self._stop)
        # Waiting for a badge that never came, or a stop between badges, is
        # not worth reporting.
        if result.outcome == ScanOutcome.FAILED and isinstance(result.error, Timeout) and result.badge is None:
            # A reader that gives up early must not turn this into a busy loop.
            self._stop.wait(self._idle_delay)
            return result
        if result.outcome == ScanOutcome.CANCELLED and not result.mutation_sent:
            return result
        if isinstance(result.error, ReaderError):
            # Unplugged or wedged reader: back off instead of spinning.
            self._stop.wait(self._retry_delay)
        with self._last_lock:
            self._last = result
        if self._on_result is not None:
            try:
                self._on_result(result)
            except Exception:
                logger.exception("Scan result callback failed")
        return result
