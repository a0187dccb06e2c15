"""In-process minute scheduler driving the auto-order engine"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, Optional

from canteen_gateway.domain.models import BatchRunSummary
from canteen_gateway.services.auto_order_engine import AutoOrderEngine
from canteen_gateway.utils.date_utils import seconds_until_next_minute

logger = logging.getLogger(__name__)

# Wake slightly after the boundary so the resolved minute is the new one
MINUTE_MARGIN_SECONDS = 0.05


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AutoOrderScheduler:
    """
    Background thread that runs one batch pass at the start of every local minute.

    - Passes run sequentially on one thread, so they never overlap each other
    - A tick that is missed (process down, slow pass) is not caught up
    - stop() is best-effort: a pass already in flight is not drained
    """

    def __init__(self, engine: AutoOrderEngine, clock: Optional[Callable[[], datetime]] = None):
        self._engine = engine
        self._clock = clock or _utc_now
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> Optional[BatchRunSummary]:
        """Run one pass now (public for testing); errors are logged, not raised"""
        try:
            summary = self._engine.run(now=self._clock(), trigger="scheduler")
        except Exception:
            logger.exception("Auto-order scheduler tick failed")
            return None

        logger.info(
            f"Scheduler tick done - candidates: {summary.candidates}, "
            f"succeeded: {summary.succeeded}, failed: {summary.failed}"
        )
        return summary

    def start(self) -> None:
        """Start the scheduler thread; no-op if already running"""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="auto-order-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info("Auto-order scheduler started (every minute)")

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("Auto-order scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run_loop(self) -> None:
        # Event.wait returns True once stop() is called
        while not self._stop_event.wait(timeout=seconds_until_next_minute(self._clock()) + MINUTE_MARGIN_SECONDS):
            self.tick()
