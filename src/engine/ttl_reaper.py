"""Background sweep that removes records whose TTL has elapsed."""

import threading
import time
from datetime import datetime
from typing import Optional

from aws_lambda_powertools.logging import Logger

from .record_store import RecordStore

logger = Logger()


class TTLReaper:
    """Periodically delete expired records from a record store.

    Reads already hide expired records, so the reaper only reclaims space and
    index entries. Deletions go through the store's ordinary delete path one
    record at a time, and a failure on one record never stops the sweep.
    """

    def __init__(
        self,
        store: RecordStore,
        interval_seconds: float = 60.0,
        batch_size: int = 100,
    ) -> None:
        """Initialize the reaper.

        Args:
            store: Store to sweep
            interval_seconds: Delay between sweeps
            batch_size: Records deleted before yielding to other threads

        Raises:
            ValueError: If interval or batch size is not positive
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self.store = store
        self.interval_seconds = interval_seconds
        self.batch_size = batch_size
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background sweep thread; no-op if already running."""
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run, name="ttl-reaper", daemon=True
        )
        self._thread.start()
        logger.info(
            "TTL reaper started",
            extra={
                "interval_seconds": self.interval_seconds,
                "batch_size": self.batch_size,
            },
        )

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the sweep thread to exit and wait for it.

        If the thread is still running when ``timeout`` elapses, its handle is
        kept so ``running`` stays true and ``start`` does not launch a second one.
        """
        self._stop_event.set()
        if self._thread is None:
            return
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning(
                "TTL reaper did not stop within timeout", extra={"timeout": timeout}
            )
            return
        self._thread = None
        logger.info("TTL reaper stopped")

    def sweep(self, now: Optional[datetime] = None, interruptible: bool = False) -> int:
        """
        Delete every record expired at ``now``.

        Args:
            now: Reference time, defaults to the store clock
            interruptible: Stop between batches once ``stop`` has been called

        Returns:
            Number of records removed
        """
        moment = now or self.store.now()
        expired = self.store.expired_keys(moment)
        removed = 0
        failed = 0

        for start in range(0, len(expired), self.batch_size):
            if interruptible and self._stop_event.is_set():
                break
            for partition_key, sort_key in expired[start : start + self.batch_size]:
                try:
                    if self.store.delete_expired(partition_key, sort_key, moment):
                        removed += 1
                except Exception:
                    failed += 1
                    logger.exception(
                        "Failed to reap expired record",
                        extra={"partition_key": partition_key, "sort_key": sort_key},
                    )
            # let foreground operations take the writer lock between batches
            time.sleep(0)

        logger.info(
            "TTL sweep complete",
            extra={"expired": len(expired), "removed": removed, "failed": failed},
        )
        return removed

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval_seconds):
            try:
                self.sweep(interruptible=True)
            except Exception:
                logger.exception("TTL sweep failed")
