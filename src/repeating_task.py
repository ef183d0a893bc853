"""
Live Flea Prices - Repeating Task

A cancellable fixed-interval timer running on a daemon thread. The first
run happens one interval after start(). cancel() is idempotent, safe to call
from inside the callback, and wakes the thread immediately instead of
leaving it asleep for the rest of the interval.
"""

import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class RepeatingTask:
    def __init__(self, interval: float, callback: Callable[[], object],
                 name: str = "RepeatingTask"):
        self.interval = interval
        self.callback = callback
        self.name = name
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self):
        if self._thread is not None:
            raise RuntimeError(f"{self.name} already started")
        self._thread = threading.Thread(target=self._loop, daemon=True, name=self.name)
        self._thread.start()

    def cancel(self):
        if not self._cancelled.is_set():
            logger.debug(f"{self.name}: cancelled")
        self._cancelled.set()

    def join(self, timeout: Optional[float] = None):
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def _loop(self):
        # wait() returns True once cancelled
        while not self._cancelled.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error(f"{self.name} run failed: {e}", exc_info=True)
