from collections import deque
from datetime import datetime, timedelta
from typing import Callable, Optional

from logger_config import setup_logger

logger = setup_logger()


class Monitor:
    """Counts upload outcomes and alerts when storage failures cluster.

    Validation rejections are the client's fault and are never recorded here.
    """

    def __init__(self, failure_threshold: int, window_seconds: int = 60,
                 alert_handler: Optional[Callable[[str], None]] = None):
        if failure_threshold <= 0 or window_seconds <= 0:
            raise ValueError("Failure threshold and window must be positive")

        self.failure_threshold = failure_threshold
        self.window = timedelta(seconds=window_seconds)
        self.alert_handler = alert_handler or logger.critical
        self.passes = 0
        self.failures = 0
        self._recent = deque()

    def _prune(self, now: datetime) -> int:
        while self._recent and now - self._recent[0] > self.window:
            self._recent.popleft()
        return len(self._recent)

    def pass_(self) -> None:
        self.passes += 1

    def fail(self) -> None:
        now = datetime.now()
        self.failures += 1
        self._recent.append(now)

        # Alert once as the threshold is crossed, not on every later failure
        if self._prune(now) == self.failure_threshold:
            self.alert_handler(
                f"{self.failure_threshold} storage failures within {int(self.window.total_seconds())}s, "
                f"check the uploads volume (passes: {self.passes}, failures: {self.failures})"
            )

    @property
    def stats(self) -> dict:
        return {
            'total_passes': self.passes,
            'total_failures': self.failures,
            'recent_failures': self._prune(datetime.now()),
        }
