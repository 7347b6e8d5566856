"""Failure tracking for remote operations and the speech device."""

import logging
from typing import Dict

log = logging.getLogger("smartreader.monitoring")


class HealthMonitor:
    """Tracks consecutive failures per operation and raises a one-shot alert."""

    def __init__(self, alert_threshold: int = 3):
        self.alert_threshold = alert_threshold
        self._consecutive_failures: Dict[str, int] = {}
        self._alerted: Dict[str, bool] = {}

    def record_success(self, operation: str) -> None:
        prev = self._consecutive_failures.get(operation, 0)
        if prev > 0:
            log.info("%s: recovered after %d consecutive failure(s).", operation, prev)
        self._consecutive_failures[operation] = 0
        self._alerted[operation] = False

    def record_failure(self, operation: str, reason: str = "") -> bool:
        """Record a failure. Returns True if the alert threshold was just crossed."""
        count = self._consecutive_failures.get(operation, 0) + 1
        self._consecutive_failures[operation] = count
        log.warning("%s: failure #%d in a row. %s", operation, count, reason)

        if count >= self.alert_threshold and not self._alerted.get(operation, False):
            self._alerted[operation] = True
            log.error("ALERT: %s failed %d times in a row.", operation, count)
            return True
        return False

    def get_failures(self, operation: str) -> int:
        return self._consecutive_failures.get(operation, 0)

    def get_status(self) -> Dict[str, int]:
        return dict(self._consecutive_failures)
