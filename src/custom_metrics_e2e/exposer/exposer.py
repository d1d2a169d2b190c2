"""Push loop that keeps one constant custom metric alive for a pod."""

import time
from collections.abc import Callable

from ..gcp.metadata import PodIdentity
from ..gcp.monitoring import MonitoringManager
from ..gcp.monitoring import build_gke_container_series
from ..shared.exceptions import MonitoringError
from ..shared.logging import get_logger

logger = get_logger(__name__)

DEFAULT_INTERVAL_SECONDS = 5.0


class MetricsExposer:
    """Writes ``metric_value`` for ``pod_id`` every ``interval`` seconds.

    A failed write is logged and the next one happens on schedule; there is
    no retry or backoff.
    """

    def __init__(
        self,
        monitoring: MonitoringManager,
        identity: PodIdentity,
        pod_id: str,
        metric_name: str,
        metric_value: int,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.time,
    ):
        self.monitoring = monitoring
        self.identity = identity
        self.pod_id = pod_id
        self.metric_name = metric_name
        self.metric_value = metric_value
        self.interval = interval
        self._sleep = sleep
        self._clock = clock

    def push_once(self) -> bool:
        """Write a single point. Returns whether the write succeeded."""
        series = build_gke_container_series(
            self.identity, self.pod_id, self.metric_name, self.metric_value, now=self._clock()
        )
        try:
            self.monitoring.write_point(series)
        except MonitoringError as e:
            logger.error(f"Failed to write time series data: {e}")
            return False
        logger.info(f"Finished writing time series with value: {self.metric_value}")
        return True

    def run(self, max_iterations: int | None = None) -> int:
        """Push points until interrupted, or ``max_iterations`` times.

        Returns:
            Number of successful writes
        """
        successes = 0
        iteration = 0
        while max_iterations is None or iteration < max_iterations:
            if self.push_once():
                successes += 1
            iteration += 1
            self._sleep(self.interval)
        return successes
