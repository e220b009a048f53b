"""Metrics service for tracking worker performance.

Singleton service to track training runs and recommendation latency.
"""

import threading
from typing import Dict


class MetricsService:
    """Singleton service for tracking worker metrics.

    Thread-safe counters for training runs and latency tracking for
    recommendation calls.
    """

    _instance = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create singleton instance."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super(MetricsService, cls).__new__(cls)
                    cls._instance._initialized = False
        return cls._instance

    def __init__(self):
        """Initialize metrics counters."""
        if self._initialized:
            return

        self._lock = threading.Lock()
        self._reset_counters()
        self._initialized = True

    def _reset_counters(self) -> None:
        self._trainings_completed = 0
        self._trainings_failed = 0
        self._last_training_ms = 0.0
        self._recommendation_count = 0
        self._total_latency_ms = 0.0
        self._min_latency_ms = float('inf')
        self._max_latency_ms = 0.0

    def record_training(self, duration_ms: float, success: bool = True) -> None:
        """Record the outcome of a training invocation.

        Args:
            duration_ms: Time spent in the invocation, in milliseconds
            success: False if the invocation aborted before publishing
        """
        with self._lock:
            if success:
                self._trainings_completed += 1
                self._last_training_ms = duration_ms
            else:
                self._trainings_failed += 1

    def record_recommendation(self, latency_ms: float) -> None:
        """Record a recommendation call with its latency.

        Args:
            latency_ms: Latency in milliseconds
        """
        with self._lock:
            self._recommendation_count += 1
            self._total_latency_ms += latency_ms

            if latency_ms < self._min_latency_ms:
                self._min_latency_ms = latency_ms

            if latency_ms > self._max_latency_ms:
                self._max_latency_ms = latency_ms

    def get_metrics(self) -> Dict:
        """Get current metrics.

        Returns:
            Dictionary with metrics including:
            - trainings_completed: Training invocations that published a context
            - trainings_failed: Training invocations that aborted
            - last_training_ms: Duration of the last successful training
            - recommendation_count: Total number of recommendation calls
            - average_latency_ms: Average recommendation latency
            - min_latency_ms: Minimum latency observed
            - max_latency_ms: Maximum latency observed
        """
        with self._lock:
            avg_latency = (
                self._total_latency_ms / self._recommendation_count
                if self._recommendation_count > 0
                else 0.0
            )

            return {
                "trainings_completed": self._trainings_completed,
                "trainings_failed": self._trainings_failed,
                "last_training_ms": round(self._last_training_ms, 2),
                "recommendation_count": self._recommendation_count,
                "average_latency_ms": round(avg_latency, 2),
                "min_latency_ms": round(self._min_latency_ms, 2) if self._min_latency_ms != float('inf') else 0.0,
                "max_latency_ms": round(self._max_latency_ms, 2),
            }

    def reset(self) -> None:
        """Reset all metrics (useful for testing)."""
        with self._lock:
            self._reset_counters()


# Global singleton instance
metrics_service = MetricsService()
