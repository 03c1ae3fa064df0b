"""Infrastructure observability module - CloudWatch custom metrics.

Exports:
    MetricsRecorder: Publishes agent metrics; failures are logged, never raised
"""

from infrastructure.observability.metrics import DEFAULT_NAMESPACE, MetricsRecorder

__all__ = ["DEFAULT_NAMESPACE", "MetricsRecorder"]
