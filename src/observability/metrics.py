"""
Prometheus metrics for the review pipeline and report job.

Defines and exposes metrics for:
- Submission outcomes (responded, rate_limited, invalid_input, ...)
- AI call latency per gateway mode
- Report generation outcomes
- Rate limiter client cardinality

Metrics are exposed via HTTP endpoint for Prometheus scraping.
"""

import logging

from prometheus_client import (
    REGISTRY,
    Counter,
    Gauge,
    Histogram,
    start_http_server,
)

from src.config.settings import get_settings

logger = logging.getLogger(__name__)

# AI calls are slow; buckets are in seconds
AI_LATENCY_BUCKETS = (0.25, 0.5, 1.0, 2.0, 4.0, 8.0, 15.0, 30.0, 60.0)


class MetricsCollector:
    """
    Prometheus metrics collector for review-pulse.

    Usage:
        metrics = get_metrics()
        metrics.record_submission("responded")
        metrics.record_ai_latency("structured", 0.84)
    """

    def __init__(self):
        self.submissions = Counter(
            "review_pulse_submissions_total",
            "Review submissions by terminal outcome",
            ["outcome"],
        )

        self.rate_limited = Counter(
            "review_pulse_rate_limited_total",
            "Admissions denied by the sliding-window rate limiter",
        )

        self.ai_latency = Histogram(
            "review_pulse_ai_latency_seconds",
            "Wall-clock latency of AI gateway calls",
            ["mode"],
            buckets=AI_LATENCY_BUCKETS,
        )

        self.ai_errors = Counter(
            "review_pulse_ai_errors_total",
            "AI gateway failures by mode and error type",
            ["mode", "error_type"],
        )

        self.reports = Counter(
            "review_pulse_reports_total",
            "Report generations by outcome",
            ["outcome"],
        )

        self.rate_limiter_clients = Gauge(
            "review_pulse_rate_limiter_clients",
            "Client ids currently tracked by the rate limiter",
        )

    def start_server(self, port: int | None = None) -> None:
        """
        Start Prometheus metrics HTTP server.

        Args:
            port: Port to expose metrics on (default from settings)
        """
        settings = get_settings()
        port = port or settings.metrics_port
        start_http_server(port, registry=REGISTRY)
        logger.info("Prometheus metrics server started on port %d", port)

    def record_submission(self, outcome: str) -> None:
        """Record the terminal outcome of one submission."""
        self.submissions.labels(outcome=outcome).inc()
        if outcome == "rate_limited":
            self.rate_limited.inc()

    def record_ai_latency(self, mode: str, latency: float) -> None:
        """
        Record AI call latency.

        Args:
            mode: Gateway mode (structured, freeform)
            latency: Latency in seconds
        """
        self.ai_latency.labels(mode=mode).observe(latency)

    def record_ai_error(self, mode: str, error_type: str) -> None:
        """Record a failed AI call."""
        self.ai_errors.labels(mode=mode, error_type=error_type).inc()

    def record_report(self, outcome: str) -> None:
        """Record a report generation (generated, no_data, error)."""
        self.reports.labels(outcome=outcome).inc()

    def set_rate_limiter_clients(self, count: int) -> None:
        """Set the number of client ids tracked by the rate limiter."""
        self.rate_limiter_clients.set(count)


# Global metrics instance
_metrics: MetricsCollector | None = None


def get_metrics() -> MetricsCollector:
    """Get global metrics collector instance."""
    global _metrics
    if _metrics is None:
        _metrics = MetricsCollector()
    return _metrics
