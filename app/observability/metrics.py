"""
Metrics Collection with Prometheus.

Exposes business and system metrics for monitoring.
"""

from enum import Enum

from prometheus_client import Counter, Gauge, Histogram, Info

from app.config import settings


class MetricLabels(str, Enum):
    """Standard metric label names."""

    ENDPOINT = "endpoint"
    METHOD = "method"
    STATUS_CODE = "status_code"
    OPERATION = "operation"
    SIGNAL = "signal"
    ERROR_TYPE = "error_type"


class PromptOSMetrics:
    """
    Centralized metrics for the PromptOS API.

    Covers:
    - HTTP requests (rate, duration, in progress)
    - Daily credit ledger (deductions, rewards, resets, exhaustion)
    - Usage signals (submissions by kind, rejected duplicates)
    - Errors by type
    """

    def __init__(self) -> None:
        """Initialize all Prometheus metrics."""

        # ====================================================================
        # Service Info
        # ====================================================================
        self.service_info = Info(
            "promptos_service",
            "Service information",
        )
        self.service_info.info(
            {
                "version": settings.api_version,
                "service_name": settings.service_name,
            }
        )

        # ====================================================================
        # HTTP Metrics
        # ====================================================================
        self.http_requests_total = Counter(
            "promptos_http_requests_total",
            "Total HTTP requests",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD, MetricLabels.STATUS_CODE],
        )

        self.http_request_duration_seconds = Histogram(
            "promptos_http_request_duration_seconds",
            "HTTP request duration in seconds",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
            buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
        )

        self.http_requests_in_progress = Gauge(
            "promptos_http_requests_in_progress",
            "Number of HTTP requests currently being processed",
            [MetricLabels.ENDPOINT, MetricLabels.METHOD],
        )

        # ====================================================================
        # Credit Ledger Metrics
        # ====================================================================
        self.credit_deductions_total = Counter(
            "promptos_credit_deductions_total",
            "Total AI credit deductions attempted",
            ["success"],
        )

        self.credit_rewards_total = Counter(
            "promptos_credit_rewards_total",
            "Total AI credit rewards attempted",
            ["success"],
        )

        self.credit_reward_amount = Histogram(
            "promptos_credit_reward_amount",
            "Credits granted per successful reward",
            buckets=(1, 2, 3, 5, 8, 10),
        )

        self.daily_credit_resets_total = Counter(
            "promptos_daily_credit_resets_total",
            "Total daily credit resets performed",
        )

        # ====================================================================
        # Usage Signal Metrics
        # ====================================================================
        self.usage_signals_total = Counter(
            "promptos_usage_signals_total",
            "Total usage signals recorded",
            [MetricLabels.SIGNAL],
        )

        self.usage_signal_duplicates_total = Counter(
            "promptos_usage_signal_duplicates_total",
            "Usage signals rejected as same-day duplicates",
            ["detected_by"],
        )

        # ====================================================================
        # Error Metrics
        # ====================================================================
        self.errors_total = Counter(
            "promptos_errors_total",
            "Total errors by type",
            [MetricLabels.ERROR_TYPE, MetricLabels.OPERATION],
        )

    # ========================================================================
    # Helper Methods
    # ========================================================================

    def record_http_request(
        self, endpoint: str, method: str, status_code: int, duration: float
    ) -> None:
        """Record HTTP request metrics."""
        self.http_requests_total.labels(
            endpoint=endpoint, method=method, status_code=status_code
        ).inc()
        self.http_request_duration_seconds.labels(endpoint=endpoint, method=method).observe(
            duration
        )

    def record_deduction(self, success: bool) -> None:
        """Record a credit deduction attempt."""
        self.credit_deductions_total.labels(success=str(success)).inc()

    def record_reward(self, success: bool, amount: int) -> None:
        """Record a credit reward attempt."""
        self.credit_rewards_total.labels(success=str(success)).inc()
        if success:
            self.credit_reward_amount.observe(amount)

    def record_daily_reset(self) -> None:
        """Record a daily credit reset."""
        self.daily_credit_resets_total.inc()

    def record_usage_signal(self, signal: str) -> None:
        """Record a stored usage signal."""
        self.usage_signals_total.labels(signal=signal).inc()

    def record_duplicate_signal(self, detected_by: str) -> None:
        """Record a rejected duplicate (detected_by: 'check' or 'constraint')."""
        self.usage_signal_duplicates_total.labels(detected_by=detected_by).inc()

    def record_error(self, error_type: str, operation: str) -> None:
        """Record error occurrence."""
        self.errors_total.labels(error_type=error_type, operation=operation).inc()


# Global metrics instance
metrics = PromptOSMetrics()
