"""Metrics utilities for the notification handlers.

Provides utilities for collecting and publishing CloudWatch metrics
using AWS Lambda Powertools.
"""

from datetime import datetime
from typing import Optional

from aibs_informatics_core.utils.os_operations import get_env_var
from aws_lambda_powertools.metrics import Metrics, MetricUnit

from site_notifications.common.base import HandlerMixins

METRICS_NAMESPACE_ENV_VAR = "POWERTOOLS_METRICS_NAMESPACE"
DEFAULT_METRICS_NAMESPACE = "SiteNotifications"


def add_duration_metric(
    metrics: Metrics,
    start: datetime,
    end: Optional[datetime] = None,
    name: str = "",
):
    """Add a duration metric to the metrics collector.

    Calculates the duration between start and end times and records
    it as a CloudWatch metric in milliseconds.

    Args:
        metrics (Metrics): The metrics collector to use.
        start (datetime): The start timestamp.
        end (Optional[datetime]): The end timestamp. Defaults to current time.
        name (str): Prefix for the metric name. Final name is '{name}Duration'.
    """
    end = end or datetime.now(start.tzinfo)
    duration = end - start
    metrics.add_metric(
        name=f"{name}Duration", unit=MetricUnit.Milliseconds, value=duration.total_seconds() * 1000
    )


def add_success_metric(metrics: Metrics, name: str = ""):
    """Record a successful operation metric (success=1, failure=0)."""
    metrics.add_metric(name=f"{name}Success", unit=MetricUnit.Count, value=1)
    metrics.add_metric(name=f"{name}Failure", unit=MetricUnit.Count, value=0)


def add_failure_metric(metrics: Metrics, name: str = ""):
    """Record a failed operation metric (success=0, failure=1)."""
    metrics.add_metric(name=f"{name}Success", unit=MetricUnit.Count, value=0)
    metrics.add_metric(name=f"{name}Failure", unit=MetricUnit.Count, value=1)


class EnhancedMetrics(Metrics):
    """Metrics with convenience methods for counts, durations and outcomes."""

    def add_count_metric(self, name: str, value: float):
        self.add_metric(name=name, unit=MetricUnit.Count, value=value)

    def add_duration_metric(
        self, start: datetime, end: Optional[datetime] = None, name: str = ""
    ):
        add_duration_metric(start=start, end=end, name=name, metrics=self)

    def add_success_metric(self, name: str = ""):
        add_success_metric(name=name, metrics=self)

    def add_failure_metric(self, name: str = ""):
        add_failure_metric(name=name, metrics=self)


class MetricsMixins(HandlerMixins):
    """Mixin class providing CloudWatch metrics capabilities.

    Integrates AWS Lambda Powertools Metrics. Metrics are emitted in the
    embedded metric format when the wrapping handler flushes them.
    """

    @property
    def metrics(self) -> EnhancedMetrics:
        """Get the metrics collector, creating one if needed."""
        try:
            return self._metrics
        except AttributeError:
            self.metrics = self.get_metrics(service=self.service_name())
        return self.metrics

    @metrics.setter
    def metrics(self, value: EnhancedMetrics):
        self._metrics = value

    @classmethod
    def get_metrics(
        cls,
        service: Optional[str] = None,
        namespace: Optional[str] = None,
        **additional_dimensions: str,
    ) -> EnhancedMetrics:
        """Create a new EnhancedMetrics instance.

        Args:
            service (Optional[str]): The service name for metrics.
            namespace (Optional[str]): The CloudWatch namespace. Defaults to the
                `POWERTOOLS_METRICS_NAMESPACE` environment variable, then to
                `SiteNotifications`.
            **additional_dimensions (str): Additional metric dimensions as key-value pairs.

        Returns:
            A configured EnhancedMetrics instance.
        """
        namespace = namespace or get_env_var(
            METRICS_NAMESPACE_ENV_VAR, default_value=DEFAULT_METRICS_NAMESPACE
        )
        metrics = EnhancedMetrics(service=service, namespace=namespace)
        for dimension_name, dimension_value in additional_dimensions.items():
            metrics.add_dimension(name=dimension_name, value=dimension_value)
        return metrics
