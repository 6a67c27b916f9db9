from typing import Dict, Optional

from aws_lambda_powertools import Logger, Metrics, Tracer
from aws_lambda_powertools.metrics import MetricUnit

from config import settings

# Initialize core utilities with service name from environment variable
logger = Logger(service=settings.service_name, level=settings.log_level)
tracer = Tracer(service=settings.service_name)
metrics = Metrics(namespace=settings.metrics_namespace, service=settings.service_name)

for notice in settings.notices:
    logger.warning(notice)


def record_outcome(
    resource: str, succeeded: bool, dimensions: Optional[Dict[str, str]] = None
) -> None:
    """
    Add a single count metric for a custom resource outcome

    Args:
        resource: Resource kind that was dispatched
        succeeded: Whether a SUCCESS response was produced
        dimensions: Additional dimensions to add
    """
    metrics.add_dimension(name="Resource", value=resource or "Unknown")
    if dimensions:
        for dim_name, dim_value in dimensions.items():
            metrics.add_dimension(name=dim_name, value=dim_value)

    metrics.add_metric(
        name="ResourceSucceeded" if succeeded else "ResourceFailed",
        unit=MetricUnit.Count,
        value=1,
    )
