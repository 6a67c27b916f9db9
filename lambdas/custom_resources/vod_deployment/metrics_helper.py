import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import urllib3

from config import settings
from lambda_error_handler import TelemetryError
from lambda_utils import logger, tracer
from models import MetricProperties, Phase


def generate_uuid() -> Dict[str, str]:
    """Deployment UUID shared by every later SendMetric call of the stack."""
    return {"UUID": str(uuid.uuid4())}


def build_metric(
    props: MetricProperties, phase: str, now: Optional[datetime] = None
) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    event_key = "Deleted" if phase == Phase.DELETE.value else "Launched"
    return {
        "Solution": props.solution_id,
        "UUID": props.uuid,
        "TimeStamp": now.strftime("%Y-%m-%d %H:%M:%S.") + str(now.microsecond // 100000),
        "Data": {
            "Version": props.version,
            event_key: now.strftime("%Y-%m-%dT%H:%M:%SZ"),
        },
    }


class MetricsHelper:
    """Posts anonymous usage records to the solutions metrics endpoint."""

    def __init__(
        self,
        url: str = settings.anonymous_metrics_url,
        timeout: float = settings.metrics_timeout_seconds,
        http: Optional[urllib3.PoolManager] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.http = http or urllib3.PoolManager()

    @tracer.capture_method
    def send_anonymous_metric(self, metric: Dict[str, Any]) -> int:
        body = json.dumps(metric)
        try:
            response = self.http.request(
                "POST",
                self.url,
                body=body,
                headers={
                    "Content-Type": "application/json",
                    "Content-Length": str(len(body)),
                },
                timeout=self.timeout,
                retries=False,
            )
        except urllib3.exceptions.HTTPError as e:
            raise TelemetryError(f"Anonymous metric not delivered: {str(e)}") from e

        if not 200 <= response.status < 300:
            raise TelemetryError(
                f"Anonymous metric rejected with status {response.status}",
                status_code=response.status,
            )

        logger.info("Anonymous metric sent", extra={"metric": metric})
        return response.status
