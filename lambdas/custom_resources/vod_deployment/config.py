import math
import os
from typing import Any, List, Mapping, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}

DEFAULT_METRICS_URL = "https://metrics.awssolutionsbuilder.com/generic"
DEFAULT_METRICS_TIMEOUT = 5.0


class HandlerSettings(BaseModel):
    """Runtime settings for the deployment custom resource function."""

    service_name: str = "vod_custom_resources"
    log_level: str = "INFO"
    metrics_namespace: str = "VideoOnDemand"
    anonymous_metrics_url: str = DEFAULT_METRICS_URL
    metrics_timeout_seconds: float = DEFAULT_METRICS_TIMEOUT
    aws_region: str = "us-east-1"
    # Values replaced by their defaults, logged once the logger exists
    notices: List[str] = Field(default_factory=list)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = (v or "").upper()
        if level not in VALID_LOG_LEVELS:
            return "WARNING"
        return level

    @model_validator(mode="before")
    @classmethod
    def validate_timeout(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "metrics_timeout_seconds" not in data:
            return data
        raw = data["metrics_timeout_seconds"]
        try:
            timeout = float(raw)
        except (TypeError, ValueError):
            timeout = math.nan
        if not math.isfinite(timeout) or timeout <= 0:
            data = dict(data)
            data["metrics_timeout_seconds"] = DEFAULT_METRICS_TIMEOUT
            data["notices"] = list(data.get("notices") or []) + [
                f"Invalid METRICS_TIMEOUT_SECONDS {raw!r}, using {DEFAULT_METRICS_TIMEOUT}"
            ]
        return data

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HandlerSettings":
        """Build settings from environment variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        values = {
            "service_name": env.get("SERVICE_NAME"),
            "log_level": env.get("LOG_LEVEL"),
            "metrics_namespace": env.get("METRICS_NAMESPACE"),
            "anonymous_metrics_url": env.get("ANONYMOUS_METRICS_URL"),
            "metrics_timeout_seconds": env.get("METRICS_TIMEOUT_SECONDS"),
            "aws_region": env.get("AWS_REGION"),
        }
        return cls(**{k: v for k, v in values.items() if v})


settings = HandlerSettings.from_env()
