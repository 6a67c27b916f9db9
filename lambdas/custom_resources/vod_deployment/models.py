import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar, Union

from aws_lambda_powertools.utilities.data_classes import (
    CloudFormationCustomResourceEvent,
)
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from lambda_error_handler import ResourcePropertiesError

M = TypeVar("M", bound="ResourcePropertiesModel")

DEFAULT_SOURCE_SUFFIXES = [".mpg", ".mp4", ".m4v", ".mov", ".m2ts"]
DEFAULT_WATERMARK_KEY = "watermarks/aws-logo.png"


class Phase(str, Enum):
    CREATE = "Create"
    UPDATE = "Update"
    DELETE = "Delete"


class ResourceKind(str, Enum):
    STEP_FUNCTION = "StepFunction"
    S3 = "S3"
    WATERMARK = "Watermark"
    CLOUDFRONT_IDENTITY = "CloudFrontIdentity"
    PIPELINE = "Pipeline"
    PRESETS = "Presets"
    SEND_METRIC = "SendMetric"
    UUID = "UUID"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["ResourceKind"]:
        """Return the matching kind, or None for kinds this function does not handle."""
        try:
            return cls(value)
        except ValueError:
            return None


# ──────────────────────────────────────────────────────────────────────────────
# Per-kind ResourceProperties
# ──────────────────────────────────────────────────────────────────────────────
class ResourcePropertiesModel(BaseModel):
    """Base for the ResourceProperties of one resource kind.

    CloudFormation passes every property through, including ServiceToken and
    Resource, so unknown keys are ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    @classmethod
    def from_properties(cls: Type[M], resource: str, properties: Mapping[str, Any]) -> M:
        try:
            return cls.model_validate(dict(properties))
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ResourcePropertiesError(
                f"Invalid ResourceProperties for {resource}: {problems}",
                resource=resource,
                errors=e.errors(include_url=False),
            ) from e


class StepFunctionProperties(ResourcePropertiesModel):
    stack_name: str = Field(alias="StackName", min_length=1)
    role_arn: str = Field(alias="RoleArn", min_length=1)
    definitions: Dict[str, Union[str, Dict[str, Any]]] = Field(alias="Definitions")

    @field_validator("definitions")
    @classmethod
    def validate_definitions(cls, v):
        if not v:
            raise ValueError("at least one workflow definition is required")
        parsed = {}
        for name, definition in v.items():
            if isinstance(definition, str):
                try:
                    definition = json.loads(definition)
                except ValueError as e:
                    raise ValueError(f"definition for {name} is not valid JSON") from e
            if not isinstance(definition, dict):
                raise ValueError(f"definition for {name} must be a JSON object")
            if "StartAt" not in definition or "States" not in definition:
                raise ValueError(f"definition for {name} must have StartAt and States")
            parsed[name] = definition
        return parsed


class S3NotificationProperties(ResourcePropertiesModel):
    source: str = Field(alias="Source", min_length=1)
    ingest_arn: str = Field(alias="IngestArn", min_length=1)
    suffixes: List[str] = Field(
        alias="Suffixes", default_factory=lambda: list(DEFAULT_SOURCE_SUFFIXES)
    )


class WatermarkProperties(ResourcePropertiesModel):
    source: str = Field(alias="Source", min_length=1)
    key: str = Field(alias="Key", default=DEFAULT_WATERMARK_KEY, min_length=1)


class CloudFrontIdentityProperties(ResourcePropertiesModel):
    comment: str = Field(alias="Comment", default="access-identity-vod-destination")


class PipelineProperties(ResourcePropertiesModel):
    name: str = Field(alias="Name", min_length=1, max_length=40)
    source: str = Field(alias="Source", min_length=1)
    destination: str = Field(alias="Destination", min_length=1)
    role: str = Field(alias="Role", min_length=1)
    topic: Optional[str] = Field(alias="Topic", default=None)


class MetricProperties(ResourcePropertiesModel):
    solution_id: str = Field(alias="SolutionId", min_length=1)
    uuid: str = Field(alias="UUID", min_length=1)
    version: str = Field(alias="Version", min_length=1)


# ──────────────────────────────────────────────────────────────────────────────
# Request / result
# ──────────────────────────────────────────────────────────────────────────────
@dataclass(frozen=True)
class CustomResourceRequest:
    """One CloudFormation lifecycle event, read-only for the invocation."""

    phase: str
    resource: str
    properties: Mapping[str, Any]
    physical_resource_id: Optional[str]
    logical_resource_id: str
    raw_event: Dict[str, Any] = field(repr=False, compare=False)

    @property
    def kind(self) -> Optional[ResourceKind]:
        return ResourceKind.parse(self.resource)

    @classmethod
    def from_event(cls, event: Dict[str, Any]) -> "CustomResourceRequest":
        cfn_event = CloudFormationCustomResourceEvent(event)
        properties = cfn_event.resource_properties or {}
        return cls(
            phase=cfn_event.request_type,
            resource=properties.get("Resource", ""),
            properties=properties,
            physical_resource_id=event.get("PhysicalResourceId"),
            logical_resource_id=cfn_event.logical_resource_id,
            raw_event=event,
        )


@dataclass(frozen=True)
class ProvisioningResult:
    data: Dict[str, Any] = field(default_factory=dict)
    physical_resource_id: Optional[str] = None
