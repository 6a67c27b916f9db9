import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import pytest

LAMBDA_DIR = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))),
    "lambdas",
    "custom_resources",
    "vod_deployment",
)
sys.path.insert(0, LAMBDA_DIR)

# Set required environment variables BEFORE imports
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("AWS_REGION", "us-east-1")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("POWERTOOLS_TRACE_DISABLED", "true")
os.environ.setdefault("POWERTOOLS_METRICS_NAMESPACE", "VideoOnDemandTests")
os.environ.setdefault("SERVICE_NAME", "vod_custom_resources_tests")
os.environ.setdefault("LOG_LEVEL", "DEBUG")

from models import CustomResourceRequest  # noqa: E402


@dataclass
class FakeLambdaContext:
    function_name: str = "vod-custom-resources"
    memory_limit_in_mb: int = 128
    invoked_function_arn: str = (
        "arn:aws:lambda:us-east-1:123456789012:function:vod-custom-resources"
    )
    aws_request_id: str = "52fdfc07-2182-454f-963f-5f0f9a621d72"
    log_stream_name: str = "2026/10/19/[$LATEST]abcdef"
    log_group_name: str = "/aws/lambda/vod-custom-resources"

    def get_remaining_time_in_millis(self) -> int:
        return 300000


class RecordingSend:
    """Stands in for cfnresponse.send and records every call."""

    def __init__(self):
        self.calls: List[Dict[str, Any]] = []

    def __call__(self, event, context, status, data, physical_id=None):
        self.calls.append(
            {
                "event": event,
                "status": status,
                "data": data,
                "physical_id": physical_id,
            }
        )

    @property
    def statuses(self) -> List[str]:
        return [call["status"] for call in self.calls]


def make_event(
    request_type: str,
    resource: Optional[str],
    physical_resource_id: Optional[str] = None,
    **properties: Any,
) -> Dict[str, Any]:
    resource_properties = {
        "ServiceToken": "arn:aws:lambda:us-east-1:123456789012:function:vod-custom-resources",
        **properties,
    }
    if resource is not None:
        resource_properties["Resource"] = resource

    event = {
        "RequestType": request_type,
        "ServiceToken": resource_properties["ServiceToken"],
        "ResponseURL": "https://cloudformation-custom-resource-response-useast1.s3.amazonaws.com/test",
        "StackId": "arn:aws:cloudformation:us-east-1:123456789012:stack/vod/guid",
        "RequestId": "unique-request-id",
        "LogicalResourceId": f"{resource or 'Unknown'}Resource",
        "ResourceType": "Custom::VodResource",
        "ResourceProperties": resource_properties,
    }
    if physical_resource_id is not None:
        event["PhysicalResourceId"] = physical_resource_id
    return event


@pytest.fixture
def lambda_context() -> FakeLambdaContext:
    return FakeLambdaContext()


@pytest.fixture
def recording_send() -> RecordingSend:
    return RecordingSend()


@pytest.fixture
def request_factory():
    def _factory(request_type, resource, physical_resource_id=None, **properties):
        return CustomResourceRequest.from_event(
            make_event(request_type, resource, physical_resource_id, **properties)
        )

    return _factory
