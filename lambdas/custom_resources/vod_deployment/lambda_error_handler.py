"""
Custom Resource Error Handler

Exception classes shared by the provisioning modules and the dispatcher:
1. A base error carrying a message and structured details
2. Property validation errors for malformed ResourceProperties
3. Provisioning errors wrapping botocore ClientError
4. Telemetry errors for the anonymous metrics endpoint

Usage:
    from lambda_error_handler import ProvisioningError, wrap_client_error

    with wrap_client_error("elastictranscoder", "CreatePipeline"):
        client.create_pipeline(...)
"""

import contextlib
from typing import Any, Dict, Iterator, Optional

from botocore.exceptions import BotoCoreError, ClientError

from lambda_utils import logger

# ─────────────────────────────────────────────────────────────────────────────
# Custom Exception Classes
# ─────────────────────────────────────────────────────────────────────────────


class CustomResourceError(Exception):
    """Base class for all custom resource errors"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ResourcePropertiesError(CustomResourceError):
    """Error for ResourceProperties that fail validation"""

    def __init__(self, message: str, resource: str, errors: Any = None):
        details = {"resource": resource, "errors": errors}
        super().__init__(message, details)
        self.resource = resource
        self.errors = errors


class ProvisioningError(CustomResourceError):
    """Error for a failed AWS provisioning or teardown call"""

    def __init__(
        self,
        message: str,
        service: str,
        operation: str,
        code: str = "",
        physical_resource_id: Optional[str] = None,
    ):
        details = {"service": service, "operation": operation, "code": code}
        super().__init__(message, details)
        self.service = service
        self.operation = operation
        self.code = code
        # Ids of resources created before the failure, if any
        self.physical_resource_id = physical_resource_id


class TelemetryError(CustomResourceError):
    """Error for a failed anonymous metric delivery"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code


class ResponseAlreadySentError(CustomResourceError):
    """Raised when a second terminal response is attempted in one invocation"""


# ─────────────────────────────────────────────────────────────────────────────
# Helpers
# ─────────────────────────────────────────────────────────────────────────────


def error_code(error: ClientError) -> str:
    return error.response.get("Error", {}).get("Code", "")


@contextlib.contextmanager
def wrap_client_error(service: str, operation: str) -> Iterator[None]:
    """
    Translate botocore failures raised inside the block into ProvisioningError.

    Args:
        service: AWS service name used in the log and the error message
        operation: API operation name

    Raises:
        ProvisioningError: If the wrapped call raised ClientError or BotoCoreError
    """
    try:
        yield
    except ClientError as e:
        code = error_code(e)
        message = e.response.get("Error", {}).get("Message") or str(e)
        logger.error(
            f"{service} {operation} failed",
            extra={"service": service, "operation": operation, "code": code},
        )
        raise ProvisioningError(
            f"{service} {operation} failed: {message}",
            service=service,
            operation=operation,
            code=code,
        ) from e
    except BotoCoreError as e:
        logger.error(
            f"{service} {operation} failed",
            extra={"service": service, "operation": operation},
        )
        raise ProvisioningError(
            f"{service} {operation} failed: {str(e)}",
            service=service,
            operation=operation,
        ) from e
