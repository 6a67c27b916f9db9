"""
Custom resource dispatcher.

Routes one CloudFormation lifecycle event to at most one provisioning call and
produces exactly one terminal response:

- a recognised (phase, kind) pair runs its capability; a result becomes
  SUCCESS, any exception becomes FAILED
- an unrecognised kind, an Update, or a kind without teardown on Delete is
  answered with SUCCESS without calling anything
- SendMetric is best effort: a failed delivery is logged and still answered
  with SUCCESS so anonymous metrics never block a stack operation
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ets import PRESET_ID_SEPARATOR
from lambda_error_handler import ProvisioningError
from lambda_utils import logger, record_outcome, tracer
from metrics_helper import build_metric
from models import (
    CloudFrontIdentityProperties,
    CustomResourceRequest,
    MetricProperties,
    Phase,
    PipelineProperties,
    ProvisioningResult,
    ResourceKind,
    S3NotificationProperties,
    StepFunctionProperties,
    WatermarkProperties,
)
from responder import CfnResponder

Action = Callable[[CustomResourceRequest], ProvisioningResult]


def partial_physical_id(error: Exception) -> Optional[str]:
    """Ids a failed action created before raising, or None."""
    if isinstance(error, ProvisioningError):
        return error.physical_resource_id
    return None


@dataclass(frozen=True)
class Route:
    action: Action
    best_effort: bool = False


@dataclass
class Capabilities:
    """The external collaborators, one per provisioning concern."""

    step_functions: Any
    s3: Any
    cloudfront: Any
    transcoder: Any
    metrics: Any
    uuid_factory: Callable[[], Dict[str, str]]


class Dispatcher:
    def __init__(self, capabilities: Capabilities):
        self.capabilities = capabilities
        self.routes: Dict[Tuple[Phase, ResourceKind], Route] = {
            (Phase.CREATE, ResourceKind.STEP_FUNCTION): Route(self._create_steps),
            (Phase.CREATE, ResourceKind.S3): Route(self._configure_notification),
            (Phase.CREATE, ResourceKind.WATERMARK): Route(self._put_watermark),
            (Phase.CREATE, ResourceKind.CLOUDFRONT_IDENTITY): Route(self._create_identity),
            (Phase.CREATE, ResourceKind.PIPELINE): Route(self._create_pipeline),
            (Phase.CREATE, ResourceKind.PRESETS): Route(self._create_presets),
            (Phase.CREATE, ResourceKind.SEND_METRIC): Route(
                self._send_metric, best_effort=True
            ),
            (Phase.CREATE, ResourceKind.UUID): Route(self._generate_uuid),
            (Phase.DELETE, ResourceKind.STEP_FUNCTION): Route(self._delete_steps),
            (Phase.DELETE, ResourceKind.PIPELINE): Route(self._delete_pipeline),
            (Phase.DELETE, ResourceKind.PRESETS): Route(self._delete_presets),
            (Phase.DELETE, ResourceKind.SEND_METRIC): Route(
                self._send_metric, best_effort=True
            ),
        }

    def route_for(self, request: CustomResourceRequest) -> Optional[Route]:
        kind = request.kind
        if kind is None:
            return None
        try:
            phase = Phase(request.phase)
        except ValueError:
            return None
        return self.routes.get((phase, kind))

    @tracer.capture_method
    def dispatch(self, request: CustomResourceRequest, responder: CfnResponder) -> str:
        """Run the matching action and send its single terminal response."""
        route = self.route_for(request)
        if route is None:
            logger.info(
                "No case match, sending success response",
                extra={"request_type": request.phase, "resource": request.resource},
            )
            responder.success(request)
            return responder.status

        logger.info(f"Processing {request.phase} for {request.resource}")
        try:
            result = route.action(request)
        except Exception as e:
            if not route.best_effort:
                logger.exception(f"{request.phase} {request.resource} failed: {str(e)}")
                record_outcome(request.resource, succeeded=False)
                responder.failed(request, str(e), partial_physical_id(e))
                return responder.status

            logger.warning(
                f"{request.resource} failed, continuing: {str(e)}",
                extra={"error_type": e.__class__.__name__},
            )
            result = ProvisioningResult()

        record_outcome(request.resource, succeeded=True)
        responder.success(request, result.data, result.physical_resource_id)
        return responder.status

    # ------------------------------------------------------------------ Create
    def _create_steps(self, request: CustomResourceRequest) -> ProvisioningResult:
        props = StepFunctionProperties.from_properties(request.resource, request.properties)
        data = self.capabilities.step_functions.create_steps(props)
        return ProvisioningResult(data, data.get("StepsArn"))

    def _configure_notification(self, request: CustomResourceRequest) -> ProvisioningResult:
        props = S3NotificationProperties.from_properties(request.resource, request.properties)
        self.capabilities.s3.configure_notification(props)
        return ProvisioningResult()

    def _put_watermark(self, request: CustomResourceRequest) -> ProvisioningResult:
        props = WatermarkProperties.from_properties(request.resource, request.properties)
        self.capabilities.s3.put_watermark(props)
        return ProvisioningResult()

    def _create_identity(self, request: CustomResourceRequest) -> ProvisioningResult:
        props = CloudFrontIdentityProperties.from_properties(
            request.resource, request.properties
        )
        return ProvisioningResult(self.capabilities.cloudfront.create_identity(props))

    def _create_pipeline(self, request: CustomResourceRequest) -> ProvisioningResult:
        props = PipelineProperties.from_properties(request.resource, request.properties)
        data = self.capabilities.transcoder.create_pipeline(props)
        return ProvisioningResult(data, data.get("PipelineId"))

    def _create_presets(self, request: CustomResourceRequest) -> ProvisioningResult:
        data = self.capabilities.transcoder.create_presets()
        return ProvisioningResult(data, PRESET_ID_SEPARATOR.join(data.values()) or None)

    def _generate_uuid(self, request: CustomResourceRequest) -> ProvisioningResult:
        return ProvisioningResult(self.capabilities.uuid_factory())

    # ------------------------------------------------------------------ Delete
    def _delete_steps(self, request: CustomResourceRequest) -> ProvisioningResult:
        self.capabilities.step_functions.delete_steps(request.physical_resource_id)
        return ProvisioningResult()

    def _delete_pipeline(self, request: CustomResourceRequest) -> ProvisioningResult:
        self.capabilities.transcoder.delete_pipeline(request.physical_resource_id)
        return ProvisioningResult()

    def _delete_presets(self, request: CustomResourceRequest) -> ProvisioningResult:
        deleted = self.capabilities.transcoder.delete_presets(request.physical_resource_id)
        logger.info(f"Deleted {len(deleted)} presets", extra={"preset_ids": deleted})
        return ProvisioningResult()

    # ------------------------------------------------------------------ Both
    def _send_metric(self, request: CustomResourceRequest) -> ProvisioningResult:
        props = MetricProperties.from_properties(request.resource, request.properties)
        metric = build_metric(props, request.phase)
        self.capabilities.metrics.send_anonymous_metric(metric)
        return ProvisioningResult()
