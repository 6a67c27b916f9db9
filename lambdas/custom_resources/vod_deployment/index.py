import json
from typing import Any, Dict

import cfnresponse
from aws_lambda_powertools.utilities.typing import LambdaContext

from cloudfront import CloudFrontIdentityProvisioner
from config import settings
from dispatcher import Capabilities, Dispatcher
from ets import TranscoderProvisioner
from lambda_utils import logger, metrics, record_outcome, tracer
from metrics_helper import MetricsHelper, generate_uuid
from models import CustomResourceRequest
from responder import CfnResponder
from s3_config import S3Configurator
from step_functions import StepFunctionsProvisioner

# Fields cfnresponse needs to address a response
RESPONSE_KEYS = ("ResponseURL", "StackId", "RequestId", "LogicalResourceId")


def build_dispatcher() -> Dispatcher:
    """Wire the dispatcher to boto3-backed capabilities; clients are created on first use."""
    region = settings.aws_region
    return Dispatcher(
        Capabilities(
            step_functions=StepFunctionsProvisioner(region_name=region),
            s3=S3Configurator(region_name=region),
            cloudfront=CloudFrontIdentityProvisioner(),
            transcoder=TranscoderProvisioner(region_name=region),
            metrics=MetricsHelper(),
            uuid_factory=generate_uuid,
        )
    )


# Initialize resources once per container
dispatcher = build_dispatcher()


@logger.inject_lambda_context
@tracer.capture_lambda_handler
@metrics.log_metrics(capture_cold_start_metric=True)
def lambda_handler(event: Dict[str, Any], context: LambdaContext) -> Dict[str, Any]:
    """Lambda handler to process CloudFormation Custom Resource events."""
    logger.info(f"Received event: {json.dumps(event, default=str)}")

    try:
        request = CustomResourceRequest.from_event(event)
    except (KeyError, TypeError, AttributeError) as e:
        logger.exception(f"Malformed custom resource event: {str(e)}")
        record_outcome("Unknown", succeeded=False)
        if isinstance(event, dict) and all(event.get(k) for k in RESPONSE_KEYS):
            cfnresponse.send(
                event,
                context,
                cfnresponse.FAILED,
                {"Error": f"Malformed custom resource event: {str(e)}"},
            )
        return {"Status": cfnresponse.FAILED}

    responder = CfnResponder(context)
    status = dispatcher.dispatch(request, responder)
    return {"Status": status, "Resource": request.resource}
