import json
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from lambda_error_handler import ProvisioningError, error_code, wrap_client_error
from lambda_utils import logger, tracer
from models import StepFunctionProperties
from service_client import ServiceProvisioner

STEPS_ARN_SEPARATOR = ","


def split_steps_arn(physical_id: Optional[str]) -> List[str]:
    """Return the state machine ARNs packed into a StepsArn physical id."""
    if not physical_id:
        return []
    return [
        arn.strip()
        for arn in physical_id.split(STEPS_ARN_SEPARATOR)
        if arn.strip().startswith("arn:")
    ]


class StepFunctionsProvisioner(ServiceProvisioner):
    """Creates and deletes the ingest/process/publish workflow state machines."""

    service_name = "stepfunctions"

    @tracer.capture_method
    def create_steps(self, props: StepFunctionProperties) -> Dict[str, Any]:
        response_data: Dict[str, Any] = {}
        arns = []

        for workflow, definition in props.definitions.items():
            name = f"{props.stack_name}-{workflow}"
            try:
                with wrap_client_error("stepfunctions", "CreateStateMachine"):
                    response = self.client.create_state_machine(
                        name=name,
                        definition=json.dumps(definition),
                        roleArn=props.role_arn,
                    )
            except ProvisioningError as e:
                if arns:
                    logger.warning(
                        f"Creating {name} failed after {len(arns)} state machines",
                        extra={"created": arns},
                    )
                e.physical_resource_id = STEPS_ARN_SEPARATOR.join(arns) or None
                raise
            arn = response["stateMachineArn"]
            logger.info(f"Created state machine {name}", extra={"arn": arn})
            response_data[f"{workflow}Arn"] = arn
            arns.append(arn)

        response_data["StepsArn"] = STEPS_ARN_SEPARATOR.join(arns)
        return response_data

    @tracer.capture_method
    def delete_steps(self, physical_id: Optional[str]) -> List[str]:
        deleted = []
        for arn in split_steps_arn(physical_id):
            with wrap_client_error("stepfunctions", "DeleteStateMachine"):
                try:
                    self.client.delete_state_machine(stateMachineArn=arn)
                except ClientError as e:
                    if error_code(e) != "StateMachineDoesNotExist":
                        raise
                    logger.warning(f"State machine {arn} already deleted")
                    continue
            logger.info(f"Deleted state machine {arn}")
            deleted.append(arn)

        if not deleted:
            logger.info("No state machines to delete", extra={"physical_id": physical_id})
        return deleted
