import json
from datetime import datetime
from unittest.mock import patch

import boto3
import pytest
from botocore.stub import Stubber

from lambda_error_handler import ProvisioningError
from models import StepFunctionProperties
from step_functions import StepFunctionsProvisioner, split_steps_arn

INGEST_ARN = "arn:aws:states:us-east-1:123456789012:stateMachine:vod-Ingest"
PUBLISH_ARN = "arn:aws:states:us-east-1:123456789012:stateMachine:vod-Publish"
ROLE_ARN = "arn:aws:iam::123456789012:role/vod-steps"
DEFINITION = {"StartAt": "Start", "States": {"Start": {"Type": "Succeed"}}}


@pytest.fixture
def sfn_client():
    return boto3.client("stepfunctions", region_name="us-east-1")


def _props(**definitions):
    return StepFunctionProperties.from_properties(
        "StepFunction",
        {"StackName": "vod", "RoleArn": ROLE_ARN, "Definitions": definitions},
    )


def test_split_steps_arn_ignores_non_arns():
    assert split_steps_arn(f"{INGEST_ARN}, {PUBLISH_ARN}") == [INGEST_ARN, PUBLISH_ARN]
    assert split_steps_arn("2026/10/19/[$LATEST]abcdef") == []
    assert split_steps_arn(None) == []


def test_create_steps_creates_one_state_machine_per_definition(sfn_client):
    provisioner = StepFunctionsProvisioner(sfn_client)
    props = _props(Ingest=DEFINITION, Publish=json.dumps(DEFINITION))

    with Stubber(sfn_client) as stubber:
        stubber.add_response(
            "create_state_machine",
            {"stateMachineArn": INGEST_ARN, "creationDate": datetime(2026, 10, 19)},
            {"name": "vod-Ingest", "definition": json.dumps(DEFINITION), "roleArn": ROLE_ARN},
        )
        stubber.add_response(
            "create_state_machine",
            {"stateMachineArn": PUBLISH_ARN, "creationDate": datetime(2026, 10, 19)},
            {"name": "vod-Publish", "definition": json.dumps(DEFINITION), "roleArn": ROLE_ARN},
        )
        data = provisioner.create_steps(props)
        stubber.assert_no_pending_responses()

    assert data == {
        "IngestArn": INGEST_ARN,
        "PublishArn": PUBLISH_ARN,
        "StepsArn": f"{INGEST_ARN},{PUBLISH_ARN}",
    }


def test_create_steps_raises_provisioning_error(sfn_client):
    provisioner = StepFunctionsProvisioner(sfn_client)

    with Stubber(sfn_client) as stubber:
        stubber.add_client_error(
            "create_state_machine",
            service_error_code="StateMachineLimitExceeded",
            service_message="limit exceeded",
        )
        with pytest.raises(ProvisioningError) as exc_info:
            provisioner.create_steps(_props(Ingest=DEFINITION))

    assert exc_info.value.code == "StateMachineLimitExceeded"
    assert "limit exceeded" in str(exc_info.value)


def test_partial_create_reports_created_arns(sfn_client):
    provisioner = StepFunctionsProvisioner(sfn_client)

    with Stubber(sfn_client) as stubber:
        stubber.add_response(
            "create_state_machine",
            {"stateMachineArn": INGEST_ARN, "creationDate": datetime(2026, 10, 19)},
        )
        stubber.add_client_error(
            "create_state_machine",
            service_error_code="StateMachineLimitExceeded",
            service_message="limit exceeded",
        )
        with pytest.raises(ProvisioningError) as exc_info:
            provisioner.create_steps(_props(Ingest=DEFINITION, Publish=DEFINITION))

    assert exc_info.value.physical_resource_id == INGEST_ARN

    # the FAILED physical id is what the rollback Delete receives
    with Stubber(sfn_client) as stubber:
        stubber.add_response("delete_state_machine", {}, {"stateMachineArn": INGEST_ARN})
        assert provisioner.delete_steps(exc_info.value.physical_resource_id) == [INGEST_ARN]
        stubber.assert_no_pending_responses()


def test_first_create_failure_has_no_physical_id(sfn_client):
    provisioner = StepFunctionsProvisioner(sfn_client)

    with Stubber(sfn_client) as stubber:
        stubber.add_client_error("create_state_machine", service_error_code="AccessDeniedException")
        with pytest.raises(ProvisioningError) as exc_info:
            provisioner.create_steps(_props(Ingest=DEFINITION))

    assert exc_info.value.physical_resource_id is None


def test_client_is_created_on_first_use():
    provisioner = StepFunctionsProvisioner(region_name="us-east-1")

    with patch("boto3.client") as mock_client:
        provisioner.delete_steps(INGEST_ARN)
        provisioner.delete_steps(PUBLISH_ARN)

    mock_client.assert_called_once_with("stepfunctions", region_name="us-east-1")


def test_delete_steps_deletes_every_arn(sfn_client):
    provisioner = StepFunctionsProvisioner(sfn_client)

    with Stubber(sfn_client) as stubber:
        stubber.add_response("delete_state_machine", {}, {"stateMachineArn": INGEST_ARN})
        stubber.add_client_error(
            "delete_state_machine",
            service_error_code="StateMachineDoesNotExist",
            expected_params={"stateMachineArn": PUBLISH_ARN},
        )
        deleted = provisioner.delete_steps(f"{INGEST_ARN},{PUBLISH_ARN}")
        stubber.assert_no_pending_responses()

    assert deleted == [INGEST_ARN]


def test_delete_steps_propagates_other_errors(sfn_client):
    provisioner = StepFunctionsProvisioner(sfn_client)

    with Stubber(sfn_client) as stubber:
        stubber.add_client_error("delete_state_machine", service_error_code="AccessDeniedException")
        with pytest.raises(ProvisioningError):
            provisioner.delete_steps(INGEST_ARN)


def test_delete_steps_without_arns_is_noop(sfn_client):
    provisioner = StepFunctionsProvisioner(sfn_client)

    with Stubber(sfn_client) as stubber:
        assert provisioner.delete_steps("2026/10/19/[$LATEST]abcdef") == []
        stubber.assert_no_pending_responses()
