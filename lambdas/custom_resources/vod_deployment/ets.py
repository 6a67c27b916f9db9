import copy
import re
from typing import Any, Dict, List, Mapping, Optional

from botocore.exceptions import ClientError

from ets_presets import PRESETS
from lambda_error_handler import ProvisioningError, error_code, wrap_client_error
from lambda_utils import logger, tracer
from models import PipelineProperties
from service_client import ServiceProvisioner

PRESET_ID_SEPARATOR = ","

# Elastic Transcoder pipeline and preset ids, e.g. 1351620000001-abcde1
ETS_ID_PATTERN = re.compile(r"^\d{13}-\w{6}$")


def is_ets_id(value: Optional[str]) -> bool:
    return bool(value and ETS_ID_PATTERN.match(value))


def split_preset_ids(physical_id: Optional[str]) -> List[str]:
    """Return the preset ids packed into a Presets physical id."""
    if not physical_id:
        return []
    return [
        preset_id.strip()
        for preset_id in physical_id.split(PRESET_ID_SEPARATOR)
        if is_ets_id(preset_id.strip())
    ]


class TranscoderProvisioner(ServiceProvisioner):
    """Elastic Transcoder pipelines and the bundled custom presets."""

    service_name = "elastictranscoder"

    def __init__(
        self,
        client=None,
        presets: Optional[Mapping[str, Dict[str, Any]]] = None,
        region_name: Optional[str] = None,
    ):
        super().__init__(client, region_name)
        self.presets = presets if presets is not None else PRESETS

    @tracer.capture_method
    def create_pipeline(self, props: PipelineProperties) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "Name": props.name,
            "InputBucket": props.source,
            "OutputBucket": props.destination,
            "Role": props.role,
        }
        if props.topic:
            params["Notifications"] = {
                "Progressing": "",
                "Completed": props.topic,
                "Warning": props.topic,
                "Error": props.topic,
            }

        with wrap_client_error("elastictranscoder", "CreatePipeline"):
            response = self.client.create_pipeline(**params)

        pipeline_id = response["Pipeline"]["Id"]
        logger.info(f"Created pipeline {props.name}", extra={"pipeline_id": pipeline_id})
        return {"PipelineId": pipeline_id}

    @tracer.capture_method
    def delete_pipeline(self, pipeline_id: Optional[str]) -> None:
        if not pipeline_id:
            logger.info("No pipeline id on the resource, nothing to delete")
            return

        # A failed Create leaves the log stream name as the physical id
        tolerated = ["ResourceNotFoundException"]
        if not is_ets_id(pipeline_id):
            tolerated.append("ValidationException")

        with wrap_client_error("elastictranscoder", "DeletePipeline"):
            try:
                self.client.delete_pipeline(Id=pipeline_id)
            except ClientError as e:
                if error_code(e) not in tolerated:
                    raise
                logger.warning(f"Pipeline {pipeline_id} not found, already deleted")
                return
        logger.info(f"Deleted pipeline {pipeline_id}")

    @tracer.capture_method
    def create_presets(self) -> Dict[str, str]:
        response_data: Dict[str, str] = {}
        for key, preset in self.presets.items():
            try:
                with wrap_client_error("elastictranscoder", "CreatePreset"):
                    response = self.client.create_preset(**copy.deepcopy(preset))
            except ProvisioningError as e:
                created = list(response_data.values())
                if created:
                    logger.warning(
                        f"Creating preset {preset['Name']} failed after {len(created)} presets",
                        extra={"created": created},
                    )
                e.physical_resource_id = PRESET_ID_SEPARATOR.join(created) or None
                raise
            response_data[key] = response["Preset"]["Id"]
            logger.info(
                f"Created preset {preset['Name']}",
                extra={"preset_id": response_data[key]},
            )
            if response.get("Warning"):
                logger.warning(f"Preset {preset['Name']}: {response['Warning']}")
        return response_data

    @tracer.capture_method
    def delete_presets(self, physical_id: Optional[str]) -> List[str]:
        """Delete the presets this resource created, listed in its physical id."""
        deleted = []
        for preset_id in split_preset_ids(physical_id):
            with wrap_client_error("elastictranscoder", "DeletePreset"):
                try:
                    self.client.delete_preset(Id=preset_id)
                except ClientError as e:
                    if error_code(e) != "ResourceNotFoundException":
                        raise
                    logger.warning(f"Preset {preset_id} already deleted")
                    continue
            logger.info(f"Deleted preset {preset_id}")
            deleted.append(preset_id)

        if not deleted:
            logger.info("No presets to delete", extra={"physical_id": physical_id})
        return deleted
