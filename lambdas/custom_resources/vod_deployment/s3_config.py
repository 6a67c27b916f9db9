import os
from typing import Any, Dict, List, Optional

from lambda_error_handler import wrap_client_error
from lambda_utils import logger, tracer
from models import S3NotificationProperties, WatermarkProperties
from service_client import ServiceProvisioner

ASSETS_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "assets")
WATERMARK_FILE = os.path.join(ASSETS_DIR, "aws-logo.png")


def build_notification_configuration(
    props: S3NotificationProperties,
) -> Dict[str, List[Dict[str, Any]]]:
    """One ObjectCreated Lambda trigger per source video suffix."""
    configurations = []
    for suffix in props.suffixes:
        configurations.append(
            {
                "Id": f"vod-ingest{suffix.replace('.', '-')}",
                "LambdaFunctionArn": props.ingest_arn,
                "Events": ["s3:ObjectCreated:*"],
                "Filter": {
                    "Key": {"FilterRules": [{"Name": "suffix", "Value": suffix}]}
                },
            }
        )
    return {"LambdaFunctionConfigurations": configurations}


class S3Configurator(ServiceProvisioner):
    """Source bucket configuration: ingest trigger and the sample watermark."""

    service_name = "s3"

    def __init__(
        self,
        client=None,
        watermark_file: str = WATERMARK_FILE,
        region_name: Optional[str] = None,
    ):
        super().__init__(client, region_name)
        self.watermark_file = watermark_file

    @tracer.capture_method
    def configure_notification(self, props: S3NotificationProperties) -> None:
        configuration = build_notification_configuration(props)
        with wrap_client_error("s3", "PutBucketNotificationConfiguration"):
            self.client.put_bucket_notification_configuration(
                Bucket=props.source,
                NotificationConfiguration=configuration,
            )
        logger.info(
            f"Configured ingest notifications on {props.source}",
            extra={"suffixes": props.suffixes},
        )

    @tracer.capture_method
    def put_watermark(self, props: WatermarkProperties) -> None:
        with open(self.watermark_file, "rb") as f:
            body = f.read()

        with wrap_client_error("s3", "PutObject"):
            self.client.put_object(
                Bucket=props.source,
                Key=props.key,
                Body=body,
                ContentType="image/png",
            )
        logger.info(f"Uploaded watermark to s3://{props.source}/{props.key}")
