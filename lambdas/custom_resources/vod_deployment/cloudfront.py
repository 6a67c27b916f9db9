import uuid
from typing import Any, Dict

from lambda_error_handler import wrap_client_error
from lambda_utils import logger, tracer
from models import CloudFrontIdentityProperties
from service_client import ServiceProvisioner


class CloudFrontIdentityProvisioner(ServiceProvisioner):
    """Creates the origin access identity used by the ABR destination bucket."""

    service_name = "cloudfront"

    @tracer.capture_method
    def create_identity(self, props: CloudFrontIdentityProperties) -> Dict[str, Any]:
        with wrap_client_error("cloudfront", "CreateCloudFrontOriginAccessIdentity"):
            response = self.client.create_cloud_front_origin_access_identity(
                CloudFrontOriginAccessIdentityConfig={
                    "CallerReference": str(uuid.uuid4()),
                    "Comment": props.comment,
                }
            )

        identity = response["CloudFrontOriginAccessIdentity"]
        logger.info(f"Created CloudFront origin access identity {identity['Id']}")
        return {
            "Identity": identity["Id"],
            "S3CanonicalUserId": identity["S3CanonicalUserId"],
        }
