from typing import Any, Optional

import boto3

from lambda_error_handler import wrap_client_error
from lambda_utils import logger


class ServiceProvisioner:
    """
    Base for the provisioners that wrap one boto3 client.

    The client is created on first use, inside the dispatched call, so a
    service missing from the installed botocore only fails the resources that
    need it. Tests pass a ready client instead.
    """

    service_name = ""

    def __init__(self, client: Any = None, region_name: Optional[str] = None):
        self._client = client
        self.region_name = region_name

    @property
    def client(self) -> Any:
        if self._client is None:
            logger.debug(f"Creating {self.service_name} client")
            with wrap_client_error(self.service_name, "CreateClient"):
                self._client = boto3.client(self.service_name, region_name=self.region_name)
        return self._client
