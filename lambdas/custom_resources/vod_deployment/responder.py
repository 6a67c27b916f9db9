from typing import Any, Callable, Dict, Optional

import cfnresponse

from lambda_error_handler import ResponseAlreadySentError
from lambda_utils import logger
from models import CustomResourceRequest

SendFn = Callable[..., None]


class CfnResponder:
    """
    Sends the single terminal SUCCESS/FAILED response for one invocation.

    The transport defaults to cfnresponse.send; tests pass a recorder. A
    responder is created per invocation and refuses a second send.
    """

    def __init__(self, context: Any, send: Optional[SendFn] = None):
        self.context = context
        self._send = send or cfnresponse.send
        self.status: Optional[str] = None

    @property
    def sent(self) -> bool:
        return self.status is not None

    def _physical_id(
        self, request: CustomResourceRequest, physical_id: Optional[str]
    ) -> Optional[str]:
        # cfnresponse falls back to the log stream name when this is None
        return physical_id or request.physical_resource_id or None

    def _dispatch(
        self,
        request: CustomResourceRequest,
        status: str,
        data: Dict[str, Any],
        physical_id: Optional[str],
    ) -> None:
        if self.sent:
            raise ResponseAlreadySentError(
                f"{self.status} already sent for {request.logical_resource_id}",
                {"attempted": status},
            )
        self.status = status
        logger.info(
            f"Sending {status} for {request.resource or 'unknown resource'}",
            extra={
                "logical_resource_id": request.logical_resource_id,
                "physical_resource_id": physical_id,
                "response_data_keys": sorted(data.keys()),
            },
        )
        self._send(request.raw_event, self.context, status, data, physical_id)

    def success(
        self,
        request: CustomResourceRequest,
        data: Optional[Dict[str, Any]] = None,
        physical_id: Optional[str] = None,
    ) -> None:
        self._dispatch(
            request,
            cfnresponse.SUCCESS,
            data or {},
            self._physical_id(request, physical_id),
        )

    def failed(
        self,
        request: CustomResourceRequest,
        reason: str,
        physical_id: Optional[str] = None,
    ) -> None:
        log_stream = getattr(self.context, "log_stream_name", "")
        self._dispatch(
            request,
            cfnresponse.FAILED,
            {"Error": f"{reason} (see CloudWatch Log Stream: {log_stream})"},
            self._physical_id(request, physical_id),
        )
