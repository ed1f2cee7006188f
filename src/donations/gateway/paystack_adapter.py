"""Paystack REST API adapter backed by httpx.

Every call is bounded by the configured timeout. Failures never escape as
exceptions from get()/post(): they come back as an ApiResponse with
``ok=False`` and the best message available (Paystack's own ``message`` when
the body carries one, the transport error otherwise).
"""

from typing import Any

import httpx
import structlog

from donations.gateway.port import ApiResponse, PaystackApi

logger = structlog.get_logger(__name__)


class HttpPaystackApi(PaystackApi):
    """Production Paystack adapter."""

    def __init__(
        self,
        secret_key: str,
        base_url: str,
        timeout: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.secret_key = secret_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {secret_key}",
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def get(self, path: str) -> ApiResponse:
        return self._request("GET", path)

    def post(self, path: str, body: dict[str, Any]) -> ApiResponse:
        return self._request("POST", path, body)

    def _request(self, method: str, path: str, body: dict[str, Any] | None = None) -> ApiResponse:
        try:
            response = self._client.request(method, f"/{path.lstrip('/')}", json=body)
        except httpx.HTTPError as exc:
            logger.warning("paystack_request_failed", method=method, path=path, error=str(exc))
            return ApiResponse(ok=False, message=str(exc) or type(exc).__name__)

        try:
            payload = response.json()
        except ValueError:
            logger.warning(
                "paystack_malformed_response",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            return ApiResponse(ok=False, message=f"Malformed response from Paystack ({response.status_code})")

        if not isinstance(payload, dict):
            return ApiResponse(ok=False, message="Malformed response from Paystack")

        data = payload.get("data")
        result = ApiResponse(
            ok=response.is_success,
            status=bool(payload.get("status")),
            message=str(payload.get("message") or ""),
            data=data if isinstance(data, dict) else {},
            http_status=response.status_code,
        )
        if not response.is_success:
            logger.warning(
                "paystack_request_rejected",
                method=method,
                path=path,
                status_code=response.status_code,
                message=result.message,
            )
        return result
