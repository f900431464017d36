"""
JSON-over-HTTP RPC client.

Calls are POSTed as {"method": ..., "params": ...} to {base_url}/{method};
the response body's "result" field is returned.
"""

import logging
from typing import Any

import httpx

from .base import BaseRPCClient, TransportFactory
from ..exceptions import (
    AuthenticationError,
    InvalidRequestError,
    MethodNotFoundError,
    RateLimitError,
    RPCError,
    ServerError,
    TimeoutError,
    TransportError,
)
from ..retry import Retrier, RetryConfig, retryable_errors

logger = logging.getLogger(__name__)


class HttpTransportFactory(TransportFactory[httpx.Client]):
    """Opens an httpx.Client per call."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        """
        Args:
            base_url: Root URL of the RPC service
            timeout: Request timeout in seconds
            headers: Extra headers sent with every call
            transport: Custom httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = headers or {}
        self.transport = transport

    def get_transport(self) -> httpx.Client:
        return httpx.Client(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json", **self.headers},
            transport=self.transport,
        )


def _parse_retry_after(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


class HttpRPCClient(BaseRPCClient[httpx.Client]):
    """
    Client for a JSON-over-HTTP RPC service.

    Features:
    - One httpx.Client per attempt, always closed
    - HTTP failures mapped to retry-aware exceptions
    - Only retryable errors are retried by default
    """

    def __init__(
        self,
        base_url: str,
        retrier: Retrier | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
        name: str = "rpc",
    ):
        """
        Initialize the HTTP RPC client.

        Args:
            base_url: Root URL of the RPC service
            retrier: Retry policy (default: RetryConfig().build_retrier()
                restricted to retryable errors)
            timeout: Request timeout in seconds
            headers: Extra headers sent with every call
            transport: Custom httpx transport
            name: Service name used in log messages
        """
        if retrier is None:
            retrier = RetryConfig(retry_on=retryable_errors).build_retrier()
        super().__init__(
            HttpTransportFactory(base_url, timeout, headers, transport),
            retrier,
        )
        self.name = name

    @property
    def service_name(self) -> str:
        return self.name

    def _handle_error(self, method: str, response: httpx.Response) -> None:
        """Convert HTTP status codes to domain exceptions."""
        status_code = response.status_code
        if status_code in (401, 403):
            raise AuthenticationError(
                "Credentials rejected",
                method=method,
                status_code=status_code,
            )
        elif status_code == 404:
            raise MethodNotFoundError(
                f"Unknown method {method}",
                method=method,
                status_code=status_code,
            )
        elif status_code in (400, 422):
            raise InvalidRequestError(
                f"Invalid request: {response.text}",
                method=method,
                status_code=status_code,
            )
        elif status_code == 429:
            raise RateLimitError(
                "Rate limit exceeded",
                retry_after=_parse_retry_after(response.headers.get("Retry-After")),
                method=method,
                status_code=status_code,
            )
        elif status_code >= 500:
            raise ServerError(
                f"Server error: {response.text}",
                method=method,
                status_code=status_code,
            )
        raise RPCError(
            f"Unexpected response: {response.text}",
            method=method,
            status_code=status_code,
        )

    def _post(self, client: httpx.Client, method: str, params: dict[str, Any]) -> Any:
        try:
            response = client.post(f"/{method}", json={"method": method, "params": params})
        except httpx.TimeoutException as e:
            raise TimeoutError(
                f"Call timed out after {client.timeout.read}s", method=method
            ) from e
        except httpx.TransportError as e:
            raise TransportError(
                f"Failed to reach {self.service_name}: {e}", method=method
            ) from e

        if response.status_code != 200:
            self._handle_error(method, response)

        try:
            data = response.json()
        except ValueError as e:
            raise RPCError(
                "Response body is not valid JSON",
                method=method,
                status_code=response.status_code,
            ) from e
        if not isinstance(data, dict) or "result" not in data:
            raise RPCError(
                "Response is missing the result field",
                method=method,
                status_code=response.status_code,
            )
        return data["result"]

    def invoke(self, method: str, params: dict[str, Any] | None = None) -> Any:
        """
        Call a remote method.

        Args:
            method: Remote method name
            params: Keyword arguments for the method

        Returns:
            The decoded "result" field of the response
        """
        logger.debug(f"[{self.service_name}] Invoking {method}")
        return self.call(lambda client: self._post(client, method, params or {}))

    def health_check(self) -> bool:
        """Check if the RPC service answers at all. Never raises."""
        try:
            with self.transport_factory.get_transport() as client:
                response = client.get("/health")
                return response.status_code == 200
        except Exception as e:
            logger.debug(f"[{self.service_name}] Health check failed: {e}")
            return False
