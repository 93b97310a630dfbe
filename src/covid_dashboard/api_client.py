"""
Async JSON API client for the dashboard's upstream REST services.

This module wraps httpx with TLS enforcement, a configurable timeout,
JSON decoding and a mapping of transport/status failures onto the
dashboard exception hierarchy.
"""

import time
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import httpx

from .enums import ApiErrorCode, LogLevel
from .event_logger import EventLogger
from .exceptions import NetworkError, ProtocolError, RateLimitError


@dataclass
class ApiResponse:
    """A decoded JSON response."""

    url: str
    status_code: int
    payload: Any
    response_time_ms: float = 0.0


class ApiClient:
    """
    Async HTTP client returning decoded JSON payloads.

    Usable as an async context manager; the underlying httpx client is
    created lazily on first request otherwise.
    """

    USER_AGENT = "covid-dashboard/0.1"

    def __init__(
        self,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[EventLogger] = None,
    ) -> None:
        """
        Initialize the API client.

        Args:
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used to fake upstreams in tests)
            logger: Optional event logger
        """
        self._timeout = timeout
        self._transport = transport
        self._logger = logger
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "ApiClient":
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                verify=True,  # TLS certificate verification enforced
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
                transport=self._transport,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.USER_AGENT,
                },
            )
        return self._client

    def _validate_url(self, url: str) -> None:
        """
        Reject endpoints that are not served over HTTPS.

        Raises:
            NetworkError: If the URL does not use HTTPS
        """
        parsed = urlparse(url)
        if parsed.scheme.lower() != "https":
            raise NetworkError(
                code=ApiErrorCode.TLS_ERROR.value,
                message=f"Endpoint must use HTTPS: {url}",
                details={"url": url, "scheme": parsed.scheme},
            )

    async def get_json(
        self,
        url: str,
        params: Optional[dict[str, Any]] = None,
    ) -> ApiResponse:
        """
        GET a URL and decode its JSON body.

        Args:
            url: Absolute https URL
            params: Optional query parameters

        Returns:
            ApiResponse with the decoded payload

        Raises:
            NetworkError: Transport failure, timeout, TLS problem, invalid URL
                or HTTP error status
            RateLimitError: HTTP 429
            ProtocolError: Body is not valid JSON
        """
        self._validate_url(url)
        client = self._ensure_client()
        start_time = time.perf_counter()

        self._log(LogLevel.DEBUG, f"GET {url}", {"params": params or {}})

        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException as e:
            raise NetworkError(
                code=ApiErrorCode.TIMEOUT.value,
                message=f"Request timed out after {self._timeout}s",
                details={"url": url},
            ) from e
        except httpx.ConnectError as e:
            error_msg = str(e)
            code = ApiErrorCode.NETWORK_ERROR
            if "ssl" in error_msg.lower() or "certificate" in error_msg.lower():
                code = ApiErrorCode.TLS_ERROR
            raise NetworkError(
                code=code.value,
                message=f"Connection error: {error_msg}",
                details={"url": url},
            ) from e
        except httpx.InvalidURL as e:
            raise NetworkError(
                code=ApiErrorCode.INVALID_URL.value,
                message=f"Invalid request URL: {e}",
                details={"url": url},
            ) from e
        except httpx.HTTPError as e:
            raise NetworkError(
                code=ApiErrorCode.NETWORK_ERROR.value,
                message=f"HTTP error: {e}",
                details={"url": url},
            ) from e

        response_time_ms = self._elapsed_ms(start_time)
        details = {"url": url, "status_code": response.status_code}

        if response.status_code == 429:
            raise RateLimitError(
                code=ApiErrorCode.RATE_LIMITED.value,
                message="Rate limited by upstream API",
                details=details,
            )
        if response.status_code >= 500:
            raise NetworkError(
                code=ApiErrorCode.SERVER_ERROR.value,
                message=f"Upstream server error: {response.status_code}",
                details=details,
            )
        if response.status_code >= 400:
            raise NetworkError(
                code=ApiErrorCode.CLIENT_ERROR.value,
                message=f"Upstream rejected request: {response.status_code}",
                details=details,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise ProtocolError(
                code=ApiErrorCode.PARSE_ERROR.value,
                message=f"Response is not valid JSON: {e}",
                details=details,
            ) from e

        self._log(
            LogLevel.DEBUG,
            f"GET {url} -> {response.status_code}",
            {"response_time_ms": round(response_time_ms, 1)},
        )
        return ApiResponse(
            url=str(response.url),
            status_code=response.status_code,
            payload=payload,
            response_time_ms=response_time_ms,
        )

    def _log(self, level: LogLevel, message: str, data: Optional[dict] = None) -> None:
        if self._logger:
            self._logger.log(level, "ApiClient", message, data)

    def _elapsed_ms(self, start_time: float) -> float:
        """Calculate elapsed time in milliseconds."""
        return (time.perf_counter() - start_time) * 1000

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
