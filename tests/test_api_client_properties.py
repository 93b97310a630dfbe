"""
Property-based tests for the JSON API client.

Upstream servers are faked with httpx.MockTransport; no real network access.
"""

import asyncio
import io

import httpx
import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from covid_dashboard.api_client import ApiClient
from covid_dashboard.enums import ApiErrorCode, LogLevel
from covid_dashboard.event_logger import EventLogger
from covid_dashboard.exceptions import NetworkError, ProtocolError, RateLimitError


URL = "https://api.example/v3/covid-19/countries/usa"


def get(handler, url: str = URL, **kwargs):
    async def run():
        async with ApiClient(transport=httpx.MockTransport(handler), **kwargs) as client:
            return await client.get_json(url)

    return asyncio.run(run())


class TestHttpsEnforcementProperty:
    """
    **Property: only https endpoints are ever requested**
    """

    @given(scheme=st.sampled_from(["http", "ftp", "ws", ""]))
    @settings(max_examples=20)
    def test_non_https_urls_are_rejected(self, scheme: str) -> None:
        requested: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request)
            return httpx.Response(200, json={})

        url = f"{scheme}://api.example/all" if scheme else "api.example/all"
        with pytest.raises(NetworkError) as exc_info:
            get(handler, url)

        assert exc_info.value.code == ApiErrorCode.TLS_ERROR.value
        assert requested == []


class TestStatusMappingProperty:
    """
    **Property: every non-2xx status maps onto the error hierarchy**
    """

    @given(status=st.integers(min_value=500, max_value=599))
    @settings(max_examples=30)
    def test_server_errors(self, status: int) -> None:
        with pytest.raises(NetworkError) as exc_info:
            get(lambda request: httpx.Response(status))

        assert exc_info.value.code == ApiErrorCode.SERVER_ERROR.value
        assert exc_info.value.details["status_code"] == status

    @given(status=st.integers(min_value=400, max_value=499).filter(lambda s: s != 429))
    @settings(max_examples=30)
    def test_client_errors(self, status: int) -> None:
        with pytest.raises(NetworkError) as exc_info:
            get(lambda request: httpx.Response(status))

        assert exc_info.value.code == ApiErrorCode.CLIENT_ERROR.value

    def test_rate_limit(self) -> None:
        with pytest.raises(RateLimitError) as exc_info:
            get(lambda request: httpx.Response(429))

        assert exc_info.value.code == ApiErrorCode.RATE_LIMITED.value


class TestResponseDecoding:
    def test_json_payload_is_returned(self) -> None:
        payload = {"country": "USA", "cases": 10}

        response = get(lambda request: httpx.Response(200, json=payload))

        assert response.payload == payload
        assert response.status_code == 200
        assert response.response_time_ms >= 0

    def test_query_parameters_are_sent(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=[])

        async def run():
            async with ApiClient(transport=httpx.MockTransport(handler)) as client:
                await client.get_json(URL, params={"lastdays": 1500})

        asyncio.run(run())

        assert seen[0].url.params["lastdays"] == "1500"
        assert seen[0].headers["Accept"] == "application/json"

    def test_invalid_json_is_protocol_error(self) -> None:
        with pytest.raises(ProtocolError) as exc_info:
            get(lambda request: httpx.Response(200, content=b"<html></html>"))

        assert exc_info.value.code == ApiErrorCode.PARSE_ERROR.value


class TestTransportFailures:
    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(NetworkError) as exc_info:
            get(handler, timeout=3.0)

        assert exc_info.value.code == ApiErrorCode.TIMEOUT.value
        assert "3.0" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, httpx.TimeoutException)

    def test_certificate_failure_is_tls_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("[SSL: CERTIFICATE_VERIFY_FAILED]", request=request)

        with pytest.raises(NetworkError) as exc_info:
            get(handler)

        assert exc_info.value.code == ApiErrorCode.TLS_ERROR.value

    def test_connection_refused_is_network_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(NetworkError) as exc_info:
            get(handler)

        assert exc_info.value.code == ApiErrorCode.NETWORK_ERROR.value

    def test_invalid_url_is_network_error(self) -> None:
        requested: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requested.append(request)
            return httpx.Response(200, json={})

        url = "https://api.example/v3/covid-19/countries/us\x01a"
        with pytest.raises(NetworkError) as exc_info:
            get(handler, url)

        assert exc_info.value.code == ApiErrorCode.INVALID_URL.value
        assert exc_info.value.details == {"url": url}
        assert isinstance(exc_info.value.__cause__, httpx.InvalidURL)
        assert requested == []

    def test_requests_are_logged_at_debug(self) -> None:
        logger = EventLogger(output_stream=io.StringIO(), level=LogLevel.DEBUG)

        get(lambda request: httpx.Response(200, json={}), logger=logger)

        messages = [entry.message for entry in logger.entries]
        assert f"GET {URL}" in messages
        assert f"GET {URL} -> 200" in messages

    def test_close_is_idempotent(self) -> None:
        client = ApiClient(transport=httpx.MockTransport(lambda r: httpx.Response(200, json={})))

        async def run() -> None:
            await client.get_json(URL)
            await client.close()
            await client.close()

        asyncio.run(run())
