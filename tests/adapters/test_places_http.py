"""Tests for the shared HTTP helper's error mapping."""

import asyncio

import httpx
import pytest

from poi_search.adapters.places.http import build_http_client, http_get_json
from poi_search.config import HttpConfig
from poi_search.domain.errors import ConfigurationError, ProviderError

URL = "https://api.example.test/v1/places"


def call(handler, params=None):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await http_get_json(client, URL, params, provider="test")

    return asyncio.run(run())


def test_returns_json_object():
    assert call(lambda request: httpx.Response(200, json={"features": []})) == {"features": []}


def test_params_are_sent():
    seen = {}

    def handler(request):
        seen.update(request.url.params)
        return httpx.Response(200, json={})

    call(handler, {"apiKey": "k", "limit": 30})
    assert seen == {"apiKey": "k", "limit": "30"}


def test_timeout_is_provider_error():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(ProviderError) as excinfo:
        call(handler)
    assert excinfo.value.is_timeout


@pytest.mark.parametrize("status", [401, 403])
def test_auth_status_is_configuration_error(status):
    with pytest.raises(ConfigurationError) as excinfo:
        call(lambda request: httpx.Response(status))
    assert excinfo.value.provider == "test"


def test_server_error_is_provider_error():
    with pytest.raises(ProviderError) as excinfo:
        call(lambda request: httpx.Response(503))
    assert excinfo.value.status_code == 503
    assert not excinfo.value.is_timeout


def test_connection_failure_is_provider_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(ProviderError):
        call(handler)


def test_malformed_json_is_provider_error():
    with pytest.raises(ProviderError):
        call(lambda request: httpx.Response(200, content=b"<html>"))


def test_non_object_json_is_provider_error():
    with pytest.raises(ProviderError):
        call(lambda request: httpx.Response(200, json=[1, 2]))


def test_api_key_not_logged(caplog):
    caplog.set_level("DEBUG", logger="poi_search")
    with pytest.raises(ProviderError):
        asyncio.run(
            _call_with_params(lambda request: httpx.Response(500), {"apiKey": "top-secret"})
        )
    assert "top-secret" not in caplog.text
    for record in caplog.records:
        assert "top-secret" not in str(record.__dict__)


async def _call_with_params(handler, params):
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        return await http_get_json(client, URL, params, provider="test")


def test_build_http_client_applies_timeouts():
    client = build_http_client(HttpConfig(connect_timeout_seconds=2.0, request_timeout_seconds=7.0))
    try:
        assert client.timeout.connect == 2.0
        assert client.timeout.read == 7.0
        assert client.headers["User-Agent"] == "poi-search/0.1"
    finally:
        asyncio.run(client.aclose())
