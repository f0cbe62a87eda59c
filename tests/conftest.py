"""
Pytest configuration and fixtures
"""

import json
from typing import Any, Callable, Dict, List

import httpx
import pytest

from creatordb_proxy.client import UpstreamClient
from creatordb_proxy.config import HttpConfig, ProxyConfig, ProxySettings, UpstreamConfig
from creatordb_proxy.dispatch import Dispatcher
from creatordb_proxy.registry import ParamType

TEST_BASE_URL = "https://upstream.test"
TEST_API_KEY = "test-api-key"


@pytest.fixture
def mock_env_vars(monkeypatch):
    """Mock environment variables"""
    monkeypatch.setenv("CREATORDB_API_KEY", TEST_API_KEY)
    monkeypatch.setenv("CREATORDB_BASE_URL", TEST_BASE_URL)
    monkeypatch.setenv("LOG_LEVEL", "INFO")
    monkeypatch.delenv("PROXY_HOST", raising=False)
    monkeypatch.delenv("PROXY_PORT", raising=False)


@pytest.fixture
def proxy_settings(mock_env_vars):
    """Create test proxy settings"""
    return ProxySettings()


@pytest.fixture
def upstream_config():
    """Upstream config pointing at the fake upstream"""
    return UpstreamConfig(base_url=TEST_BASE_URL, api_key=TEST_API_KEY)


@pytest.fixture
def proxy_config(upstream_config):
    """Complete proxy configuration"""
    return ProxyConfig(upstream=upstream_config, http=HttpConfig(cors_origins=["*"]))


class FakeUpstream:
    """
    Records every request and answers from a configurable responder.

    By default returns a successful CreatorDB-style envelope.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.responder: Callable[[httpx.Request], httpx.Response] = self.default_response

    @staticmethod
    def default_response(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": {"path": request.url.path},
                "traceId": "trace-123",
                "timestamp": 1700000000000,
            },
        )

    def respond_with(self, status_code: int, payload: Any) -> None:
        self.responder = lambda request: httpx.Response(status_code, json=payload)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last_request.content)


@pytest.fixture
def fake_upstream():
    """Recording fake of the CreatorDB API"""
    return FakeUpstream()


@pytest.fixture
def upstream_client(upstream_config, fake_upstream):
    """UpstreamClient wired to the fake upstream"""
    return UpstreamClient(upstream_config, transport=httpx.MockTransport(fake_upstream.handler))


@pytest.fixture
def dispatcher(upstream_client):
    """Dispatcher wired to the fake upstream"""
    return Dispatcher(upstream_client)


def build_sample_args(operation) -> Dict[str, Any]:
    """Minimal valid arguments for an operation"""
    args: Dict[str, Any] = {}
    for param in operation.required_parameters:
        if param.type is ParamType.FILTERS:
            args[param.name] = [{"filterName": "country", "op": "=", "value": "US"}]
        elif param.name == "uniqueId":
            args[param.name] = "@creator"
        else:
            args[param.name] = f"{param.name}-value"
    return args


@pytest.fixture
def sample_args():
    """Factory for minimal valid operation arguments"""
    return build_sample_args
