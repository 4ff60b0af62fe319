"""
Shared pytest fixtures for the Coolify MCP server tests.
Upstream calls go to an in-process fake API (httpx.MockTransport), never the network.
"""
import os
import sys

import httpx
import pytest

# Ensure the package is importable without installation
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from mcp_coolify.client import CoolifyClient
from mcp_coolify.config import Settings
from mcp_coolify.operations import CoolifyOperations

TOKEN = "tok_" + "a1b2c3d4" * 5
APP_UUID = "550e8400-e29b-41d4-a716-446655440000"
COOLIFY_ID = "kg8wsw4ks0kc0c4goc8g4gss"
BASE_URL = "https://coolify.test"


# ─── Fake Coolify API ───────────────────────────────────────────

class FakeCoolify:
    """Records every request and answers from a small route table."""

    def __init__(self):
        self.requests = []
        self._routes = {}

    def route(self, method, path, status=200, json=None, content=None, headers=None, exc=None):
        self._routes[(method, path)] = (status, json, content, headers, exc)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        status, body, content, headers, exc = self._routes.get(
            (request.method, request.url.path), (200, {}, None, None, None)
        )
        if exc is not None:
            raise exc(f"simulated {exc.__name__}", request=request)
        if content is not None:
            return httpx.Response(status, content=content, headers=headers)
        return httpx.Response(status, json=body, headers=headers)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


# ─── Fixtures ───────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate every test from the caller's Coolify environment."""
    for var in ("COOLIFY_URL", "COOLIFY_TOKEN_PATH", "COOLIFY_TIMEOUT", "COOLIFY_LOG_LEVEL", "PLATFORM_IP", "NODE_ENV"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("COOLIFY_MCP_CONFIG", str(tmp_path / "no-config.yaml"))


@pytest.fixture
def settings():
    return Settings(base_url=BASE_URL, token=TOKEN)


@pytest.fixture
def upstream():
    return FakeCoolify()


@pytest.fixture
def client(settings, upstream):
    return CoolifyClient(settings, transport=upstream.transport)


@pytest.fixture
def ops(client):
    return CoolifyOperations(client)


@pytest.fixture
def token_file(tmp_path):
    path = tmp_path / "coolify-token"
    path.write_text(f"  {TOKEN}\n")
    path.chmod(0o600)
    return path
