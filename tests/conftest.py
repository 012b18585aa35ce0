"""
Shared fixtures: isolated configuration and scripted provider transports.
"""

import json
import random

import httpx
import pytest

from cafe_intel import config
from cafe_intel.context import ServiceContext
from cafe_intel.credentials import CredentialRegistry, Provider
from cafe_intel.ratelimit import RateLimiter


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    """Point config files at an empty temp dir and clear provider env vars."""
    monkeypatch.setattr(config, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(config, "CONFIG_PATH", tmp_path / "config.toml")
    monkeypatch.setattr(config, "SECRETS_PATH", tmp_path / "secrets.json")

    for env_vars in config.ENV_MAP.values():
        for env_var in env_vars:
            monkeypatch.delenv(env_var, raising=False)
    for env_var in ("CAFE_INTEL_TIMEOUT_MS", "CAFE_INTEL_LOG_LEVEL", "CAFE_INTEL_LOG_JSON"):
        monkeypatch.delenv(env_var, raising=False)

    return tmp_path


class ScriptedTransport:
    """
    httpx.MockTransport driven by a handler, recording every request.

    The handler receives the httpx.Request and returns an httpx.Response.
    """

    def __init__(self, handler):
        self.requests = []
        self._handler = handler
        self.transport = httpx.MockTransport(self._handle)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._handler(request)

    def hosts(self):
        return [request.url.host for request in self.requests]


def json_response(payload, status_code=200):
    return httpx.Response(status_code, content=json.dumps(payload).encode(),
                          headers={"Content-Type": "application/json"})


def failing_handler(request: httpx.Request) -> httpx.Response:
    """Every provider answers 500."""
    return httpx.Response(500, text="boom")


def credentials_for(*providers: Provider) -> CredentialRegistry:
    return CredentialRegistry({provider: f"test-{provider.value}-key" for provider in providers})


def all_credentials() -> CredentialRegistry:
    return credentials_for(*Provider)


def make_context(credentials, handler=failing_handler, seed=7, reporter=None):
    """ServiceContext over a scripted transport. Returns (context, transport)."""
    scripted = ScriptedTransport(handler)
    context = ServiceContext(
        credentials=credentials,
        rate_limiter=RateLimiter(),
        rng=random.Random(seed),
        timeout=1000,
        transport=scripted.transport,
        reporter=reporter,
    )
    return context, scripted
