"""Shared pytest fixtures and test helpers for svcmap tests."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import httpx
import pytest
from click.testing import CliRunner
from pydantic import SecretStr

import svcmap.infrastructure.provider as provider_module
from svcmap.config.models import DatadogConfig, ResolutionConfig
from svcmap.config.settings import SvcmapSettings
from svcmap.domain.types import RequestConfig
from svcmap.infrastructure.provider import ProviderSession
from svcmap.services.telemetry import _current_span, disable_telemetry

API_BASE = "/https://api.datadoghq.com"
PROXY = "http://proxy.test"


class FakeProvider:
    """In-memory stand-in for the provider API behind the proxy.

    Routes requests by path, records every request, and can inject
    failures (a queue of status codes per key) and per-key delays.
    Keys are ``"services_by_env"`` or a service name.
    """

    def __init__(self) -> None:
        self.services_by_env: dict[str, list[str]] = {}
        self.operations: dict[str, list[dict[str, Any]]] = {}
        self.dependencies: dict[str, dict[str, Any]] = {}
        self.failures: dict[str, list[int]] = {}
        self.delays: dict[str, float] = {}
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    # --- seeding helpers ---

    def add_service(
        self,
        env: str,
        name: str,
        operations: list[str] | None = None,
        *,
        calls: list[str] | None = None,
        called_by: list[str] | None = None,
    ) -> None:
        self.services_by_env.setdefault(env, []).append(name)
        self.operations[name] = [
            {"type": "web", "name": op, "service": name} for op in operations or []
        ]
        self.dependencies[name] = {
            "name": name,
            "calls": calls or [],
            "called_by": called_by or [],
        }

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    # --- inspection helpers ---

    def paths(self) -> list[str]:
        return [request.url.path for request in self.requests]

    def operation_lookups(self) -> list[str]:
        marker = "/api/v1/trace/operation_names/"
        return [p.split(marker, 1)[1] for p in self.paths() if marker in p]

    def count(self, fragment: str) -> int:
        return sum(1 for p in self.paths() if fragment in p)

    # --- request handling ---

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path.endswith("/trace/api/services_by_env"):
            key, body = "services_by_env", self.services_by_env
        elif "/api/v1/trace/operation_names/" in path:
            key = path.rsplit("/", 1)[1]
            body = {"operation_names": self.operations.get(key, [])}
        elif "/api/v1/service_dependencies/" in path:
            key = path.rsplit("/", 1)[1]
            if key not in self.dependencies:
                return httpx.Response(404, json={"errors": ["not found"]})
            body = self.dependencies[key]
        else:
            return httpx.Response(404)

        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(key, 0))
        finally:
            self.in_flight -= 1

        queued = self.failures.get(key)
        if queued:
            return httpx.Response(queued.pop(0))
        return httpx.Response(200, json=body)


@pytest.fixture(autouse=True)
def _reset_telemetry() -> Generator[None]:
    """Verbose CLI runs enable telemetry in the test thread's context."""
    yield
    disable_telemetry()
    _current_span.set(None)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def request_config() -> RequestConfig:
    return RequestConfig(proxy_base=PROXY, app_key="app-key", api_key="api-key")


@pytest.fixture
def settings() -> SvcmapSettings:
    """Settings with credentials, the test proxy, and default sections."""
    return SvcmapSettings(
        datadog=DatadogConfig(
            api_key="api-key",
            application_key="app-key",
            cors_proxy_url=PROXY,
        ),
    )


@pytest.fixture
def make_session(
    provider: FakeProvider,
    settings: SvcmapSettings,
) -> Callable[..., ProviderSession]:
    """Factory for sessions wired to the fake provider.

    Keyword overrides: ``batch_size``, ``api_key``, ``application_key``.
    """

    def _make(**overrides: Any) -> ProviderSession:
        keys = {
            k: SecretStr(v) if isinstance(v, str) else v
            for k, v in overrides.items()
            if k in ("api_key", "application_key")
        }
        datadog = settings.datadog.model_copy(update=keys)
        resolution = ResolutionConfig(batch_size=overrides.get("batch_size", 25))
        custom = settings.model_copy(update={"datadog": datadog, "resolution": resolution})
        return ProviderSession(custom, transport=provider.transport())

    return _make


@pytest.fixture
def cli_env(
    provider: FakeProvider,
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> FakeProvider:
    """Route CLI sessions to the fake provider with credentials from env vars.

    Runs from an empty temp directory so no svcmap.toml is discovered.
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SVCMAP_CONFIG", raising=False)
    monkeypatch.setenv("SVCMAP_DATADOG__API_KEY", "api-key")
    monkeypatch.setenv("SVCMAP_DATADOG__APPLICATION_KEY", "app-key")
    monkeypatch.setenv("SVCMAP_DATADOG__CORS_PROXY_URL", PROXY)

    real_session = ProviderSession

    def _session(settings: SvcmapSettings, **kwargs: Any) -> ProviderSession:
        return real_session(settings, transport=provider.transport())

    monkeypatch.setattr(provider_module, "ProviderSession", _session)
    return provider
