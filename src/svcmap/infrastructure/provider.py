"""ProviderSession — the single dependency injected into every service.

Owns the HTTP client, the remote call cache and the directory client for
one logical session, plus the per-session state the services need (the
credentials warning is only logged once per session). Constructed from
settings; use as an async context manager so the HTTP client is closed.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from svcmap.domain.types import RequestConfig
from svcmap.infrastructure.cache import RemoteCallCache
from svcmap.infrastructure.directory import ServiceDirectoryClient
from svcmap.infrastructure.errors import MissingCredentials

if TYPE_CHECKING:
    from types import TracebackType

    from svcmap.config.settings import SvcmapSettings

logger = logging.getLogger(__name__)


class ProviderSession:
    """Per-session access to the provider.

    Args:
        settings: Unified settings; the ``[datadog]`` section supplies
            credentials, proxy and hosts.
        transport: Optional httpx transport (tests pass a
            ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: SvcmapSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings
        self.cache = RemoteCallCache()
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=settings.datadog.timeout_seconds,
        )
        self.directory = ServiceDirectoryClient(
            self.cache,
            http_client=self._http,
            api_host=settings.datadog.api_host,
        )
        self.credentials_warning_shown = False

    async def __aenter__(self) -> ProviderSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._http.aclose()

    @property
    def environment(self) -> str:
        """Default environment name from settings."""
        return self.settings.datadog.env

    def request_config(self) -> RequestConfig:
        """Build the RequestConfig for one resolution attempt.

        Raises:
            MissingCredentials: If the API key or the application key is unset.
        """
        dd = self.settings.datadog
        api_key = dd.api_key.get_secret_value() if dd.api_key else ""
        app_key = dd.application_key.get_secret_value() if dd.application_key else ""
        if not api_key or not app_key:
            raise MissingCredentials(
                "Set your Datadog API and Application keys to view service dependencies"
            )
        return RequestConfig(proxy_base=dd.cors_proxy_url, app_key=app_key, api_key=api_key)
