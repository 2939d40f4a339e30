"""ServiceDirectoryClient — the provider's three read operations, cached.

Each operation is a GET through the configured proxy, wrapped by the
client's :class:`RemoteCallCache`:

* ``list_services_by_environment`` — one fixed key. Fetched once for the
  life of the client, whatever ``RequestConfig`` later calls pass.
* ``list_operations`` — keyed by service name.
* ``get_dependencies`` — keyed by service name only. The environment is
  NOT part of the key: asking for the same service in a second
  environment returns the first environment's record. Build a new client
  to observe a different environment.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, TypeVar
from urllib.parse import quote, urlencode

import httpx
from pydantic import ValidationError

from svcmap.domain.types import (
    SERVICES_BY_ENVIRONMENT,
    Operation,
    OperationsResponse,
    RequestConfig,
    ServiceDependencies,
    ServicesByEnvironment,
)
from svcmap.infrastructure.cache import RemoteCallCache
from svcmap.infrastructure.errors import RemoteCallFailed

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_API_HOST = "api.datadoghq.com"
API_KEY_HEADER = "DD-API-KEY"
APP_KEY_HEADER = "DD-APPLICATION-KEY"

_SERVICES_BY_ENV_KEY = "services_by_env"


class ServiceDirectoryClient:
    """Cached read access to the provider's service directory.

    Args:
        cache: Cache shared by the three operations. A fresh one is
            created when omitted.
        http_client: Client used for requests. When omitted the directory
            creates and owns one, closed by :meth:`aclose`.
        api_host: Provider API host (e.g. ``api.datadoghq.eu``).
        timeout: Request timeout in seconds for an owned client.
    """

    def __init__(
        self,
        cache: RemoteCallCache | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
        api_host: str = DEFAULT_API_HOST,
        timeout: float = 30.0,
    ) -> None:
        self.cache = cache if cache is not None else RemoteCallCache()
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._api_host = api_host

        self.list_services_by_environment = self.cache.memoize(
            self._fetch_services_by_environment,
            lambda config: _SERVICES_BY_ENV_KEY,
        )
        self.list_operations = self.cache.memoize(
            self._fetch_operations,
            lambda service_name, config: f"operations:{service_name}",
        )
        self.get_dependencies = self.cache.memoize(
            self._fetch_dependencies,
            lambda service_name, environment, config: f"dependencies:{service_name}",
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    # ------------------------------------------------------------------
    # Remote operations (wrapped by the cache in __init__)
    # ------------------------------------------------------------------

    async def _fetch_services_by_environment(self, config: RequestConfig) -> ServicesByEnvironment:
        url = self._url(config, "/trace/api/services_by_env", {"from": "0"})
        response = await self._get(url, config)
        return _parse(response, SERVICES_BY_ENVIRONMENT.validate_python)

    async def _fetch_operations(self, service_name: str, config: RequestConfig) -> list[Operation]:
        url = self._url(config, f"/api/v1/trace/operation_names/{quote(service_name, safe='')}")
        response = await self._get(url, config)
        return _parse(response, OperationsResponse.model_validate).operation_names

    async def _fetch_dependencies(
        self, service_name: str, environment: str, config: RequestConfig
    ) -> ServiceDependencies:
        url = self._url(
            config,
            f"/api/v1/service_dependencies/{quote(service_name, safe='')}",
            {"env": environment, "start": "0"},
        )
        response = await self._get(url, config)
        return _parse(response, ServiceDependencies.model_validate)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _url(self, config: RequestConfig, path: str, query: dict[str, str] | None = None) -> str:
        target = f"https://{self._api_host}{path}"
        if query:
            target += f"?{urlencode(query)}"
        proxy = config.proxy_base.rstrip("/")
        return f"{proxy}/{target}" if proxy else target

    async def _get(self, url: str, config: RequestConfig) -> httpx.Response:
        headers = {
            "Content-Type": "application/json",
            API_KEY_HEADER: config.api_key,
            APP_KEY_HEADER: config.app_key,
        }
        logger.debug("GET %s", url)
        try:
            response = await self._http.get(url, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", url, exc)
            raise RemoteCallFailed(0, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            logger.warning("Request to %s returned %s", url, response.status_code)
            raise RemoteCallFailed(response.status_code, response.reason_phrase)
        return response


def _parse(response: httpx.Response, validate: Callable[[Any], T]) -> T:
    """Decode and validate a successful response body."""
    try:
        return validate(response.json())
    except ValidationError as exc:
        logger.warning("Malformed response from %s", response.request.url)
        msg = f"Malformed response: {exc.error_count()} validation error(s)"
        raise RemoteCallFailed(response.status_code, msg) from exc
    except ValueError as exc:
        logger.warning("Undecodable response from %s", response.request.url)
        raise RemoteCallFailed(response.status_code, f"Malformed response: {exc}") from exc
