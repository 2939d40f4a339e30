"""DirectoryService — inspect the provider's service directory.

Thin wrappers over the cached directory client for browsing services,
their operations, and their dependency records from the CLI.
"""

from __future__ import annotations

from svcmap.infrastructure.errors import MissingCredentials, RemoteCallFailed
from svcmap.output.markdown import render_dependency_table
from svcmap.services.base import BaseService
from svcmap.services.result import ErrorCode, ServiceResult
from svcmap.services.telemetry import traced


class DirectoryService(BaseService):
    """Read-only queries against the service directory."""

    @traced
    async def list_services(self, *, environment: str | None = None) -> ServiceResult:
        """List services in *environment*, or in every environment when None."""
        op = "list_services"
        try:
            config = self._session.request_config()
        except MissingCredentials as exc:
            return self._missing_credentials(op, str(exc))

        try:
            services_by_env = await self._session.directory.list_services_by_environment(config)
        except RemoteCallFailed as exc:
            return self._remote_failure(op, exc)

        if environment is not None:
            if environment not in services_by_env:
                return ServiceResult.failure(
                    op,
                    ErrorCode.NOT_FOUND,
                    f"Environment '{environment}' not found",
                    environments=sorted(services_by_env),
                )
            services_by_env = {environment: services_by_env[environment]}

        items = [
            {"environment": env, "service": name}
            for env, names in services_by_env.items()
            for name in names
        ]
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "environments": list(services_by_env),
                "count": len(items),
                "items": items,
            },
        )

    @traced
    async def list_operations(self, service: str) -> ServiceResult:
        """List the operations the provider reports for *service*."""
        op = "list_operations"
        try:
            config = self._session.request_config()
        except MissingCredentials as exc:
            return self._missing_credentials(op, str(exc))

        try:
            operations = await self._session.directory.list_operations(service, config)
        except RemoteCallFailed as exc:
            return self._remote_failure(op, exc)

        items = [operation.model_dump() for operation in operations]
        return ServiceResult(
            ok=True,
            op=op,
            data={"service": service, "count": len(items), "items": items},
        )

    @traced
    async def dependencies(self, service: str, *, environment: str | None = None) -> ServiceResult:
        """Fetch and render the dependency record of *service*."""
        op = "dependencies"
        env = environment or self._session.environment
        try:
            config = self._session.request_config()
        except MissingCredentials as exc:
            return self._missing_credentials(op, str(exc))

        try:
            record = await self._session.directory.get_dependencies(service, env, config)
        except RemoteCallFailed as exc:
            return self._remote_failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "service": service,
                "environment": env,
                "calls": list(record.calls),
                "called_by": list(record.called_by),
                "markdown": render_dependency_table(
                    record,
                    service,
                    env,
                    app_host=self._session.settings.datadog.app_host,
                ),
            },
        )
