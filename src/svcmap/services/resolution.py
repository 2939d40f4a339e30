"""ResolutionService — operation name to owning service to dependency table.

Pipeline for one resolution attempt:

1. Build the RequestConfig (no request is issued without both keys).
2. List services by environment and take the environment's candidates.
3. Scan the candidates in batches for the operation name.
4. Fetch the owning service's dependency record and render it.

Any provider failure aborts the attempt. Failed calls are evicted from
the session cache, so the next attempt retries them.
"""

from __future__ import annotations

from typing import Any

from svcmap.domain.extraction import TextPosition, extract_operation_name
from svcmap.infrastructure.errors import MissingCredentials, RemoteCallFailed
from svcmap.output.markdown import render_dependency_table
from svcmap.services.base import BaseService
from svcmap.services.result import ErrorCode, ServiceResult
from svcmap.services.scanner import BatchedCandidateScanner
from svcmap.services.telemetry import trace_span, traced


class ResolutionService(BaseService):
    """Resolves operation names found in source code."""

    @traced
    async def resolve(
        self,
        operation_name: str,
        *,
        environment: str | None = None,
    ) -> ServiceResult:
        """Find the service that reports *operation_name* and render its dependencies.

        Args:
            operation_name: Operation name as written in the tracing call.
            environment: Provider environment; defaults to ``[datadog] env``.
        """
        op = "resolve"
        env = environment or self._session.environment

        try:
            config = self._session.request_config()
        except MissingCredentials as exc:
            return self._missing_credentials(op, str(exc))

        directory = self._session.directory
        scanner = BatchedCandidateScanner(
            directory,
            batch_size=self._session.settings.resolution.batch_size,
        )

        try:
            with trace_span("services_by_env"):
                services_by_env = await directory.list_services_by_environment(config)
            candidates = services_by_env.get(env, [])

            with trace_span("scan") as span:
                if span:
                    span.annotate("candidates", len(candidates))
                service = await scanner.resolve_service_for_operation(
                    operation_name, candidates, config
                )

            if service is None:
                return ServiceResult.failure(
                    op,
                    ErrorCode.NOT_FOUND,
                    f"No service in '{env}' reports operation '{operation_name}'",
                    operation_name=operation_name,
                    environment=env,
                )

            with trace_span("dependencies"):
                dependencies = await directory.get_dependencies(service, env, config)
        except RemoteCallFailed as exc:
            return self._remote_failure(op, exc)

        markdown = render_dependency_table(
            dependencies,
            service,
            env,
            app_host=self._session.settings.datadog.app_host,
        )
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "operation_name": operation_name,
                "environment": env,
                "service": service,
                "candidates": len(candidates),
                "calls": list(dependencies.calls),
                "called_by": list(dependencies.called_by),
                "markdown": markdown,
            },
        )

    @traced
    async def hover(
        self,
        text: str,
        language: str,
        line: int,
        character: int,
        *,
        environment: str | None = None,
    ) -> ServiceResult:
        """Resolve the operation name under a cursor position in *text*.

        Line and character are zero-based. The result carries the range to
        highlight alongside the resolution data.
        """
        op = "hover"
        match = extract_operation_name(text, language, TextPosition(line, character))
        if match is None:
            return ServiceResult.failure(
                op,
                ErrorCode.NO_OPERATION,
                f"No operation name at {line}:{character}",
                language=language,
                line=line,
                character=character,
            )

        resolved = await self.resolve(match.operation_name, environment=environment)
        data: dict[str, Any] = {**resolved.data, "range": match.range.to_dict()}
        return resolved.model_copy(update={"op": op, "data": data})
