"""BaseService — abstract foundation for all svcmap services.

Every service receives a :class:`ProviderSession` at construction time.
The session provides the cached directory client, request credentials,
and the settings for the current invocation.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from svcmap.infrastructure.errors import RemoteCallFailed
from svcmap.services.result import ErrorCode, ServiceResult

if TYPE_CHECKING:
    from svcmap.infrastructure.provider import ProviderSession

logger = logging.getLogger(__name__)


class BaseService:
    """Abstract base for all service-layer classes.

    Subclasses implement async operations against the provider using the
    session for all remote access.

    Usage::

        class DirectoryService(BaseService):
            async def list_operations(self, service: str) -> ServiceResult:
                config = self._session.request_config()
                ...
    """

    def __init__(self, session: ProviderSession) -> None:
        self._session = session

    @staticmethod
    def _remote_failure(op: str, exc: RemoteCallFailed) -> ServiceResult:
        """Convert a failed provider call into an error result."""
        return ServiceResult.failure(
            op,
            ErrorCode.REMOTE_CALL_FAILED,
            str(exc),
            status_code=exc.status_code,
            status_text=exc.status_text,
        )

    def _missing_credentials(self, op: str, message: str) -> ServiceResult:
        """Error result for an unconfigured session; warns once per session."""
        if not self._session.credentials_warning_shown:
            logger.warning(message)
            self._session.credentials_warning_shown = True
        return ServiceResult.failure(op, ErrorCode.MISSING_CREDENTIALS, message)
