"""Exceptions raised by the provider infrastructure.

The service layer converts these into ``ServiceResult`` errors; nothing
below the service layer catches them.
"""

from __future__ import annotations


class RemoteCallFailed(RuntimeError):
    """A provider request did not produce a usable response.

    ``status_code`` is the HTTP status (0 when no response arrived) and
    ``status_text`` the reason phrase or a description of the failure.
    """

    def __init__(self, status_code: int, status_text: str) -> None:
        super().__init__(f"Request failed with {status_code}: {status_text}")
        self.status_code = status_code
        self.status_text = status_text


class MissingCredentials(RuntimeError):
    """No API key or application key is configured; no request is issued."""
