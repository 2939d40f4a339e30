"""Provider records — request config, operations, and dependency records.

Frozen pydantic models validated straight from the provider's JSON bodies.
Unknown fields are ignored; missing required fields fail validation.
"""

from __future__ import annotations

from typing import TypeAlias

from pydantic import BaseModel, ConfigDict, TypeAdapter

# Environment name -> ordered service names, as returned by the provider.
ServicesByEnvironment: TypeAlias = dict[str, list[str]]

SERVICES_BY_ENVIRONMENT: TypeAdapter[dict[str, list[str]]] = TypeAdapter(dict[str, list[str]])


class RequestConfig(BaseModel):
    """Credentials and routing for one resolution attempt.

    An empty ``proxy_base`` sends requests straight to the provider.
    """

    model_config = ConfigDict(frozen=True)

    proxy_base: str
    app_key: str
    api_key: str


class Operation(BaseModel):
    """One instrumentation point reported by the provider for a service."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    type: str
    name: str
    service: str


class OperationsResponse(BaseModel):
    """Body of the ``operation_names`` endpoint."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    operation_names: list[Operation]


class ServiceDependencies(BaseModel):
    """Upstream and downstream edges of one service node."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    name: str
    calls: list[str]
    called_by: list[str]
