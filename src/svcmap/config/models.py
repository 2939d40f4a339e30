"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, svcmap.toml only contains
overrides. A working setup needs only the two keys under [datadog].
"""

from __future__ import annotations

from pydantic import BaseModel, Field, SecretStr

# --- svcmap.toml sections ---


class DatadogConfig(BaseModel):
    """[datadog] section."""

    model_config = {"frozen": True}

    api_key: SecretStr | None = None
    application_key: SecretStr | None = None
    env: str = "prod"
    cors_proxy_url: str = "http://localhost:8080"
    api_host: str = "api.datadoghq.com"
    app_host: str = "app.datadoghq.com"
    timeout_seconds: float = Field(default=30.0, gt=0)


class ResolutionConfig(BaseModel):
    """[resolution] section."""

    model_config = {"frozen": True}

    batch_size: int = Field(default=25, ge=1)
