"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``SVCMAP_*`` prefix, ``__`` for nested sections
                    (``SVCMAP_DATADOG__API_KEY``)
  3. TOML file    — discovered by :func:`svcmap.config.discovery.find_config`
  4. Code defaults — baked into the section models

Nested sections merge key by key across sources, so an env var can supply
the API key while the TOML file supplies the environment.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from svcmap.config.discovery import find_config, read_config_table
from svcmap.config.models import DatadogConfig, ResolutionConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read the svcmap table from a discovered config file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            try:
                self._data = read_config_table(toml_path)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# The TOML path chosen by from_cli(), read back in settings_customise_sources().
_tls = threading.local()


class SvcmapSettings(BaseSettings):
    """Unified settings for the svcmap CLI.

    Built once per invocation by the root CLI group and stored on the
    :class:`AppContext`.

    Attributes:
        config_path: The TOML file the settings were read from, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "SVCMAP_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    datadog: DatadogConfig = Field(default_factory=DatadogConfig)
    resolution: ResolutionConfig = Field(default_factory=ResolutionConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        start_dir: Path | None = None,
        proxy: str | None = None,
        **cli_flags: Any,
    ) -> SvcmapSettings:
        """Construct settings from a CLI invocation.

        Args:
            config_path: Explicit config file (``--config``); must exist.
            start_dir: Where config discovery starts (default: cwd).
            proxy: ``--proxy`` override for ``[datadog] cors_proxy_url``.
                An empty string sends requests straight to the provider.
            **cli_flags: Top-level flags such as ``json_output``.

        Raises:
            click.ClickException: If *config_path* does not exist or the
                config file is not valid TOML.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(start_dir)

        if proxy is not None:
            cli_flags["datadog"] = {"cors_proxy_url": proxy}

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None
