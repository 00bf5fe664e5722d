"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``RELPACK_*`` prefix (``RELPACK_TOOL_HOME`` for the toolchain home)
  3. TOML file    — ``relpack.toml`` discovered via walk-up
  4. Code defaults — baked into the section models (``tool_home`` falls back to ``MIX_HOME``)

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`relpack.config.discovery`.
"""

from __future__ import annotations

import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from relpack.config.discovery import find_config
from relpack.config.models import (
    DependencySpec,
    PluginsConfig,
    ProfileConfig,
    ReleaseConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``relpack.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


def _mix_home() -> Path | None:
    """``MIX_HOME`` when set, else None."""
    value = os.environ.get("MIX_HOME")
    return Path(value) if value else None


class RelSettings(BaseSettings):
    """Unified settings for the relpack CLI.

    Attributes:
        project_root: Resolved project directory (parent of ``relpack.toml``,
            or CWD if no config found).
        config_path: The config file in use, or None if none was found.
        tool_home: Directory holding build toolchain binaries. Falls back to
            ``MIX_HOME`` when no source sets it. Plugins receive it injected.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "RELPACK_",
        "env_nested_delimiter": "__",
    }

    # --- Resolved path (not in TOML — derived from config location) ---
    project_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    release: ReleaseConfig = Field(default_factory=ReleaseConfig)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    deps_dir: str = "deps"
    dependencies: dict[str, DependencySpec] = Field(default_factory=dict)
    tool_home: Path | None = Field(default_factory=_mix_home)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
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
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> RelSettings:
        """Construct settings from CLI invocation.

        Discovers ``relpack.toml`` via walk-up (or explicit *config_path*),
        resolves *project_root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
