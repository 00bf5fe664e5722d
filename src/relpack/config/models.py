"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, relpack.toml only contains overrides.
A minimal project needs only [release] name and version.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from relpack.domain.release import Overlay

# --- relpack.toml sections ---


class ReleaseConfig(BaseModel):
    """[release] section."""

    model_config = {"frozen": True}

    name: str = "app"
    version: str = "0.1.0"
    output_dir: str = "_build/rel"


class ProfileConfig(BaseModel):
    """[profile] section."""

    model_config = {"frozen": True}

    overlays: list[Overlay] = Field(default_factory=list)


class DependencySpec(BaseModel):
    """[dependencies.<name>] entry."""

    model_config = {"frozen": True}

    path: str | None = None


class EdumpConfig(BaseModel):
    """[plugins.edump] section."""

    model_config = {"frozen": True}

    enabled: bool = True
    dependency: str = "edump"
    tool_name: str = "edump"
    toolchain: str = "rebar3"
    install_command: list[str] = Field(default_factory=lambda: ["mix", "local.rebar", "--force"])
    build_args: list[str] = Field(default_factory=lambda: ["escriptize"])


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    local_dir: str = ".relpack/plugins"
    edump: EdumpConfig = Field(default_factory=EdumpConfig)
