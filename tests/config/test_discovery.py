"""Tests for relpack.toml discovery."""

from __future__ import annotations

from pathlib import Path

import pytest

from relpack.config.discovery import CONFIG_ENV_VAR, find_config


class TestFindConfig:
    def test_walks_up(self, project_root: Path) -> None:
        nested = project_root / "apps" / "web"
        nested.mkdir(parents=True)
        assert find_config(nested) == (project_root / "relpack.toml").resolve()

    def test_none_when_absent(self, tmp_path: Path) -> None:
        assert find_config(tmp_path) is None

    def test_env_var_wins(self, project_root: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        other = tmp_path / "other.toml"
        other.write_text("", encoding="utf-8")
        monkeypatch.setenv(CONFIG_ENV_VAR, str(other))
        assert find_config(project_root) == other

    def test_env_var_pointing_nowhere(self, project_root: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "missing.toml"))
        assert find_config(project_root) is None
