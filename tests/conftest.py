"""Shared pytest fixtures and test helpers for relpack tests."""

from __future__ import annotations

import subprocess
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from relpack.config.models import DependencySpec
from relpack.domain.dependencies import DependencyResolver


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's environment out of settings resolution."""
    monkeypatch.delenv("RELPACK_CONFIG", raising=False)
    monkeypatch.delenv("RELPACK_TOOL_HOME", raising=False)
    monkeypatch.delenv("MIX_HOME", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path) -> Path:
    """Project directory with a minimal relpack.toml."""
    root = tmp_path / "project"
    root.mkdir()
    (root / "relpack.toml").write_text(
        '[release]\nname = "myapp"\nversion = "1.0.0"\n',
        encoding="utf-8",
    )
    return root


@pytest.fixture
def edump_source(tmp_path: Path) -> Path:
    """Fetched edump dependency source directory."""
    source = tmp_path / "deps" / "edump"
    source.mkdir(parents=True)
    return source


@pytest.fixture
def resolver(tmp_path: Path, edump_source: Path) -> DependencyResolver:
    """Resolver declaring edump under the default deps dir."""
    return DependencyResolver({"edump": DependencySpec()}, project_root=tmp_path)


@pytest.fixture
def tool_home(tmp_path: Path) -> Path:
    """Empty tool-home directory (toolchain not installed)."""
    home = tmp_path / "mix"
    home.mkdir()
    return home


class FakeRunner:
    """Stand-in for ``subprocess.run`` that records calls.

    *handlers* maps a command's last argument (``escriptize``, ``--force``)
    to a callable returning ``(returncode, stdout)``.
    """

    def __init__(self, handlers: dict[str, Callable[[list[str], Path | None], tuple[int, str]]]):
        self.handlers = handlers
        self.calls: list[tuple[list[str], Path | None]] = []
        self.envs: list[dict[str, str] | None] = []

    def __call__(self, args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        cwd = kwargs.get("cwd")
        self.calls.append((args, cwd))
        self.envs.append(kwargs.get("env"))
        handler = self.handlers.get(args[-1])
        if handler is None:
            raise FileNotFoundError(args[0])
        returncode, stdout = handler(args, cwd)
        return subprocess.CompletedProcess(args, returncode, stdout, "")

    def commands(self) -> list[list[str]]:
        return [args for args, _cwd in self.calls]


def install_ok(tool_home: Path) -> Callable[[list[str], Path | None], tuple[int, str]]:
    """Installer handler that drops a rebar3 binary into *tool_home*."""

    def handler(args: list[str], cwd: Path | None) -> tuple[int, str]:
        (tool_home / "rebar3").write_text("#!/bin/sh\n", encoding="utf-8")
        return 0, "* creating rebar3"

    return handler


def escriptize_ok(args: list[str], cwd: Path | None) -> tuple[int, str]:
    """Build handler that writes the escript where rebar3 would."""
    assert cwd is not None
    out = Path(cwd) / "_build" / "default" / "bin" / "edump"
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text("#!/usr/bin/env escript\n", encoding="utf-8")
    return 0, "===> Building escript..."


@pytest.fixture
def fake_run() -> Iterator[Callable[..., FakeRunner]]:
    """Factory patching ``subprocess.run`` with a FakeRunner."""
    patchers: list[Any] = []

    def make(handlers: dict[str, Callable[[list[str], Path | None], tuple[int, str]]]) -> FakeRunner:
        runner = FakeRunner(handlers)
        patcher = patch("subprocess.run", side_effect=runner)
        patcher.start()
        patchers.append(patcher)
        return runner

    yield make
    for patcher in patchers:
        patcher.stop()
