"""External build toolchain: locate, install on demand, and invoke.

Every call blocks until the process exits. No timeout is applied, so a hung
toolchain blocks the release build.
"""

from __future__ import annotations

import logging
import os
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from relpack.services.result import ServiceResult

logger = logging.getLogger(__name__)

TOOLCHAIN_UNAVAILABLE = "TOOLCHAIN_UNAVAILABLE"


def run_command(
    args: Sequence[str],
    *,
    cwd: Path | None = None,
    env: Mapping[str, str] | None = None,
) -> subprocess.CompletedProcess[str]:
    """Run *args* and capture text output. Never raises on non-zero exit.

    *env* replaces the child environment when given.
    """
    return subprocess.run(
        list(args),
        cwd=cwd,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
        check=False,
    )


def combined_output(proc: subprocess.CompletedProcess[str]) -> str:
    """stdout followed by stderr, for diagnostics."""
    return "".join(part for part in (proc.stdout, proc.stderr) if part)


class Toolchain:
    """A toolchain binary living at ``<home>/<name>``.

    Parameters:
        name: Binary file name (e.g. ``rebar3``).
        home: Tool-home directory, or None when it is not configured.
        install_command: Command that installs the binary into *home*.
    """

    def __init__(
        self,
        name: str,
        home: Path | None,
        install_command: Sequence[str],
    ) -> None:
        self.name = name
        self._home = home
        self._install_command = list(install_command)

    @property
    def path(self) -> Path | None:
        """Expected location of the binary, or None without a tool home."""
        if self._home is None:
            return None
        return self._home / self.name

    def install_env(self) -> dict[str, str]:
        """Installer environment: the current one with ``MIX_HOME`` set to the tool home.

        ``mix local.rebar`` installs into ``MIX_HOME``, so pointing it at the
        tool home makes the install land where :attr:`path` looks.
        """
        env = dict(os.environ)
        if self._home is not None:
            env["MIX_HOME"] = str(self._home)
        return env

    def ensure(self, *, label: str) -> ServiceResult:
        """Make sure the binary exists, installing it if necessary.

        On success ``data["path"]`` holds the binary path. *label* prefixes
        log lines so operators can tell which plugin asked.
        """
        op = "ensure_toolchain"
        path = self.path
        if path is None:
            logger.warning("%s: tool home is not configured, cannot locate %s", label, self.name)
            return ServiceResult.failure(op, TOOLCHAIN_UNAVAILABLE, "Tool home is not configured")

        if path.exists():
            return ServiceResult(ok=True, op=op, data={"path": str(path), "installed": False})

        logger.debug("%s: %s is required but missing, attempting to install it..", label, self.name)
        try:
            proc = run_command(self._install_command, env=self.install_env())
        except OSError as exc:
            logger.warning("%s: Unable to install %s: %s", label, self.name, exc)
            return ServiceResult.failure(op, TOOLCHAIN_UNAVAILABLE, str(exc))

        if proc.returncode != 0:
            logger.debug("%s", combined_output(proc))
            logger.warning("%s: Unable to successfully install %s!", label, self.name)
            return ServiceResult.failure(
                op,
                TOOLCHAIN_UNAVAILABLE,
                f"Installer exited with status {proc.returncode}",
                returncode=proc.returncode,
            )

        logger.debug("%s: Successfully installed %s", label, self.name)
        return ServiceResult(ok=True, op=op, data={"path": str(path), "installed": True})
