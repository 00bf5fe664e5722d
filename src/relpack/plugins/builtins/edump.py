"""Built-in edump plugin: ship the edump crash-dump tool inside the release.

Before assembly the plugin looks up the ``edump`` project dependency and makes
sure ``rebar3`` is available under the tool home (installing it with
``mix local.rebar --force`` if not). It then builds the escript with
``rebar3 escriptize`` inside the dependency. When the escript lands in
``_build/default/bin/``, two copy overlays are appended to the release: the
escript itself and a launcher script under ``commands/``::

    bin/myapp edump
    Usage: edump [-h] [-v] [<task>]

      -h, --help     Print this help.
      -v, --version  Show version information.
      <task>         Task to run: index, graph, info, try

Every failure (no dependency, no toolchain, failed build, missing output or
launcher) leaves the release untouched. Failures are reported through warning logs and
never raised, so the release build always completes.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path

import pluggy

from relpack.config.models import EdumpConfig
from relpack.domain.dependencies import Dependency, DependencyResolver, find_dependency
from relpack.domain.release import VERSION_TOKEN, CopyOverlay, Release
from relpack.infrastructure.toolchain import Toolchain, combined_output, run_command
from relpack.services.result import ServiceResult

hookimpl = pluggy.HookimplMarker("relpack")

logger = logging.getLogger(__name__)

BUILD_OUTPUT_DIR = ("_build", "default", "bin")

DEPENDENCY_NOT_FOUND = "DEPENDENCY_NOT_FOUND"
BUILD_FAILED = "BUILD_FAILED"
OUTPUT_MISSING = "OUTPUT_MISSING"
SCRIPT_MISSING = "SCRIPT_MISSING"


def default_priv_dir() -> Path:
    """The ``priv`` resource directory shipped inside the relpack package."""
    return Path(str(resources.files("relpack").joinpath("priv")))


class EdumpPlugin:
    """Builds the edump escript and registers it as release overlays.

    Parameters:
        config: The ``[plugins.edump]`` section.
        resolver: Project dependency resolver. Without one, the dependency
            is treated as absent.
        tool_home: Directory holding the toolchain binary.
        priv_dir: Resource directory containing ``plugins/<tool>.sh``.
    """

    def __init__(
        self,
        config: EdumpConfig | None = None,
        resolver: DependencyResolver | None = None,
        tool_home: Path | None = None,
        priv_dir: Path | None = None,
    ) -> None:
        self._config = config or EdumpConfig()
        self._resolver = resolver
        self._priv_dir = priv_dir or default_priv_dir()
        self._toolchain = Toolchain(
            self._config.toolchain,
            tool_home,
            self._config.install_command,
        )
        self.last_result: ServiceResult | None = None

    @property
    def _label(self) -> str:
        return self._config.tool_name

    # ------------------------------------------------------------------
    # Lifecycle hooks
    # ------------------------------------------------------------------

    @hookimpl
    def before_assembly(self, release: Release) -> Release:
        """Inject the edump escript and launcher when they can be built."""
        if not self._config.enabled:
            return release
        return self.prepare_release(release)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def prepare_release(self, release: Release) -> Release:
        """Return *release* with the edump overlays appended, or unchanged.

        Never raises: an unexpected error is logged and the input returned.
        """
        try:
            return self._prepare(release)
        except Exception as exc:
            logger.warning("%s: Unexpected error, skipping: %s", self._label, exc, exc_info=True)
            self.last_result = ServiceResult.failure("prepare_release", "UNEXPECTED", str(exc))
            return release

    def _prepare(self, release: Release) -> Release:
        op = "prepare_release"
        dep = self._find_dependency()
        if dep is None:
            self.last_result = ServiceResult.failure(
                op,
                DEPENDENCY_NOT_FOUND,
                f"Dependency {self._config.dependency!r} is not available",
            )
            return release

        toolchain = self._toolchain.ensure(label=self._label)
        if not toolchain.ok:
            self.last_result = toolchain
            return release

        built = self._build(dep, Path(toolchain.data["path"]))
        if not built.ok:
            self.last_result = built
            return release

        executable = built.data["path"]
        script = self._priv_dir / "plugins" / f"{self._config.tool_name}.sh"
        if not script.is_file():
            logger.warning("%s: Launcher script %s is missing, skipping..", self._label, script)
            self.last_result = ServiceResult.failure(
                op,
                SCRIPT_MISSING,
                f"Expected launcher script at {script}",
                path=str(script),
            )
            return release

        self.last_result = ServiceResult(
            ok=True,
            op=op,
            data={"executable": executable, "script": str(script)},
        )
        return release.with_overlays(*self._overlays(executable, str(script)))

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _find_dependency(self) -> Dependency | None:
        if self._resolver is None:
            return None
        return find_dependency(self._resolver, self._config.dependency)

    def _build(self, dep: Dependency, toolchain_path: Path) -> ServiceResult:
        """Build the escript inside *dep* and verify the output exists.

        Always rebuilds, even when output from an earlier build is present.
        """
        op = "build_escript"
        logger.debug("%s: Building %s escript..", self._label, self._config.tool_name)
        try:
            proc = run_command(
                [str(toolchain_path), *self._config.build_args],
                cwd=dep.source_path,
            )
        except OSError as exc:
            logger.debug("%s: %s", self._label, exc)
            logger.warning("%s: Failed to build %s escript!", self._label, self._config.tool_name)
            return ServiceResult.failure(op, BUILD_FAILED, str(exc))

        if proc.returncode != 0:
            logger.debug("%s", combined_output(proc))
            logger.warning("%s: Failed to build %s escript!", self._label, self._config.tool_name)
            return ServiceResult.failure(
                op,
                BUILD_FAILED,
                f"Build exited with status {proc.returncode}",
                returncode=proc.returncode,
            )

        output = dep.source_path.joinpath(*BUILD_OUTPUT_DIR, self._config.tool_name)
        if not output.exists():
            logger.warning(
                "%s: Building escript succeeded, but output is not where it is expected, skipping..",
                self._label,
            )
            return ServiceResult.failure(
                op,
                OUTPUT_MISSING,
                f"Expected build output at {output}",
                path=str(output),
            )

        logger.debug("%s: Escript successfully built!", self._label)
        return ServiceResult(ok=True, op=op, data={"path": str(output)})

    def _overlays(self, executable: str, script: str) -> list[CopyOverlay]:
        tool = self._config.tool_name
        return [
            CopyOverlay(source=executable, destination=f"releases/{VERSION_TOKEN}/{tool}"),
            CopyOverlay(source=script, destination=f"releases/{VERSION_TOKEN}/commands/{tool}.sh"),
        ]
