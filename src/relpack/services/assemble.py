"""AssembleService — build the release tree from relpack.toml.

Flow: settings → Release → ``before_assembly`` plugins → overlays applied
under ``<output_dir>/<name>`` → ``after_assembly`` plugins.

INVARIANT: Plugin failures are warnings, never errors. Only an overlay that
cannot be applied fails the assembly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from relpack.domain.dependencies import DependencyResolver
from relpack.domain.release import OverlayError, Profile, Release
from relpack.infrastructure.overlays import apply_overlays
from relpack.services.result import ServiceError, ServiceResult

if TYPE_CHECKING:
    from relpack.config.settings import RelSettings
    from relpack.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


class AssembleService:
    """Assembles the configured release and reports what was done."""

    def __init__(self, settings: RelSettings) -> None:
        self._settings = settings
        self._root = settings.project_root

    def build_release(self) -> Release:
        """The release described by the settings, before any plugin runs."""
        cfg = self._settings.release
        output_dir = Path(cfg.output_dir)
        if not output_dir.is_absolute():
            output_dir = self._root / output_dir
        return Release(
            name=cfg.name,
            version=cfg.version,
            output_dir=output_dir,
            profile=Profile(overlays=list(self._settings.profile.overlays)),
        )

    def resolver(self) -> DependencyResolver:
        """Dependency resolver over the declared ``[dependencies]``."""
        return DependencyResolver(
            self._settings.dependencies,
            project_root=self._root,
            deps_dir=self._settings.deps_dir,
        )

    def plugin_manager(self) -> PluginManager:
        """Discover plugins and register the configured built-ins."""
        from relpack.plugins.builtins.edump import EdumpPlugin
        from relpack.plugins.manager import PluginManager

        pm = PluginManager()
        pm.discover_and_load(local_dir=self._root / self._settings.plugins.local_dir)

        edump_config = self._settings.plugins.edump
        if edump_config.enabled:
            tool_home = self._settings.tool_home
            edump = EdumpPlugin(
                config=edump_config,
                resolver=self.resolver(),
                tool_home=tool_home.expanduser() if tool_home else None,
            )
            pm.register_plugin(edump, name="edump-builtin")
        return pm

    def assemble(self) -> ServiceResult:
        """Run plugins and materialize the release tree."""
        op = "assemble"
        pm = self.plugin_manager()
        release = pm.run_before_assembly(self.build_release())

        try:
            actions = apply_overlays(release, project_root=self._root)
        except (OverlayError, OSError) as exc:
            logger.debug("Overlay application failed", exc_info=True)
            return ServiceResult(
                ok=False,
                op=op,
                warnings=list(pm.warnings),
                error=ServiceError(
                    code="OVERLAY_FAILED",
                    message=str(exc),
                    detail={"release": release.name, "version": release.version},
                ),
            )

        pm.run_after_assembly(release)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "name": release.name,
                "version": release.version,
                "output_dir": str(release.root),
                "overlays": len(release.profile.overlays),
                "actions": actions,
            },
            warnings=list(pm.warnings),
        )

    def list_plugins(self) -> ServiceResult:
        """Names of all plugins that would take part in assembly."""
        pm = self.plugin_manager()
        return ServiceResult(
            ok=True,
            op="list_plugins",
            data={"plugins": pm.list_plugin_names()},
            warnings=list(pm.warnings),
        )
