"""Plugin discovery, loading, and release threading.

Discovery: entry_points (pip-installed) via pluggy setuptools entrypoints,
plus local directory discovery from ``.relpack/plugins/``.
"""

from __future__ import annotations

import importlib.util
import inspect
import logging
import sys
from pathlib import Path

import pluggy

from relpack.domain.release import Release
from relpack.plugins.hookspecs import RelpackHookSpec

PROJECT_NAME = "relpack"

logger = logging.getLogger(__name__)


class PluginManager:
    """Manages plugin discovery, loading, and hook dispatch."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(RelpackHookSpec)
        self.warnings: list[str] = []

    def discover_and_load(self, *, local_dir: Path | None = None) -> list[str]:
        """Discover plugins from entry points and an optional local directory.

        Uses pluggy's native setuptools entry_point discovery for the
        ``relpack.plugins`` group, then scans *local_dir* (typically
        ``.relpack/plugins/``) for single-file Python plugins.

        Returns a list of loaded plugin names.
        """
        self._pm.load_setuptools_entrypoints("relpack.plugins")
        self._normalize_plugin_instances()
        if local_dir is not None:
            self._discover_local(local_dir)
        return self.list_plugin_names()

    def register_plugin(self, plugin: object, name: str | None = None) -> None:
        """Register a plugin instance directly (e.g. built-in plugins)."""
        resolved_name = name or plugin.__class__.__name__
        self._pm.register(plugin, name=resolved_name)
        logger.debug("Registered plugin: %s", resolved_name)

    def list_plugin_names(self) -> list[str]:
        """Return names of all registered plugins."""
        return [self._pm.get_name(p) or p.__class__.__name__ for p in self._pm.get_plugins()]

    # ------------------------------------------------------------------
    # Lifecycle dispatch
    # ------------------------------------------------------------------

    def run_before_assembly(self, release: Release) -> Release:
        """Thread *release* through every ``before_assembly`` hook.

        Plugins run in registration order and each sees the release returned
        by the previous one. A plugin that raises or returns something other
        than a Release is skipped with a warning; its input passes through.
        """
        for impl in self._pm.hook.before_assembly.get_hookimpls():
            try:
                result = impl.function(release=release)
            except Exception:
                logger.warning("Plugin %s failed in before_assembly", impl.plugin_name, exc_info=True)
                self.warnings.append(f"Plugin {impl.plugin_name} failed in before_assembly")
                continue

            if result is None:
                continue
            if not isinstance(result, Release):
                logger.warning(
                    "Plugin %s returned %s from before_assembly, ignoring",
                    impl.plugin_name,
                    type(result).__name__,
                )
                self.warnings.append(f"Plugin {impl.plugin_name} returned an invalid release")
                continue
            release = result
        return release

    def run_after_assembly(self, release: Release) -> None:
        """Notify every ``after_assembly`` hook. Failures become warnings."""
        for impl in self._pm.hook.after_assembly.get_hookimpls():
            try:
                impl.function(release=release)
            except Exception:
                logger.warning("Plugin %s failed in after_assembly", impl.plugin_name, exc_info=True)
                self.warnings.append(f"Plugin {impl.plugin_name} failed in after_assembly")

    # ------------------------------------------------------------------
    # Local directory discovery
    # ------------------------------------------------------------------

    def _discover_local(self, local_dir: Path) -> None:
        """Scan *local_dir* for single-file Python plugins.

        Each ``*.py`` file (excluding ``_``-prefixed names) is loaded as a
        module. Classes inside the module that carry pluggy hookimpl-decorated
        methods are instantiated and registered.

        Errors are logged as warnings but never raised: a broken local plugin
        must not stop the release from being assembled.
        """
        if not local_dir.is_dir():
            return

        for py_file in sorted(local_dir.glob("*.py")):
            if py_file.name.startswith("_"):
                continue
            module_name = f"relpack_local_plugin_{py_file.stem}"
            try:
                spec = importlib.util.spec_from_file_location(module_name, py_file)
                if spec is None or spec.loader is None:
                    logger.warning("Could not create module spec for %s", py_file)
                    continue
                module = importlib.util.module_from_spec(spec)
                sys.modules[module_name] = module
                spec.loader.exec_module(module)
            except Exception:
                logger.warning("Failed to load local plugin %s", py_file, exc_info=True)
                self.warnings.append(f"Failed to load local plugin {py_file.name}")
                # Clean up partial module registration
                sys.modules.pop(module_name, None)
                continue

            for _attr_name, obj in inspect.getmembers(module, inspect.isclass):
                if obj.__module__ != module_name:
                    continue  # skip imported classes
                if not self._has_hook_impls(obj):
                    continue
                try:
                    instance = obj()
                    self.register_plugin(instance, name=module_name)
                    logger.debug(
                        "Loaded local plugin %s from %s",
                        obj.__name__,
                        py_file,
                    )
                except Exception:
                    logger.warning(
                        "Failed to instantiate plugin class %s from %s",
                        obj.__name__,
                        py_file,
                        exc_info=True,
                    )

    def _normalize_plugin_instances(self) -> None:
        """Replace registered plugin classes with instantiated objects.

        Entry-point loading may register a plugin class directly. Hook dispatch
        against class objects leaves ``self`` unbound and fails at runtime.
        """
        for plugin in list(self._pm.get_plugins()):
            if not inspect.isclass(plugin):
                continue
            if not self._has_hook_impls(plugin):
                continue

            plugin_name = self._pm.get_name(plugin) or plugin.__name__
            self._pm.unregister(plugin)

            try:
                instance = plugin()
            except Exception:
                logger.warning(
                    "Failed to instantiate entry-point plugin %s",
                    plugin_name,
                    exc_info=True,
                )
                continue

            self._pm.register(instance, name=plugin_name)
            logger.debug("Instantiated entry-point plugin: %s", plugin_name)

    @staticmethod
    def _has_hook_impls(cls: type) -> bool:
        """Check whether *cls* has any methods decorated with ``@hookimpl``.

        Pluggy's ``HookimplMarker("relpack")`` sets a ``relpack_impl``
        attribute on decorated methods.
        """
        for name in dir(cls):
            if name.startswith("_"):
                continue
            method = getattr(cls, name, None)
            if callable(method) and getattr(method, "relpack_impl", None):
                return True
        return False
