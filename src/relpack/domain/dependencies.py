"""Project dependency lookup.

Dependencies are declared under ``[dependencies.<name>]`` in relpack.toml.
A declared dependency without an explicit ``path`` lives at
``<deps_dir>/<name>`` relative to the project root.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel

if TYPE_CHECKING:
    from relpack.config.models import DependencySpec

logger = logging.getLogger(__name__)


class DependencyError(Exception):
    """A declared dependency could not be loaded."""


class Dependency(BaseModel):
    """A resolved dependency and its on-disk source directory."""

    model_config = {"frozen": True}

    name: str
    source_path: Path


class DependencyResolver:
    """Resolves declared dependencies to their source directories."""

    def __init__(
        self,
        declared: Mapping[str, DependencySpec],
        *,
        project_root: Path,
        deps_dir: str = "deps",
    ) -> None:
        self._declared = dict(declared)
        self._project_root = project_root
        self._deps_dir = deps_dir

    def loaded_by_name(self, name: str) -> Dependency | None:
        """Return the dependency called *name*, or None if it is not declared.

        Raises DependencyError when the dependency is declared but its source
        directory is missing (typically: not fetched yet).
        """
        spec = self._declared.get(name)
        if spec is None:
            return None

        source = Path(spec.path) if spec.path else Path(self._deps_dir) / name
        if not source.is_absolute():
            source = self._project_root / source
        if not source.is_dir():
            msg = f"Dependency {name!r} is declared but {source} does not exist"
            raise DependencyError(msg)
        return Dependency(name=name, source_path=source)


def find_dependency(resolver: DependencyResolver, name: str) -> Dependency | None:
    """Look up *name*, mapping resolver errors to None."""
    try:
        return resolver.loaded_by_name(name)
    except DependencyError as exc:
        logger.debug("Dependency lookup for %s failed: %s", name, exc)
        return None
