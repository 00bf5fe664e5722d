"""Domain layer — release descriptors, overlays, and dependencies."""

from relpack.domain.dependencies import Dependency, DependencyError, DependencyResolver
from relpack.domain.release import (
    CopyOverlay,
    LinkOverlay,
    MkdirOverlay,
    Overlay,
    Profile,
    Release,
    TemplateOverlay,
)

__all__ = [
    "CopyOverlay",
    "Dependency",
    "DependencyError",
    "DependencyResolver",
    "LinkOverlay",
    "MkdirOverlay",
    "Overlay",
    "Profile",
    "Release",
    "TemplateOverlay",
]
