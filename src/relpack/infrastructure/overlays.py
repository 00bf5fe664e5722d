"""Materialize overlay instructions into a release tree.

Destinations are rendered against the release and resolved under
``release.root``; a destination that escapes the root is rejected.
Relative sources resolve against the project root.
"""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path

from relpack.domain.release import (
    CopyOverlay,
    LinkOverlay,
    MkdirOverlay,
    Overlay,
    OverlayError,
    Release,
    TemplateOverlay,
)
from relpack.infrastructure.templates import render_template

logger = logging.getLogger(__name__)


def apply_overlays(release: Release, *, project_root: Path) -> list[str]:
    """Apply every overlay of *release* in order.

    Returns a list of human-readable actions. Raises OverlayError on the
    first instruction that cannot be applied.
    """
    root = release.root
    if not root.is_absolute():
        root = project_root / root
    root.mkdir(parents=True, exist_ok=True)

    actions: list[str] = []
    for overlay in release.profile.overlays:
        action = _apply_one(overlay, release, root=root, project_root=project_root)
        logger.debug("overlay: %s", action)
        actions.append(action)
    return actions


def _apply_one(overlay: Overlay, release: Release, *, root: Path, project_root: Path) -> str:
    if isinstance(overlay, MkdirOverlay):
        target = _target(root, render_template(overlay.path, release))
        target.mkdir(parents=True, exist_ok=True)
        return f"mkdir {_rel(target, root)}"

    source = _source(project_root, render_template(overlay.source, release))
    target = _target(root, render_template(overlay.destination, release))
    target.parent.mkdir(parents=True, exist_ok=True)

    if isinstance(overlay, LinkOverlay):
        if target.is_symlink() or target.exists():
            target.unlink()
        os.symlink(source, target)
        return f"link {_rel(target, root)} -> {source}"

    if not source.exists():
        msg = f"Overlay source does not exist: {source}"
        raise OverlayError(msg)

    if isinstance(overlay, CopyOverlay):
        if source.is_dir():
            shutil.copytree(source, target, dirs_exist_ok=True)
        else:
            shutil.copy2(source, target)
        return f"copy {source} -> {_rel(target, root)}"

    if isinstance(overlay, TemplateOverlay):
        content = render_template(source.read_text(encoding="utf-8"), release)
        target.write_text(content, encoding="utf-8")
        return f"template {source} -> {_rel(target, root)}"

    msg = f"Unsupported overlay: {overlay!r}"
    raise OverlayError(msg)


def _source(project_root: Path, rendered: str) -> Path:
    path = Path(rendered).expanduser()
    return path if path.is_absolute() else project_root / path


def _target(root: Path, rendered: str) -> Path:
    base = root.resolve()
    target = Path(os.path.normpath(base / rendered))
    if not target.is_relative_to(base):
        msg = f"Overlay destination escapes the release root: {rendered}"
        raise OverlayError(msg)
    return target


def _rel(target: Path, root: Path) -> str:
    return str(target.relative_to(root.resolve()))
