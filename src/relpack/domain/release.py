"""Release descriptors and overlay instructions.

A Release is owned by the assembly pipeline and is never mutated in place:
plugins derive modified copies with ``model_copy``. Overlay destinations are
templates rendered at materialization time, so they may embed tokens such as
``<%= release.version %>``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal

from pydantic import BaseModel, Field

VERSION_TOKEN = "<%= release.version %>"


class OverlayError(Exception):
    """An overlay instruction could not be rendered or applied."""


class CopyOverlay(BaseModel):
    """Copy a file or directory into the release tree."""

    model_config = {"frozen": True}

    op: Literal["copy"] = "copy"
    source: str
    destination: str


class LinkOverlay(BaseModel):
    """Symlink *destination* inside the release tree to *source*."""

    model_config = {"frozen": True}

    op: Literal["link"] = "link"
    source: str
    destination: str


class MkdirOverlay(BaseModel):
    """Create a directory inside the release tree."""

    model_config = {"frozen": True}

    op: Literal["mkdir"] = "mkdir"
    path: str


class TemplateOverlay(BaseModel):
    """Render *source* as a template and write it to *destination*."""

    model_config = {"frozen": True}

    op: Literal["template"] = "template"
    source: str
    destination: str


Overlay = Annotated[
    CopyOverlay | LinkOverlay | MkdirOverlay | TemplateOverlay,
    Field(discriminator="op"),
]


class Profile(BaseModel):
    """Per-release build profile. Overlays are applied in order."""

    model_config = {"frozen": True}

    overlays: list[Overlay] = Field(default_factory=list)

    def with_overlays(self, *extra: Overlay) -> Profile:
        """Return a copy with *extra* appended after the existing overlays."""
        return self.model_copy(update={"overlays": [*self.overlays, *extra]})


class Release(BaseModel):
    """A versioned release to be assembled under ``output_dir/name``."""

    model_config = {"frozen": True}

    name: str
    version: str
    output_dir: Path = Path("_build") / "rel"
    profile: Profile = Field(default_factory=Profile)

    @property
    def root(self) -> Path:
        """Directory the release tree is materialized into."""
        return self.output_dir / self.name

    def with_overlays(self, *extra: Overlay) -> Release:
        """Return a copy whose profile has *extra* overlays appended."""
        return self.model_copy(update={"profile": self.profile.with_overlays(*extra)})
