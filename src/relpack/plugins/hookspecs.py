"""Pluggy hook specifications for the release assembly lifecycle."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from relpack.domain.release import Release

hookspec = pluggy.HookspecMarker("relpack")


class RelpackHookSpec:
    """Hook specifications for the relpack plugin system."""

    @hookspec
    def before_assembly(self, release: Release) -> Release | None:
        """Called before overlays are applied.

        Return a modified copy of *release* to replace it for the remaining
        plugins and the assembly itself, or None to leave it unchanged.
        """

    @hookspec
    def after_assembly(self, release: Release) -> None:
        """Called after the release tree has been materialized."""
