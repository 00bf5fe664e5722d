"""Command: assemble the release tree."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relpack.commands._base import RelCommand

if TYPE_CHECKING:
    from relpack.commands._context import AppContext


@click.command(
    cls=RelCommand,
    examples="""\
  relpack assemble
  relpack -v assemble
  relpack --json assemble
  RELPACK_TOOL_HOME=~/.mix relpack assemble""",
)
@click.pass_obj
def assemble(app: AppContext) -> None:
    """Run plugins and materialize the release overlays."""
    from relpack.services.assemble import AssembleService

    app.emit(AssembleService(app.settings).assemble())
