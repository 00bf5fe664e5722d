"""Command: list plugins taking part in assembly."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from relpack.commands._base import RelCommand

if TYPE_CHECKING:
    from relpack.commands._context import AppContext


@click.command(
    "plugins",
    cls=RelCommand,
    examples="""\
  relpack plugins
  relpack --json plugins""",
)
@click.pass_obj
def plugins_cmd(app: AppContext) -> None:
    """List discovered and built-in plugins."""
    from relpack.services.assemble import AssembleService

    app.emit(AssembleService(app.settings).list_plugins())
