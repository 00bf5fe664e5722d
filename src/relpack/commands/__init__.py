"""Subcommand modules for relpack.

Provides register_commands() which uses deferred imports to keep
``relpack --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from relpack.commands.assemble import assemble
    from relpack.commands.plugins_cmd import plugins_cmd

    cli.add_command(assemble)
    cli.add_command(plugins_cmd)
