import os

import click

from xtask import CARGO_KEY, __version__


@click.group()
@click.version_option(version=__version__)
@click.pass_context
def main(
    ctx: click.Context,
) -> None:
    """
    Helper program to manage hematite crates

    Can be invoked as `cargo xtask <command>`
    """
    ctx.obj = dict()
    # Cargo sets this when it runs us through an alias.
    ctx.obj[CARGO_KEY] = os.environ.get("CARGO", "cargo")


from xtask.new_crate import new

main.add_command(new)
