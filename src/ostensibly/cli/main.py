"""Ostensibly CLI - ostensibly command."""

import click

from ostensibly.cli.generate import generate_command
from ostensibly.core.logging import configure_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="ostensibly")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """Ostensibly - TypeScript declarations from JSDoc-annotated JavaScript."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(generate_command, name="generate")


if __name__ == "__main__":
    cli()
