"""ostensibly generate command - write a .d.ts file for a JavaScript library."""

from pathlib import Path
from typing import Any

import click

from ostensibly.config.loader import load_config
from ostensibly.core.errors import OstensiblyError
from ostensibly.core.logging import configure_logging
from ostensibly.ops import generate_declarations


@click.command()
@click.argument("entry_files", nargs=-1, type=click.Path(dir_okay=False))
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="YAML config file (default: ./ostensibly.yaml if present)",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write declarations here instead of stdout",
)
@click.option("--module-name", default=None, help="Declared module identifier")
@click.option("--default-export", default=None, help="Name bound as the module's default export")
@click.option("--external", "external_modules", multiple=True, help="Module whose imports pass through (repeatable)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def generate_command(
    ctx: click.Context,
    entry_files: tuple[str, ...],
    config_path: Path | None,
    output: Path | None,
    module_name: str | None,
    default_export: str | None,
    external_modules: tuple[str, ...],
    verbose: bool,
) -> None:
    """Generate TypeScript declarations from JSDoc-annotated JavaScript.

    ENTRY_FILES override the configured entry files.
    """
    overrides: dict[str, Any] = {}
    if entry_files:
        overrides["entry_files"] = list(entry_files)
    if module_name:
        overrides["module_name"] = module_name
    if default_export:
        overrides["default_export"] = default_export
    if external_modules:
        overrides["external_modules"] = list(external_modules)

    try:
        config = load_config(config_path, **({"generator": overrides} if overrides else {}))
        verbose = verbose or bool(ctx.obj and ctx.obj.get("verbose"))
        if verbose:
            configure_logging(level="DEBUG")
        else:
            configure_logging(config=config.logging)
        text = generate_declarations(config.generator)
    except OstensiblyError as e:
        raise click.ClickException(str(e)) from e

    if output is None:
        click.echo(text, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    click.echo(f"Wrote {output}", err=True)
