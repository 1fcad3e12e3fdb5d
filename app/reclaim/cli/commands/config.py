"""Config command implementation.

Writes a default config.toml and shows the effective settings.
"""

import json
from enum import Enum
from typing import Annotated

import typer
from rich.table import Table

from reclaim.cli.types import require_config
from reclaim.core.config import ConfigError, ReclaimConfig, save_config
from reclaim.core.paths import ensure_config_dir, get_config_path
from reclaim.utils.formatting import console, print_error, print_success, print_warning

app = typer.Typer(
    help="Manage reclaim configuration.",
    no_args_is_help=True,
)


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config.toml with the default settings."""
    config_path = get_config_path()
    if config_path.exists() and not force:
        print_warning(f"Config already exists: {config_path}")
        console.print("[dim]Use --force to overwrite it.[/dim]")
        raise typer.Exit(code=1)

    try:
        ensure_config_dir()
        saved = save_config(ReclaimConfig(), config_path)
    except (ConfigError, RuntimeError) as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e

    print_success(f"Config written to {saved}")


@app.command()
def show(
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format: table or json.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
) -> None:
    """Show the effective configuration."""
    config = require_config()

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(config.model_dump()))
        return

    table = Table(
        title=f"Configuration ({get_config_path()})",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Setting", style="text")
    table.add_column("Value", style="info", overflow="fold")
    for key, value in config.model_dump().items():
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        table.add_row(key, str(value))
    console.print(table)
