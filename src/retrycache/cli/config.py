"""
CLI: ``retrycache config`` — configuration inspection.
"""

from __future__ import annotations

from enum import Enum

import typer

from retrycache.cli.utils import console

app = typer.Typer(no_args_is_help=True)


class OutputFormat(str, Enum):
    """Output formats accepted by ``config show``."""

    TABLE = "table"
    JSON = "json"
    ENV = "env"


@app.command("show")
def show_config(
    format: OutputFormat = typer.Option(OutputFormat.TABLE, "--format", "-f", help="Output format"),
) -> None:
    """Show current configuration."""
    from retrycache.core.settings import get_settings

    settings = get_settings()

    if format is OutputFormat.JSON:
        console.print_json(settings.model_dump_json())
        return

    if format is OutputFormat.ENV:
        for key, value in sorted(settings.model_dump().items()):
            console.print(f"RETRYCACHE_{key.upper()}={value}")
        return

    from rich.table import Table

    table = Table(title="retrycache settings")
    table.add_column("Setting")
    table.add_column("Value")
    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))
    console.print(table)
    console.print(
        f"\nWorst-case backoff per miss: "
        f"{settings.to_retry_policy().worst_case_delay:g}s"
    )
