"""
Root Typer application for the retrycache CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

app = Typer(
    name="retrycache",
    help="retrycache — retry with backoff and time-windowed caching for async calls.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        from importlib.metadata import PackageNotFoundError
        from importlib.metadata import version as pkg_version

        try:
            v = pkg_version("retrycache")
        except PackageNotFoundError:
            v = "0.1.0"
        typer.echo(f"retrycache {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """retrycache CLI — try the wrappers against a real endpoint."""


from retrycache.cli.config import app as config_app  # noqa: E402
from retrycache.cli.demo import demo  # noqa: E402

app.command("demo")(demo)
app.add_typer(config_app, name="config", help="Configuration inspection.")
