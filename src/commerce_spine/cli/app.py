"""
Root Typer application for the commerce-spine CLI.
"""

from __future__ import annotations

import sys

import typer
from typer import Typer

from commerce_spine import __version__
from commerce_spine.cli.db import app as db_app
from commerce_spine.cli.serve import app as serve_app
from commerce_spine.cli.utils import load_settings
from commerce_spine.core.logging import configure_logging

app = Typer(
    name="commerce-spine",
    help="commerce-spine: data access and schema lifecycle for the shop backend.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"commerce-spine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """commerce-spine CLI: check stores, reset, rebuild and seed the schema."""
    settings = load_settings()
    # stdout is reserved for command output
    configure_logging(
        level=settings.log_level,
        json_format=settings.json_logs,
        service=settings.service_name,
        stream=sys.stderr,
    )


app.add_typer(db_app, name="db", help="Database health and schema lifecycle.")
app.add_typer(serve_app, name="serve", help="Run the operator API.")


if __name__ == "__main__":
    app()
