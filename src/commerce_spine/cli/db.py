"""
CLI: ``commerce-spine db`` - database health and schema lifecycle commands.
"""

from __future__ import annotations

import typer

from commerce_spine.cli.utils import (
    load_settings,
    make_facade,
    output_health,
    output_lifecycle,
    refuse_in_production,
)

app = typer.Typer(no_args_is_help=True)

DatabaseOpt = typer.Option(None, "--database-url", "-d", help="Relational URL (overrides COMMERCE_DATABASE_URL)")
JsonOpt = typer.Option(False, "--json", help="JSON output")
YesOpt = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt")


@app.command()
def health(
    database_url: str | None = DatabaseOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Check both stores and show entity counts."""
    facade = make_facade(load_settings(database_url))
    try:
        report = facade.check_connections()
    finally:
        facade.close()
    output_health(report, as_json=json_out)


@app.command("soft-reset")
def soft_reset(
    database_url: str | None = DatabaseOpt,
    yes: bool = YesOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Delete every row and document; keep the schema."""
    settings = load_settings(database_url)
    refuse_in_production(settings, "Soft reset")
    if not yes:
        typer.confirm("Delete all rows and documents?", abort=True)
    facade = make_facade(settings)
    try:
        result = facade.soft_reset()
    finally:
        facade.close()
    output_lifecycle(result, as_json=json_out)


@app.command("hard-reset")
def hard_reset(
    database_url: str | None = DatabaseOpt,
    yes: bool = YesOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Drop every table, sequence, enum type and collection."""
    settings = load_settings(database_url)
    refuse_in_production(settings, "Hard reset")
    if not yes:
        typer.confirm("Drop the whole schema?", abort=True)
    facade = make_facade(settings)
    try:
        result = facade.hard_reset()
    finally:
        facade.close()
    output_lifecycle(result, as_json=json_out)


@app.command("recreate")
def recreate(
    database_url: str | None = DatabaseOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Create whatever tables, types and collections are missing."""
    settings = load_settings(database_url)
    refuse_in_production(settings, "Schema recreation")
    facade = make_facade(settings)
    try:
        result = facade.recreate_schema()
    finally:
        facade.close()
    output_lifecycle(result, as_json=json_out)


@app.command("seed")
def seed(
    database_url: str | None = DatabaseOpt,
    json_out: bool = JsonOpt,
) -> None:
    """Fill every empty table and collection with sample data."""
    settings = load_settings(database_url)
    refuse_in_production(settings, "Seeding")
    facade = make_facade(settings)
    try:
        result = facade.seed()
    finally:
        facade.close()
    output_lifecycle(result, as_json=json_out)
