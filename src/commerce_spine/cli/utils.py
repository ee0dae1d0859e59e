"""
CLI utility helpers: facade construction and output formatting.
"""

from __future__ import annotations

import json
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from commerce_spine.core.facade import DataAccessFacade
from commerce_spine.core.lifecycle import LifecycleResult
from commerce_spine.core.settings import Settings

console = Console()
err_console = Console(stderr=True)


def load_settings(database_url: str | None = None) -> Settings:
    """Settings from the environment, optionally overriding the relational URL."""
    overrides: dict[str, Any] = {}
    if database_url:
        overrides["database_url"] = database_url
    return Settings(**overrides)


def make_facade(settings: Settings) -> DataAccessFacade:
    return DataAccessFacade.from_settings(settings)


def refuse_in_production(settings: Settings, label: str) -> None:
    if settings.is_production:
        err_console.print(f"[bold red]Refused[/bold red]: {label} not allowed in production")
        raise typer.Exit(code=1)


def output_lifecycle(result: LifecycleResult, *, as_json: bool = False) -> None:
    """Render a ``LifecycleResult``; exit 1 when it failed."""
    if as_json:
        console.print_json(json.dumps(result.to_dict(detailed=True), default=str))
    elif result.success:
        console.print(f"[bold green]OK[/bold green] {result.message}")
        for label, error in result.failures.items():
            console.print(f"  [yellow]{label}[/yellow]: {error}")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {result.message}")

    if not result.success:
        raise typer.Exit(code=1)


def output_health(report: dict[str, Any], *, as_json: bool = False) -> None:
    """Render a ``check_connections`` report; exit 1 when a store is down."""
    if as_json:
        console.print_json(json.dumps(report, default=str))
    else:
        for store in ("relational", "document"):
            state = "[green]up[/green]" if report[store] else "[red]down[/red]"
            console.print(f"  [cyan]{store}[/cyan]: {state}")

        table = Table(title="Entity counts", pad_edge=False)
        table.add_column("entity")
        table.add_column("count", justify="right")
        for entity, count in report["counts"].items():
            table.add_row(entity, "-" if count is None else str(count))
        console.print(table)

        for key, error in report["errors"].items():
            err_console.print(f"  [yellow]{key}[/yellow]: {error}")

    if not (report["relational"] and report["document"]):
        raise typer.Exit(code=1)
