"""
Athletix Admin CLI
==================

Command-line interface for database maintenance.

Usage:
    athletix <command> [options]

Commands:
    init-db                        Create every table
    seed                           Load reference sports, categories and sponsors
    stats                          Print row counts per table

Examples:
    athletix init-db
    athletix init-db --drop
    athletix seed --database-url sqlite:///athletix.db
"""

import asyncio
from typing import Dict, Iterable, Optional

import click
from rich.console import Console
from rich.table import Table
from sqlalchemy import func, select

from athletix import __version__
from athletix.config import get_settings
from athletix.database import Base, Database
from athletix.models import EventCategory, Sponsor, Sport

console = Console()


# =============================================================================
# SEED DATA DEFINITIONS
# =============================================================================

SPORTS_DATA = [
    "Basketball", "Volleyball", "Football", "Badminton", "Swimming",
    "Running", "Table Tennis", "Tennis", "Baseball", "Esports",
]

CATEGORIES_DATA = ["Tournament", "Tryout", "Training Camp", "Friendly Match", "Fun Run"]

SPONSORS_DATA = ["City Sports Council", "Local Gym Partners", "Hydration Co."]


def _open_database(database_url: Optional[str]) -> Database:
    settings = get_settings()
    if database_url:
        settings = settings.model_copy(update={"database_url": database_url})
    return Database(settings.async_database_url)


async def _init_db(database: Database, drop: bool) -> None:
    try:
        if drop:
            await database.drop_schema()
        await database.create_schema()
    finally:
        await database.dispose()


async def _insert_missing(session, model, column, names: Iterable[str]) -> int:
    existing = set((await session.execute(select(column))).scalars().all())
    added = 0
    for name in names:
        if name not in existing:
            session.add(model(**{column.key: name}))
            added += 1
    return added


async def _seed(database: Database) -> Dict[str, int]:
    """Insert reference rows that are not present yet (idempotent)."""
    try:
        async with database.session_factory() as session:
            counts = {
                "sports": await _insert_missing(session, Sport, Sport.sport_name, SPORTS_DATA),
                "event_categories": await _insert_missing(
                    session, EventCategory, EventCategory.name, CATEGORIES_DATA
                ),
                "sponsors": await _insert_missing(session, Sponsor, Sponsor.name, SPONSORS_DATA),
            }
            await session.commit()
        return counts
    finally:
        await database.dispose()


async def _table_counts(database: Database) -> Dict[str, int]:
    try:
        async with database.session_factory() as session:
            counts = {}
            for table in Base.metadata.sorted_tables:
                result = await session.execute(select(func.count()).select_from(table))
                counts[table.name] = result.scalar_one()
            return counts
    finally:
        await database.dispose()


@click.group()
@click.version_option(version=__version__)
def cli():
    """Athletix - database maintenance for the Athletix API."""
    pass


@cli.command("init-db")
@click.option("--database-url", type=str, default=None, help="Override DATABASE_URL")
@click.option("--drop", is_flag=True, help="Drop every table first")
def cmd_init_db(database_url: Optional[str], drop: bool):
    """Create the database schema."""
    console.print("\n[bold]Athletix - Initialize Database[/bold]\n")
    if drop:
        console.print("[yellow]Dropping existing tables...[/yellow]")

    asyncio.run(_init_db(_open_database(database_url), drop))
    console.print("[green]✓ Schema created[/green]")


@cli.command("seed")
@click.option("--database-url", type=str, default=None, help="Override DATABASE_URL")
def cmd_seed(database_url: Optional[str]):
    """Load reference sports, categories and sponsors (idempotent)."""
    console.print("\n[bold]Athletix - Seed Reference Data[/bold]\n")

    counts = asyncio.run(_seed(_open_database(database_url)))
    for table, added in counts.items():
        console.print(f"  {table}: [cyan]{added}[/cyan] added")
    console.print("[green]✓ Seed complete[/green]")


@cli.command("stats")
@click.option("--database-url", type=str, default=None, help="Override DATABASE_URL")
def cmd_stats(database_url: Optional[str]):
    """Print the number of rows in every table."""
    counts = asyncio.run(_table_counts(_open_database(database_url)))

    table = Table(title="Athletix Tables")
    table.add_column("Table", style="cyan")
    table.add_column("Rows", justify="right")
    for name, count in counts.items():
        table.add_row(name, str(count))
    console.print(table)


if __name__ == "__main__":
    cli()
