"""GridBase command line.

``serve`` runs the API, ``init-db`` prepares the database, ``info`` prints
the effective settings, and ``verify``/``export`` work on stored databases.
"""

import asyncio
from datetime import date
from pathlib import Path
from typing import Any, NoReturn

import click

from gridbase.core.config import Settings, get_settings
from gridbase.core.logging import configure_logging, get_logger, log_context
from gridbase.domain.entities import (
    COLUMN_ORDER_VIEW,
    COLUMN_WIDTHS_VIEW,
    HIDDEN_COLUMNS_VIEW,
    Entry,
    Schema,
)
from gridbase.domain.services.column_order import derive_display_order, derive_visible_columns
from gridbase.domain.services.csv_exporter import export_csv, export_filename

APP_IMPORT_PATH = "gridbase.infrastructure.api.app:app"


@click.group()
@click.version_option(version="0.1.0", prog_name="GridBase")
def cli() -> None:
    """GridBase: typed tables with views, filtering, sorting and CSV export."""


@cli.command()
@click.option("--host", default=None, help="Bind address; defaults to GRIDBASE_HOST.")
@click.option("--port", type=int, default=None, help="Bind port; defaults to GRIDBASE_PORT.")
@click.option(
    "--workers", type=int, default=None, help="Worker processes; defaults to GRIDBASE_WORKERS."
)
@click.option("--reload", is_flag=True, help="Restart on code changes (single worker).")
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    settings = get_settings()
    configure_logging(settings)

    options = {
        "host": host or settings.host,
        "port": port or settings.port,
        "workers": 1 if reload else (workers or settings.workers),
    }
    get_logger(__name__).info(
        "Serving GridBase", reload=reload, environment=settings.environment, **options
    )
    uvicorn.run(APP_IMPORT_PATH, reload=reload, log_level=settings.log_level.lower(), **options)


@cli.command("init-db")
@click.option("--force", is_flag=True, help="Do not ask for confirmation.")
def init_db(force: bool) -> None:
    """Create the GridBase tables.

    Meant for development; production databases are managed with alembic.
    """
    from gridbase.infrastructure.persistence.database import get_db_manager, init_database

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo("Refusing to run in production; use `alembic upgrade head`.", err=True)
        raise SystemExit(1)
    if not force:
        click.confirm(f"Create tables in {settings.database_url}?", abort=True)

    async def run() -> None:
        try:
            await init_database()
        finally:
            await get_db_manager().disconnect()

    asyncio.run(run())
    click.echo("Tables ready.")


def _info_sections(settings: Settings) -> dict[str, dict[str, Any]]:
    return {
        "Service": {
            "Environment": settings.environment,
            "Debug": settings.debug,
            "API prefix": settings.api_prefix,
            "Listen": f"{settings.host}:{settings.port} x{settings.workers}",
        },
        "Database": {
            "URL": settings.database_url,
            "Pool size": settings.db_pool_size,
            "Echo SQL": settings.db_echo,
        },
        "Tables": {
            "Timezone": settings.default_timezone,
            "Date format": settings.export_date_format,
            "Widths": f"{settings.min_column_width}-{settings.max_column_width} px",
            "Bulk limit": settings.max_bulk_items,
        },
        "Logging": {
            "Level": settings.log_level,
            "Format": settings.log_format,
        },
    }


@cli.command()
def info() -> None:
    """Print the effective settings."""
    settings = get_settings()
    click.echo(f"GridBase v{settings.app_version}")
    for title, values in _info_sections(settings).items():
        click.echo(f"\n{title}:")
        for label, value in values.items():
            click.echo(f"  {label + ':':<14}{value}")


def schema_report(schema: Schema, entries: list[Entry]) -> dict[str, Any]:
    """Summarize the stored state of one database.

    Reports the property definitions, user views, the reserved metadata
    views and entry data keys that no longer match a property.
    """
    order_view = schema.reserved_view(COLUMN_ORDER_VIEW)
    stored_order = list(order_view.order or []) if order_view is not None else []
    orphaned = sorted({key for entry in entries for key in entry.data} - set(schema.properties))

    return {
        "id": schema.id,
        "name": schema.name,
        "properties": {key: prop.type.value for key, prop in schema.properties.items()},
        "views": [view.to_dict() for view in schema.user_views],
        "has_column_order": order_view is not None,
        "column_order": stored_order,
        "order_covers": len([k for k in stored_order if k in schema.properties]),
        "unordered_keys": [k for k in schema.properties if k not in stored_order],
        "stale_order_keys": [k for k in stored_order if k not in schema.properties],
        "has_hidden_columns": schema.reserved_view(HIDDEN_COLUMNS_VIEW) is not None,
        "has_column_widths": schema.reserved_view(COLUMN_WIDTHS_VIEW) is not None,
        "display_order": derive_display_order(schema),
        "entry_count": len(entries),
        "orphaned_keys": orphaned,
    }


def format_report(report: dict[str, Any]) -> str:
    """Render a ``schema_report`` for the terminal."""
    lines = [
        f"Database: {report['name']} ({report['id']})",
        f"  Properties ({len(report['properties'])}):",
    ]
    lines += [f"    - {key}: {prop_type}" for key, prop_type in report["properties"].items()]
    lines.append(f"  Views ({len(report['views'])}):")
    lines += [f"    - {view.get('type')}: {view.get('name', '')}" for view in report["views"]]

    if report["has_column_order"]:
        lines.append(
            f"  Column order: {report['order_covers']}/{len(report['properties'])} keys covered"
        )
    else:
        lines.append("  Column order: MISSING (falling back to stored key order)")
    if report["unordered_keys"]:
        lines.append(f"    not in order: {', '.join(report['unordered_keys'])}")
    if report["stale_order_keys"]:
        lines.append(f"    stale keys: {', '.join(report['stale_order_keys'])}")
    lines.append(f"  Display order: {', '.join(report['display_order'])}")
    lines.append(f"  Entries: {report['entry_count']}")
    if report["orphaned_keys"]:
        lines.append(f"  Orphaned data keys: {', '.join(report['orphaned_keys'])}")
    return "\n".join(lines)


def write_export(
    schema: Schema,
    entries: list[Entry],
    output_dir: Path,
    on: date | None = None,
) -> Path:
    """Write a database's visible columns to ``<name>_<iso-date>.csv``."""
    settings = get_settings()
    content = export_csv(
        entries,
        schema,
        derive_visible_columns(schema),
        tz=settings.timezone,
        date_format=settings.export_date_format,
    )
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / export_filename(schema.name, on)
    path.write_text(content, encoding="utf-8")
    return path


@cli.command()
@click.option(
    "--workspace",
    type=str,
    default=None,
    help="Only check databases of this workspace",
)
def verify(workspace: str | None) -> None:
    """Check stored databases: properties, views, order channel and entries."""
    from gridbase.domain.services.schema_service import SchemaService
    from gridbase.infrastructure.persistence.database import get_db_manager
    from gridbase.infrastructure.persistence.repositories import SchemaRepository

    settings = get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)

    async def run() -> list[dict[str, Any]]:
        db = get_db_manager()
        try:
            async with db.session() as session:
                repository = SchemaRepository(session)
                models = (
                    await repository.list_by_workspace(workspace)
                    if workspace
                    else await repository.list_all()
                )
                service = SchemaService(session, settings)
                reports = []
                for model in models:
                    schema, entries = await service.get_schema_with_entries(model.id)
                    reports.append(schema_report(schema, entries))
                return reports
        finally:
            await db.disconnect()

    reports = asyncio.run(run())
    if not reports:
        click.echo("No databases found.")
        return

    for report in reports:
        click.echo(format_report(report))
        click.echo("")

    problems = [r for r in reports if not r["has_column_order"] or r["unordered_keys"]]
    click.echo(f"Checked {len(reports)} database(s); {len(problems)} with an incomplete column order.")
    logger.info("Verification finished", databases=len(reports), incomplete_order=len(problems))


@cli.command()
@click.argument("schema_id")
@click.option(
    "--output",
    "output_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=Path("."),
    help="Directory to write the CSV file into",
)
def export(schema_id: str, output_dir: Path) -> None:
    """Export a database's visible columns to CSV."""
    from gridbase.domain.exceptions import SchemaNotFoundError
    from gridbase.domain.services.schema_service import SchemaService
    from gridbase.infrastructure.persistence.database import get_db_manager

    settings = get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)

    async def load() -> tuple[Schema, list[Entry]]:
        db = get_db_manager()
        try:
            async with db.session() as session:
                return await SchemaService(session, settings).get_schema_with_entries(schema_id)
        finally:
            await db.disconnect()

    with log_context(schema_id=schema_id):
        try:
            schema, entries = asyncio.run(load())
        except SchemaNotFoundError as e:
            logger.warning("Export target not found")
            click.echo(f"Error: {e}", err=True)
            raise SystemExit(1)

        path = write_export(schema, entries, output_dir)
        click.echo(f"Exported {len(entries)} entries to {path}")
        logger.info("Database exported", entries=len(entries), path=str(path))


def main() -> NoReturn:
    """Entry point of the ``gridbase`` script and ``python -m gridbase``."""
    cli()


if __name__ == "__main__":
    main()
