"""
Command Line Interface for Artwork Catalog.
"""

from pathlib import Path

import typer
import uvicorn
from rich import print as rprint
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import get_settings
from ..db import create_overlay_engine, upgrade_database
from ..errors import CatalogError
from ..logging_config import configure_logging
from ..migration import MigrationResult, MigrationStatus, migrate_directory
from ..storage import ObjectStoreBackend

app = typer.Typer(help="Artwork Catalog - portfolio API and storage tools")
console = Console()

_STATUS_STYLES = {
    MigrationStatus.SKIPPED: "yellow",
    MigrationStatus.UPLOADED: "green",
    MigrationStatus.PLANNED: "cyan",
    MigrationStatus.FAILED: "red",
}


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind the server to"),
    port: int = typer.Option(None, help="Port to run the API server on"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Run the catalog API server."""
    settings = get_settings()
    configure_logging(settings)
    host = host or settings.api_host
    port = port or settings.api_port
    rprint(Panel.fit(f"🖼️ Artwork Catalog on http://{host}:{port}", style="bold blue"))
    uvicorn.run(
        "artwork_catalog.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=1 if reload else settings.api_workers,
    )


@app.command("db-upgrade")
def db_upgrade(
    revision: str = typer.Option("head", help="Target Alembic revision"),
):
    """Apply database migrations."""
    settings = get_settings()
    configure_logging(settings)
    if not settings.database_enabled:
        console.print("❌ DATABASE_URL is not set")
        raise typer.Exit(1)

    engine = create_overlay_engine(
        settings.database_url, timeout_seconds=settings.db_write_timeout_seconds
    )
    try:
        upgrade_database(engine, revision)
    finally:
        engine.dispose()
    console.print(f"✅ Database upgraded to {revision}")


def _print_result(result: MigrationResult) -> None:
    style = _STATUS_STYLES[result.status]
    line = f"  [{style}]\\[{result.status.value}][/{style}] {result.artwork_id}/{result.filename}"
    if result.detail:
        line += f" ({result.detail})"
    console.print(line)


@app.command("migrate-storage")
def migrate_storage(
    source: Path = typer.Argument(..., help="Local folder with one subfolder per artwork"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Report without uploading"),
):
    """Copy a local artworks folder into the configured bucket."""
    settings = get_settings()
    if not settings.object_store_enabled:
        console.print("❌ BUCKET_NAME or BUCKET environment variable is required")
        raise typer.Exit(1)
    if not source.is_dir():
        console.print(f"❌ Source directory does not exist: {source}")
        raise typer.Exit(1)

    target = ObjectStoreBackend.from_settings(settings)
    console.print(f"Migrating from: {source}")
    console.print(f"To bucket: {target.describe()}")
    console.print()

    try:
        report = migrate_directory(
            str(source), target, dry_run=dry_run, on_result=_print_result
        )
    except CatalogError as e:
        console.print(f"❌ {e.message}")
        raise typer.Exit(1)

    table = Table(title="Migration complete", show_header=True, header_style="bold magenta")
    table.add_column("Files", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Total", str(report.total))
    if dry_run:
        table.add_row("Would upload", str(report.planned))
    else:
        table.add_row("Uploaded", str(report.uploaded))
    table.add_row("Skipped", str(report.skipped))
    table.add_row("Errors", str(report.failed))
    console.print(table)

    if report.failed:
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
