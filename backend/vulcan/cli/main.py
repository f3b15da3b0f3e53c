"""CLI entry point for Vulcan."""

import asyncio
from pathlib import Path
from typing import Optional
from uuid import UUID

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="vulcan",
    help="Vulcan CLI - Author component security guidance from SRGs",
    add_completion=False,
)

console = Console()


def run_async(coro):
    """Helper to run async code from sync CLI."""
    return asyncio.run(coro)


guide_app = typer.Typer(help="Import and inspect Security Requirements Guides")
app.add_typer(guide_app, name="guide")

component_app = typer.Typer(help="Work with components")
app.add_typer(component_app, name="component")


@app.command("init-db")
def init_database():
    """Create any missing database tables."""
    from vulcan.database import close_db, init_db

    async def _init():
        await init_db()
        await close_db()

    run_async(_init())
    console.print("[green]✓ Database initialized[/green]")


@guide_app.command("import")
def import_guide(
    path: Path = typer.Argument(
        ...,
        help="Path to an XCCDF benchmark document",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
):
    """Import a guide and its canonical rules."""
    from vulcan.database import async_session_maker
    from vulcan.notifications import get_notifier
    from vulcan.services import GuideImportService

    async def _import():
        async with async_session_maker() as session:
            service = GuideImportService(session, get_notifier())
            with console.status("Importing guide..."):
                result = await service.import_guide(path.read_bytes(), filename=path.name)

            if not result.success:
                console.print("\n[red]✗ Import failed![/red]")
                for message in result.guide.errors.full_messages():
                    console.print(f"  {message}")
                raise typer.Exit(1)

            await session.commit()
            console.print("\n[green]✓ Guide imported successfully![/green]")
            console.print(f"  SRG: {result.guide.srg_id}")
            console.print(f"  Title: {result.guide.full_title}")
            console.print(f"  Rules: {result.rules_imported}")

    run_async(_import())


@guide_app.command("list")
def list_guides(
    latest: bool = typer.Option(False, "--latest", "-l", help="Only the newest version of each title"),
):
    """List imported guides."""
    from vulcan.database import async_session_maker
    from vulcan.repositories import CanonicalRuleRepository, GuideRepository

    async def _list():
        async with async_session_maker() as session:
            repo = GuideRepository(session)
            rule_repo = CanonicalRuleRepository(session)
            guides = await repo.latest() if latest else await repo.list_guides(limit=1000)

            if not guides:
                console.print("[yellow]No guides imported yet[/yellow]")
                return

            table = Table(title="Security Requirements Guides")
            table.add_column("SRG ID", style="cyan")
            table.add_column("Title")
            table.add_column("Version", style="green")
            table.add_column("Rules", justify="right")
            for guide in guides:
                table.add_row(
                    guide.srg_id,
                    guide.title,
                    guide.version,
                    str(await rule_repo.count_by_guide(guide.id)),
                )
            console.print(table)

    run_async(_list())


@component_app.command("export")
def export_component(
    component_id: str = typer.Argument(..., help="Component ID (UUID)"),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the CSV here instead of stdout",
    ),
):
    """Export a component's rules as CSV."""
    from vulcan.database import async_session_maker
    from vulcan.repositories import ComponentRepository
    from vulcan.services import export_component_csv

    try:
        parsed_id = UUID(component_id)
    except ValueError:
        console.print(f"[red]Invalid component ID: {component_id}[/red]")
        raise typer.Exit(1)

    async def _export():
        async with async_session_maker() as session:
            component = await ComponentRepository(session).get_by_id(parsed_id)
            if component is None:
                console.print(f"[red]Component not found: {component_id}[/red]")
                raise typer.Exit(1)
            content = await export_component_csv(session, component)

        if output:
            output.write_text(content, encoding="utf-8")
            console.print(f"[green]✓ Exported {component.rules_count} rules to {output}[/green]")
        else:
            typer.echo(content, nl=False)

    run_async(_export())


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", "--host", "-h", help="Host to bind to"),
    port: int = typer.Option(8000, "--port", "-p", help="Port to bind to"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
):
    """Start the API server."""
    import uvicorn

    console.print("[green]Starting Vulcan API...[/green]")
    console.print(f"  Host: {host}")
    console.print(f"  Port: {port}")
    console.print(f"  Docs: http://localhost:{port}/api/v1/docs")

    uvicorn.run(
        "vulcan.api.main:app",
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
