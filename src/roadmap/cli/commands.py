"""CLI commands for the roadmap tracker.

Commands:
- phases: Roadmap tree with completion marks
- topics / subtopics: Browse one level of the tree
- show: Print a subtopic's markdown (optionally marking it read)
- done / undo: Toggle completion, keeping notes
- progress: Completion summary per phase
- examples: Embedded examples
- serve: Run the Web API
"""

import asyncio

import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table
from rich.tree import Tree

from roadmap.config.app_config import AppConfig, load_app_config
from roadmap.core.errors import ContentLoadError, ContentNotFound, ProgressStoreError
from roadmap.core.models import Phase
from roadmap.core.projector import project_phases
from roadmap.core.service import RoadmapService
from roadmap.core.summary import summarize

app = typer.Typer(
    name="roadmap",
    help="Learning roadmap with per-subtopic progress tracking.",
    no_args_is_help=True,
)

console = Console()


def _load_config() -> AppConfig:
    # Reload so ROADMAP_* environment overrides apply per invocation
    return load_app_config(force_reload=True)


def _build_service() -> RoadmapService:
    try:
        return RoadmapService.from_config(_load_config())
    except ProgressStoreError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)


def _fail(e: Exception) -> None:
    console.print(f"[red]✗ {e}[/red]")
    raise typer.Exit(code=1)


async def _projected(service: RoadmapService) -> list[Phase]:
    phases = service.content.load_tree()
    records = await service.store.get_all()
    return project_phases(phases, records)


def _mark(completed: bool) -> str:
    return "[green]✓[/green]" if completed else "[dim]·[/dim]"


# =============================================================================
# BROWSING
# =============================================================================


@app.command()
def phases() -> None:
    """Show the roadmap tree with completion marks."""
    service = _build_service()
    try:
        projected = asyncio.run(_projected(service))
    except (ContentLoadError, ProgressStoreError) as e:
        _fail(e)

    domain = service.content.get_domain() or "roadmap"
    root = Tree(f"[bold]{domain}[/bold]")
    for phase in projected:
        phase_node = root.add(f"[bold cyan]{phase.title}[/bold cyan] [dim]({phase.id})[/dim]")
        for topic in phase.topics:
            topic_node = phase_node.add(f"{topic.title} [dim]({topic.id})[/dim]")
            for subtopic in topic.subtopics:
                label = f"{_mark(subtopic.completed)} {subtopic.title} [dim]({subtopic.id})[/dim]"
                if subtopic.notes:
                    label += " [yellow]✎[/yellow]"
                topic_node.add(label)
    console.print(root)

    summary = summarize(projected)
    console.print(f"\n[dim]completed:[/dim] {summary.completed}/{summary.total} ({summary.ratio:.0%})")


@app.command()
def topics(
    phase_id: str = typer.Argument(..., help="Phase ID (e.g., 'a_phase')"),
) -> None:
    """List the topics of a phase."""
    service = _build_service()
    try:
        items = service.content.list_topics(phase_id)
    except (ContentLoadError, ContentNotFound) as e:
        _fail(e)

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Subtopics", justify="right")
    for topic in items:
        table.add_row(topic.id, topic.title, str(len(topic.subtopics)))
    console.print(table)


@app.command()
def subtopics(
    topic_id: str = typer.Argument(..., help="Topic ID"),
) -> None:
    """List the subtopics of a topic with their progress."""
    service = _build_service()
    try:
        items = service.content.list_subtopics(topic_id)
        records = {r.subtopic_id: r for r in asyncio.run(service.store.get_all())}
    except (ContentLoadError, ContentNotFound, ProgressStoreError) as e:
        _fail(e)

    table = Table(show_header=True, header_style="bold")
    table.add_column("", justify="center", width=3)
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Notes")
    for subtopic in items:
        record = records.get(subtopic.id)
        table.add_row(
            _mark(record.completed if record else False),
            subtopic.id,
            subtopic.title,
            (record.notes or "") if record else "",
        )
    console.print(table)


@app.command()
def show(
    subtopic_id: str = typer.Argument(..., help="Subtopic ID"),
    mark_read: bool = typer.Option(
        False, "--mark-read", "-r", help="Mark the subtopic complete after reading"
    ),
) -> None:
    """Print the markdown content of a subtopic."""
    service = _build_service()
    try:
        content = service.content.read_content(subtopic_id)
    except (ContentLoadError, ContentNotFound) as e:
        _fail(e)

    console.print(Markdown(content))

    if mark_read:
        try:
            changed = asyncio.run(service.projector.mark_read(subtopic_id))
        except ProgressStoreError as e:
            _fail(e)
        if changed:
            console.print(f"\n[green]✓ Marked complete: {subtopic_id}[/green]")


@app.command()
def examples() -> None:
    """List the examples embedded in the roadmap."""
    service = _build_service()
    try:
        items = service.content.list_examples()
    except ContentLoadError as e:
        _fail(e)

    if not items:
        console.print("[dim]No examples.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="cyan")
    table.add_column("Title")
    table.add_column("Key", style="dim")
    table.add_column("Description")
    for example in items:
        table.add_row(example.id, example.title, example.content_key, example.description)
    console.print(table)


# =============================================================================
# PROGRESS
# =============================================================================


def _toggle(subtopic_id: str, completed: bool) -> None:
    service = _build_service()
    try:
        record = asyncio.run(service.projector.toggle_completion(subtopic_id, completed))
    except (ContentLoadError, ContentNotFound, ProgressStoreError) as e:
        _fail(e)

    state = "complete" if record.completed else "incomplete"
    console.print(f"[green]✓ {subtopic_id} marked {state}[/green]")
    if record.notes:
        console.print(f"  [dim]notes:[/dim] {record.notes}")


@app.command()
def done(
    subtopic_id: str = typer.Argument(..., help="Subtopic ID"),
) -> None:
    """Mark a subtopic complete."""
    _toggle(subtopic_id, True)


@app.command()
def undo(
    subtopic_id: str = typer.Argument(..., help="Subtopic ID"),
) -> None:
    """Mark a subtopic incomplete."""
    _toggle(subtopic_id, False)


@app.command()
def progress() -> None:
    """Show completion per phase."""
    service = _build_service()
    try:
        projected = asyncio.run(_projected(service))
    except (ContentLoadError, ProgressStoreError) as e:
        _fail(e)

    summary = summarize(projected)

    table = Table(show_header=True, header_style="bold")
    table.add_column("Phase", style="cyan")
    table.add_column("Done", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("%", justify="right")
    for item in summary.phases:
        table.add_row(item.title, str(item.completed), str(item.total), f"{item.ratio:.0%}")
    table.add_row(
        "[bold]All[/bold]",
        str(summary.completed),
        str(summary.total),
        f"{summary.ratio:.0%}",
    )
    console.print(table)


# =============================================================================
# WEB
# =============================================================================


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port"),
) -> None:
    """Run the Web API with uvicorn."""
    import uvicorn

    config = _load_config()
    uvicorn.run(
        "roadmap.web.api:app",
        host=host or config.web.host,
        port=port or config.web.port,
    )


if __name__ == "__main__":
    app()
