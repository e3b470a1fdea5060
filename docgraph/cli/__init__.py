"""
Command-Line Interface

CLI commands for DocGraph operations.

Commands:
    docgraph build    - Build a knowledge graph from documents
    docgraph suggest  - Suggest entity/relationship types for a research focus
    docgraph serve    - Run the HTTP server

Usage:
    # Build with an explicit vocabulary
    docgraph build report.pdf notes.md -e PERSON -e ORGANIZATION -r WORKS_FOR

    # Let the LLM propose the vocabulary
    docgraph build report.pdf --suggest "Biotech licensing deals" -o graph.json

    # Suggestions only
    docgraph suggest "Semiconductor supply chains"
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn
from rich.table import Table

__all__ = ["main", "app"]

app = typer.Typer(
    name="docgraph",
    help="Build knowledge graphs from documents",
    no_args_is_help=True,
)
console = Console()


def _load_config(config_path: Optional[Path], **overrides):
    from docgraph.config import GraphConfig

    config = GraphConfig.from_file(config_path) if config_path else GraphConfig()
    return config.with_overrides(**{k: v for k, v in overrides.items() if v is not None})


@app.callback()
def _configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Build knowledge graphs from documents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@app.command()
def build(
    files: list[Path] = typer.Argument(
        ...,
        help="PDF, text or markdown files",
        exists=True,
        dir_okay=False,
    ),
    entity: list[str] = typer.Option(
        [],
        "--entity", "-e",
        help="Entity type to extract (repeatable)",
    ),
    relationship: list[str] = typer.Option(
        [],
        "--relationship", "-r",
        help="Relationship type to extract (repeatable)",
    ),
    suggest: Optional[str] = typer.Option(
        None,
        "--suggest", "-s",
        help="Research focus used to suggest types missing from -e/-r",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output", "-o",
        help="Write the graph as JSON to this file",
    ),
    skip_failed: bool = typer.Option(
        False,
        "--skip-failed",
        help="Skip files whose text cannot be extracted",
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency", "-c",
        min=1,
        help="Max concurrent chunk extractions",
    ),
    cost_debug: bool = typer.Option(
        False,
        "--cost-debug",
        help="Report estimated token usage and cost",
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="TOML configuration file",
        exists=True,
    ),
) -> None:
    """Build a knowledge graph from documents."""
    from docgraph.api.builder import GraphBuilder
    from docgraph.types import DocumentPayload

    config = _load_config(
        config_path,
        skip_failed_files=skip_failed or None,
        extraction_concurrency=concurrency,
        cost_debug=cost_debug or None,
    )
    builder = GraphBuilder(config)

    async def _run() -> bool:
        entity_types = list(entity)
        relationship_types = list(relationship)

        if suggest and (not entity_types or not relationship_types):
            with console.status("Suggesting vocabulary..."):
                suggestions = await builder.suggest(suggest)
            entity_types = entity_types or suggestions.entities
            relationship_types = relationship_types or suggestions.relationships
            console.print(f"[dim]Entity types:[/] {', '.join(entity_types)}")
            console.print(f"[dim]Relationship types:[/] {', '.join(relationship_types)}")

        documents = [DocumentPayload.from_path(path) for path in files]
        final = None

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Starting...", total=100)
            async for event in builder.stream(documents, entity_types, relationship_types):
                progress.update(task, completed=event.progress, description=event.message)
                if event.is_terminal:
                    final = event

        if final is None or final.status == "error" or final.data is None:
            error = final.error if final is not None else "Processing ended without a result"
            console.print(f"[red]Error:[/] {error}")
            return False

        graph = final.data
        type_counts: dict[str, int] = {}
        for node in graph.nodes:
            type_counts[node.type] = type_counts.get(node.type, 0) + 1

        table = Table(title="Nodes by type")
        table.add_column("Type", style="cyan")
        table.add_column("Count", justify="right", style="green")
        for node_type, count in sorted(type_counts.items()):
            table.add_row(node_type, str(count))
        console.print(table)

        summary = (
            f"[green]Built graph from {len(files)} file(s)[/]\n\n"
            f"  Nodes: {len(graph.nodes)}\n"
            f"  Relationships: {len(graph.relationships)}"
        )
        if output is not None:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(graph.model_dump_json(indent=2))
            summary += f"\n  Written to: {output}"
        console.print(Panel(summary, title="Processing Complete"))

        if final.cost_debug is not None:
            breakdown = final.cost_debug.breakdown
            cost_table = Table(title="Estimated LLM cost")
            cost_table.add_column("Stage", style="cyan")
            cost_table.add_column("Units", justify="right")
            cost_table.add_column("Calls", justify="right")
            cost_table.add_column("Tokens", justify="right")
            cost_table.add_column("USD", justify="right", style="green")
            for stage in breakdown.by_stage:
                cost_table.add_row(
                    stage.stage,
                    str(stage.units),
                    str(stage.calls),
                    str(stage.total_tokens),
                    f"{stage.estimated_cost_usd:.4f}",
                )
            cost_table.add_row(
                "total",
                "",
                str(breakdown.total_calls),
                str(breakdown.total_tokens),
                f"{breakdown.total_estimated_cost_usd:.4f}",
            )
            console.print(cost_table)
            for warning in final.cost_debug.warnings:
                console.print(f"[yellow]{warning}[/]")

        return True

    if not asyncio.run(_run()):
        raise typer.Exit(code=1)


@app.command("suggest")
def suggest_command(
    focus: str = typer.Argument(..., help="Research focus description"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="TOML configuration file",
        exists=True,
    ),
) -> None:
    """Suggest entity and relationship types for a research focus."""
    from docgraph.api.builder import GraphBuilder

    builder = GraphBuilder(_load_config(config_path))

    with console.status("Thinking..."):
        try:
            suggestions = builder.suggest_sync(focus)
        except ValueError as e:
            console.print(f"[red]Error:[/] {e}")
            raise typer.Exit(code=1) from e

    table = Table(title="Suggested vocabulary")
    table.add_column("Entity types", style="cyan")
    table.add_column("Relationship types", style="magenta")
    rows = max(len(suggestions.entities), len(suggestions.relationships))
    for i in range(rows):
        table.add_row(
            suggestions.entities[i] if i < len(suggestions.entities) else "",
            suggestions.relationships[i] if i < len(suggestions.relationships) else "",
        )
    console.print(table)
    if suggestions.reasoning:
        console.print(f"\n[dim]{suggestions.reasoning}[/]")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address"),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Bind port"),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        help="TOML configuration file",
        exists=True,
    ),
) -> None:
    """Run the HTTP server."""
    from docgraph.web.server import serve as run_server

    config = _load_config(config_path)
    console.print(
        f"Serving on http://{host or config.server_host}:{port or config.server_port}"
    )
    run_server(config, host=host, port=port)


def main() -> None:
    """Entry point for the CLI."""
    load_dotenv()
    app()
