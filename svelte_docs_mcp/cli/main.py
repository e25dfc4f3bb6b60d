"""Main CLI entry point for Svelte Docs MCP."""

import asyncio
import sys
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from svelte_docs_mcp import __version__
from svelte_docs_mcp.core.logging import setup_logging
from svelte_docs_mcp.mcp_server.errors import RetrievalError
from svelte_docs_mcp.mcp_server.main import build_tools, run_server
from svelte_docs_mcp.mcp_server.tools import format_search_result
from svelte_docs_mcp.models.config import ServerSettings

console = Console()

MISSING_KEY_MESSAGE = (
    "OpenAI API key is required. Please set the OPENAI_API_KEY environment variable."
)

SAMPLE_QUERY = "What are runes in Svelte 5?"


def load_settings(**overrides) -> ServerSettings:
    """Build settings, letting command-line values win over the environment.

    Exits with status 1 if the settings are invalid or no API key is set.
    """
    fields = ServerSettings.model_fields
    # Aliased fields are passed by alias so they outrank the same env var
    overrides = {
        fields[key].alias or key: value
        for key, value in overrides.items()
        if value is not None
    }
    try:
        settings = ServerSettings(**overrides)
    except ValidationError as e:
        click.echo(f"Invalid configuration: {e}", err=True)
        sys.exit(1)

    if not settings.openai_api_key:
        click.echo(MISSING_KEY_MESSAGE, err=True)
        sys.exit(1)

    return settings


def server_options(func):
    """Options shared by every command that talks to OpenAI."""
    options = [
        click.option(
            "--api-key",
            "openai_api_key",
            help="OpenAI API key (default: $OPENAI_API_KEY)",
        ),
        click.option(
            "--docs-url",
            help="Documentation file to index (default: $CUSTOM_DOCS_URL or svelte.dev)",
        ),
        click.option("--vector-store-name", help="Name of the OpenAI vector store"),
        click.option(
            "--log-level",
            type=click.Choice(
                ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False
            ),
            help="Log level (logs always go to stderr)",
        ),
        click.option(
            "--log-file",
            type=click.Path(dir_okay=False, path_type=Path),
            help="Also write logs to this file",
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


@click.group(invoke_without_command=True)
@click.option("-v", "--version", is_flag=True, help="Show version information")
@click.pass_context
def cli(ctx, version):
    """Svelte Docs MCP - Svelte 5 documentation search for MCP clients.

    Examples:
        svelte-docs serve                          # Run the MCP server on stdio
        svelte-docs serve --no-list-sources        # Only expose the search tool
        svelte-docs check                          # Verify key, store and search
    """
    if version:
        console.print(f"Svelte Docs MCP v{__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()


@cli.command()
@server_options
@click.option(
    "--no-list-sources",
    is_flag=True,
    help="Only expose the search tool",
)
@click.option(
    "--eager-init",
    is_flag=True,
    help="Find or create the vector store before serving",
)
def serve(no_list_sources, eager_init, **options):
    """Run the MCP server over stdio.

    Standard output carries protocol frames only; all diagnostics go to
    stderr.
    """
    # Unset flags leave the environment / default value in place
    if no_list_sources:
        options["enable_list_sources"] = False
    if eager_init:
        options["eager_init"] = True
    run_server(load_settings(**options))


@cli.command()
@server_options
@click.option("--query", default=SAMPLE_QUERY, show_default=True, help="Query to run")
@click.option("--limit", default=3, show_default=True, help="Maximum results")
def check(query, limit, **options):
    """Check the API key, the vector store and search end to end.

    Creates and populates the vector store if it does not exist yet.
    """
    settings = load_settings(**options)
    setup_logging(settings.log_level, settings.log_file)

    try:
        asyncio.run(_run_check(settings, query, limit))
    except RetrievalError as e:
        console.print(f"[red]✗ {e.message}[/red]")
        sys.exit(1)


async def _run_check(settings: ServerSettings, query: str, limit: int) -> None:
    store = build_tools(settings).store

    console.print("[bold]1.[/bold] Initializing OpenAI Retrieval...")
    vector_store_id = await store.ensure_ready()
    console.print(f"[green]✓[/green] Vector store ready: {vector_store_id}")

    console.print("[bold]2.[/bold] Listing files in the vector store...")
    sources = await store.list_sources()
    table = Table(title=f"{settings.docs_title} documentation sources")
    table.add_column("ID")
    table.add_column("Filename")
    for source in sources:
        table.add_row(source.id, source.filename or "")
    console.print(table)

    console.print(f"[bold]3.[/bold] Searching for {query!r}...")
    results = await store.search(query, limit)
    console.print(f"[green]✓[/green] Found {len(results)} results")
    for index, result in enumerate(results, start=1):
        console.print(format_search_result(result, index), markup=False)
