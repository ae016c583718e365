"""
memo command line interface.

    memo embed "Rust lifetimes are checked at compile time" -t rust,memory
    memo search "borrow checker" -n 5
    memo search "borrow checker" --tree --after 2025-01-01
"""

import asyncio
from typing import Awaitable, Callable, List, Optional, TypeVar

import typer

from .config import config
from .errors import ConfigError, MemoError, SearchError
from .memory.memory_manager import MemoryManager, create_memory_manager
from .output import console, error_console, print_json, print_results, print_tree
from .search.time_filter import build_time_range

T = TypeVar("T")

app = typer.Typer(
    name="memo",
    help="Vector-based memo system with semantic search",
    no_args_is_help=True,
)


def _split_tags(tags: Optional[str]) -> Optional[list[str]]:
    if tags is None:
        return None
    return [t.strip() for t in tags.split(",") if t.strip()]


async def _with_manager(operation: Callable[[MemoryManager], Awaitable[T]]) -> T:
    """Build a MemoryManager from config, run one operation, always close it."""
    errors = config.validate()
    if errors:
        raise ConfigError("; ".join(errors))

    manager = await create_memory_manager(
        store_type=config.storage.store_type,
        embedding_provider=config.embedding.provider,
        embedding_api_key=config.embedding.api_key,
        embedding_model=config.embedding.model,
        embedding_base_url=config.embedding.base_url,
        embedding_dimensions=config.embedding.dimensions,
        rerank_provider=config.rerank.provider,
        rerank_api_key=config.rerank.api_key,
        rerank_model=config.rerank.model,
        rerank_base_url=config.rerank.base_url,
        rerank_timeout=config.rerank.timeout,
        postgres_url=config.storage.postgres_url,
        chroma_path=config.storage.chroma_path,
        search_config=config.search_config(),
    )
    try:
        return await operation(manager)
    finally:
        await manager.close()


def _run(operation: Callable[[MemoryManager], Awaitable[T]], verbose: bool = False) -> T:
    config.setup_logging("DEBUG" if verbose else None)
    try:
        return asyncio.run(_with_manager(operation))
    except KeyboardInterrupt:
        error_console.print("\nOperation cancelled by user")
        raise typer.Exit(130)
    except SearchError as e:
        error_console.print(f"[red]Error ({e.stage}):[/red] {e}")
        raise typer.Exit(1)
    except (MemoError, ValueError, KeyError) as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def search(
    query: str = typer.Argument(help="Text to search for"),
    limit: int = typer.Option(None, "--limit", "-n", help="Maximum results to return"),
    threshold: float = typer.Option(None, "--threshold", "-t", help="Layer-1 similarity threshold"),
    after: str = typer.Option(None, "--after", help="Only memories updated at/after (YYYY-MM-DD [HH:MM])"),
    before: str = typer.Option(None, "--before", help="Only memories updated at/before (YYYY-MM-DD [HH:MM])"),
    tree: bool = typer.Option(False, "--tree", help="Show how memories were discovered"),
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Search memories by semantic similarity."""
    try:
        time_range = build_time_range(after, before)
        search_config = config.search_config(first_threshold=threshold)
        search_config.validate()
    except ConfigError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(2)

    result_limit = limit or config.search.limit

    if tree:
        memory_tree = _run(
            lambda m: m.search_tree(query, time_range=time_range, config=search_config),
            verbose,
        )
        if as_json:
            print_json(memory_tree.to_dict())
        elif memory_tree.total_nodes == 0:
            console.print(f"[yellow]No results found above threshold {search_config.first_threshold:.2f}[/yellow]")
        else:
            print_tree(memory_tree, query)
        return

    results = _run(
        lambda m: m.search(query, limit=result_limit, time_range=time_range, config=search_config),
        verbose,
    )
    if as_json:
        print_json([r.to_dict() for r in results])
    elif not results:
        console.print(f"[yellow]No results found above threshold {search_config.first_threshold:.2f}[/yellow]")
        console.print("Try lowering the threshold with -t/--threshold")
    else:
        print_results(results, title=f"Search: {query}")


@app.command()
def embed(
    text: str = typer.Argument(help="Text to store as a memory"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags, e.g. rust,cli"),
    force: bool = typer.Option(False, "--force", "-f", help="Store even if similar memories exist"),
    dup_threshold: float = typer.Option(None, "--dup-threshold", help="Duplicate similarity threshold"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    """Embed text into the memory store."""
    threshold = dup_threshold if dup_threshold is not None else config.search.duplicate_threshold
    result = _run(
        lambda m: m.add_memory(
            text, tags=_split_tags(tags), force=force, duplicate_threshold=threshold
        ),
        verbose,
    )

    if result.stored:
        console.print(f"[green]Stored[/green] {result.memory.id}")
    else:
        console.print("[yellow]Similar memories already exist; use --force to store anyway[/yellow]")
        print_results(result.duplicates, title="Similar memories")


@app.command("list")
def list_memories(
    as_json: bool = typer.Option(False, "--json", help="Print JSON instead of a table"),
):
    """List all memories."""
    memories = _run(lambda m: m.list_memories())
    if as_json:
        print_json([m.to_dict() for m in memories])
    elif not memories:
        console.print("[yellow]No memories stored yet[/yellow]")
    else:
        print_results(memories, title=f"Memories ({len(memories)})")


@app.command()
def update(
    memory_id: str = typer.Argument(help="Memory ID to update"),
    content: str = typer.Option(..., "--content", "-c", help="New content"),
    tags: str = typer.Option(None, "--tags", "-t", help="New comma-separated tags (replaces existing)"),
):
    """Update an existing memory."""
    memory = _run(lambda m: m.update_memory(memory_id, content, tags=_split_tags(tags)))
    console.print(f"[green]Updated[/green] {memory.id}")


@app.command()
def merge(
    memory_ids: List[str] = typer.Argument(help="Memory IDs to merge"),
    content: str = typer.Option(..., "--content", "-c", help="Content of the merged memory"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags (default: union)"),
):
    """Merge multiple memories into one."""
    memory = _run(lambda m: m.merge_memories(memory_ids, content, tags=_split_tags(tags)))
    console.print(f"[green]Merged[/green] {len(memory_ids)} memories into {memory.id}")


@app.command()
def delete(
    memory_id: str = typer.Argument(help="Memory ID to delete"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete a memory by ID."""
    if not force:
        typer.confirm(f"Delete memory {memory_id}?", abort=True)

    deleted = _run(lambda m: m.delete_memory(memory_id))
    if deleted:
        console.print(f"[green]Deleted[/green] {memory_id}")
    else:
        error_console.print(f"[red]Memory not found:[/red] {memory_id}")
        raise typer.Exit(1)


@app.command()
def clear(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
):
    """Delete ALL memories."""
    if not force:
        typer.confirm("This deletes every stored memory. Continue?", abort=True)

    removed = _run(lambda m: m.clear())
    console.print(f"[green]Cleared[/green] {removed} memories")


def main():
    """Entry point for the application."""
    app()


if __name__ == "__main__":
    main()
