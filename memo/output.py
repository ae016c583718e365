"""
Terminal rendering for memo results.
"""

import json
from datetime import datetime, timezone
from typing import Optional

from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from .memory.base import QueryResult
from .search.models import MemoryNode, MemoryTree

console = Console()
error_console = Console(stderr=True)

PREVIEW_CHARS = 120


def format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def _preview(content: str, width: int = PREVIEW_CHARS) -> str:
    text = " ".join(content.split())
    if len(text) <= width:
        return text
    return text[: width - 1] + "…"


def _score(score: Optional[float]) -> str:
    return f"{score:.3f}" if score is not None else "-"


def print_results(results: list[QueryResult], title: str = "Results") -> None:
    """Render a flat result list as a table."""
    table = Table(title=title, show_lines=False)
    table.add_column("Score", justify="right", style="green")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Updated", style="dim")
    table.add_column("Tags", style="magenta")
    table.add_column("Content")

    for result in results:
        table.add_row(
            _score(result.score),
            result.id[:8],
            format_timestamp(result.updated_at),
            ", ".join(result.tags),
            _preview(result.content),
        )

    console.print(table)


def _node_label(node: MemoryNode) -> str:
    memory = node.memory
    tags = f" [magenta]\\[{', '.join(memory.tags)}][/magenta]" if memory.tags else ""
    return (
        f"[green]{_score(memory.score)}[/green] [cyan]{memory.id[:8]}[/cyan] "
        f"[dim]L{node.layer}[/dim]{tags} {_preview(memory.content, 80)}"
    )


def build_rich_tree(memory_tree: MemoryTree, query: str) -> Tree:
    """Convert a MemoryTree into a rich Tree rooted at the query."""
    root = Tree(f"[bold]{query}[/bold] ({memory_tree.total_nodes} memories)")

    stack = [(root, child) for child in reversed(memory_tree.root.children)]
    while stack:
        parent_branch, node = stack.pop()
        branch = parent_branch.add(_node_label(node))
        stack.extend((branch, child) for child in reversed(node.children))

    return root


def print_tree(memory_tree: MemoryTree, query: str) -> None:
    console.print(build_rich_tree(memory_tree, query))


def print_json(payload) -> None:
    console.print_json(json.dumps(payload, ensure_ascii=False))
