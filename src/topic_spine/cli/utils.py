"""
CLI utility helpers -- service wiring, principal resolution, output and error mapping.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from topic_spine.core.errors import (
    DomainConflictError,
    PermissionDeniedError,
    TopicNotFoundError,
    TopicSpineError,
)
from topic_spine.core.settings import TopicSpineSettings, get_settings
from topic_spine.topics import (
    Principal,
    PrincipalDirectory,
    SecureTopicService,
    Topic,
    TopicTree,
    build_secure_service,
)

console = Console()
err_console = Console(stderr=True)

EXIT_ERROR = 1
EXIT_NOT_FOUND = 2
EXIT_PERMISSION_DENIED = 3
EXIT_CONFLICT = 4


# ── Wiring ───────────────────────────────────────────────────────────────


def resolve_settings(data_dir: Path | None) -> TopicSpineSettings:
    settings = get_settings()
    if data_dir is not None:
        settings = settings.model_copy(update={"data_dir": data_dir})
    return settings


def load_directory(settings: TopicSpineSettings) -> PrincipalDirectory:
    with handle_errors():
        return PrincipalDirectory.from_file(settings.principals_path)


def open_session(token: str, data_dir: Path | None = None) -> tuple[SecureTopicService, Principal]:
    """Build the secure facade and resolve ``token`` to the acting principal."""
    settings = resolve_settings(data_dir)
    principal = load_directory(settings).authenticate(token)
    if principal is None:
        err_console.print(f"[bold red]Invalid token:[/bold red] {token}")
        raise typer.Exit(code=EXIT_ERROR)
    service = build_secure_service(
        settings.data_dir,
        settings.topics_collection,
        indent=settings.json_indent,
    )
    return service, principal


@contextmanager
def handle_errors() -> Iterator[None]:
    """Map Topic Spine errors onto CLI exit codes."""
    try:
        yield
    except PermissionDeniedError as e:
        err_console.print(f"[bold red]Permission denied:[/bold red] {e.message}")
        raise typer.Exit(code=EXIT_PERMISSION_DENIED) from e
    except TopicNotFoundError as e:
        err_console.print(f"[bold red]Not found:[/bold red] {e.message}")
        raise typer.Exit(code=EXIT_NOT_FOUND) from e
    except DomainConflictError as e:
        err_console.print(f"[bold red]Conflict:[/bold red] {e.message}")
        raise typer.Exit(code=EXIT_CONFLICT) from e
    except TopicSpineError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {e.message}")
        raise typer.Exit(code=EXIT_ERROR) from e


def not_found(what: str) -> None:
    err_console.print(f"[bold red]Not found:[/bold red] {what}")
    raise typer.Exit(code=EXIT_NOT_FOUND)


# ── Output helpers ───────────────────────────────────────────────────────


def output_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def output_topic(topic: Topic, *, as_json: bool = False, title: str = "") -> None:
    if as_json:
        output_json(topic.to_dict())
        return
    if title:
        console.print(f"[bold]{title}[/bold]")
    for key, value in topic.to_dict().items():
        console.print(f"  [cyan]{key}[/cyan]: {value}")


def output_topics(topics: list[Topic], *, as_json: bool = False, title: str = "") -> None:
    if as_json:
        output_json([t.to_dict() for t in topics])
        return
    if not topics:
        console.print("[dim]No topics.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for column in ("id", "name", "version", "parent", "root"):
        table.add_column(column, overflow="fold")
    for topic in topics:
        table.add_row(
            topic.id,
            topic.name,
            str(topic.version),
            topic.parent_topic_id or "-",
            topic.root_topic_id,
        )
    console.print(table)


def output_tree(tree: TopicTree, *, as_json: bool = False) -> None:
    if as_json:
        output_json(tree.to_dict())
        return
    console.print(_rich_tree(tree))


def _label(topic: Topic) -> str:
    return f"[bold]{topic.name}[/bold] [dim]v{topic.version} {topic.id}[/dim]"


def _rich_tree(tree: TopicTree, parent: Tree | None = None) -> Tree:
    node = Tree(_label(tree.topic)) if parent is None else parent.add(_label(tree.topic))
    for child in tree.children:
        _rich_tree(child, node)
    return node


def output_principals(principals: list[Principal], *, as_json: bool = False) -> None:
    if as_json:
        output_json([p.to_dict() for p in principals])
        return
    table = Table(title="Principals", pad_edge=False)
    for column in ("id", "name", "role", "email"):
        table.add_column(column)
    for p in principals:
        table.add_row(p.id, p.name, p.role_name, p.email or "-")
    console.print(table)
