"""
CLI: ``topic-spine topics`` -- topic operations as a given principal.

Every command takes ``--as <token>``; the token is resolved against the
principal directory and the command runs through the secure facade.
"""

from __future__ import annotations

from pathlib import Path

import typer

from topic_spine.cli.utils import (
    console,
    handle_errors,
    not_found,
    open_session,
    output_topic,
    output_topics,
    output_tree,
)

app = typer.Typer(no_args_is_help=True)

TokenOption = typer.Option(..., "--as", "-u", help="Principal token (bearer token / principal id)")
DataDirOption = typer.Option(None, "--data-dir", "-d", help="Collection directory")
JsonOption = typer.Option(False, "--json")


# ------------------------------------------------------------------ #
# Mutations
# ------------------------------------------------------------------ #


@app.command("create")
def create_topic(
    name: str = typer.Argument(..., help="Topic name"),
    content: str = typer.Argument(..., help="Topic content"),
    parent: str | None = typer.Option(None, "--parent", "-p", help="Parent topic id"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Create a new topic (version 1)."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        topic = service.create_topic(principal, name, content, parent)
    output_topic(topic, as_json=json_out, title="Created Topic")


@app.command("update")
def update_topic(
    topic_id: str = typer.Argument(..., help="Topic id to version"),
    content: str = typer.Argument(..., help="New content"),
    name: str | None = typer.Option(None, "--name", help="New name"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Store the next version of a topic."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        topic = service.update_topic(principal, topic_id, content, name)
    if topic is None:
        not_found(f"Topic with ID {topic_id}")
    output_topic(topic, as_json=json_out, title="New Version")


@app.command("delete")
def delete_topic(
    topic_id: str = typer.Argument(..., help="Topic id"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
) -> None:
    """Delete one topic record (refused while it has children)."""
    if not force:
        if not typer.confirm(f"Delete topic {topic_id}?"):
            console.print("[dim]Aborted.[/dim]")
            raise typer.Exit(code=0)

    service, principal = open_session(token, data_dir)
    with handle_errors():
        deleted = service.delete_topic(principal, topic_id)
    if not deleted:
        not_found(f"Topic with ID {topic_id}")
    console.print(f"[green]✓[/green] Deleted topic {topic_id}")


# ------------------------------------------------------------------ #
# Reads
# ------------------------------------------------------------------ #


@app.command("get")
def get_topic(
    topic_id: str = typer.Argument(..., help="Topic id"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Show one topic record."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        topic = service.get_topic(principal, topic_id)
    if topic is None:
        not_found(f"Topic with ID {topic_id}")
    output_topic(topic, as_json=json_out, title="Topic")


@app.command("list")
def list_topics(
    roots: bool = typer.Option(False, "--roots", help="Only root-level topics"),
    parent: str | None = typer.Option(None, "--parent", "-p", help="Direct children of this topic"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """List the topics the principal may read."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        if parent is not None:
            topics = service.get_child_topics(principal, parent)
        elif roots:
            topics = service.get_root_topics(principal)
        else:
            topics = service.get_all_topics(principal)
    output_topics(topics, as_json=json_out, title="Topics")


@app.command("search")
def search_topics(
    fragment: str = typer.Argument(..., help="Case-insensitive name fragment"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Find readable topics whose name contains FRAGMENT."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        topics = service.search_topics(principal, fragment)
    output_topics(topics, as_json=json_out, title=f"Topics matching {fragment!r}")


# ------------------------------------------------------------------ #
# Versions
# ------------------------------------------------------------------ #


@app.command("versions")
def list_versions(
    root_id: str = typer.Argument(..., help="Root topic id"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """List every readable version of a topic."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        topics = service.get_all_topic_versions(principal, root_id)
    output_topics(topics, as_json=json_out, title="Versions")


@app.command("version")
def get_version(
    root_id: str = typer.Argument(..., help="Root topic id"),
    number: int = typer.Argument(..., min=1, help="Version number"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Show one specific version of a topic."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        topic = service.get_topic_version(principal, root_id, number)
    if topic is None:
        not_found(f"Version {number} of topic {root_id}")
    output_topic(topic, as_json=json_out, title=f"Version {number}")


@app.command("latest")
def get_latest(
    root_id: str = typer.Argument(..., help="Root topic id"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Show the latest version of a topic."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        topic = service.get_latest_topic_version(principal, root_id)
    if topic is None:
        not_found(f"Topic with root ID {root_id}")
    output_topic(topic, as_json=json_out, title="Latest Version")


# ------------------------------------------------------------------ #
# Graph
# ------------------------------------------------------------------ #


@app.command("tree")
def show_tree(
    topic_id: str = typer.Argument(..., help="Tree root topic id"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Show a topic and its readable descendants."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        tree = service.get_topic_tree(principal, topic_id)
    if tree is None:
        not_found(f"Topic with ID {topic_id}")
    output_tree(tree, as_json=json_out)


@app.command("path")
def find_path(
    start_id: str = typer.Argument(..., help="Start topic id"),
    end_id: str = typer.Argument(..., help="End topic id"),
    token: str = TokenOption,
    data_dir: Path | None = DataDirOption,
    json_out: bool = JsonOption,
) -> None:
    """Show a shortest parent/child path between two topics."""
    service, principal = open_session(token, data_dir)
    with handle_errors():
        path = service.find_path(principal, start_id, end_id)
    if path is None:
        not_found(f"Path from {start_id} to {end_id}")
    output_topics(path, as_json=json_out, title="Path")
