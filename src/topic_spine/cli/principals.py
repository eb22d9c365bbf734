"""
CLI: ``topic-spine principals`` -- inspect the principal directory.
"""

from __future__ import annotations

from pathlib import Path

import typer

from topic_spine.cli.utils import console, load_directory, output_principals, resolve_settings

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_principals(
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Collection directory"),
    json_out: bool = typer.Option(False, "--json"),
) -> None:
    """List known principals and the tokens that resolve to them."""
    directory = load_directory(resolve_settings(data_dir))
    output_principals(directory.find_all(), as_json=json_out)


@app.command("whoami")
def whoami(
    token: str = typer.Argument(..., help="Token or \"Bearer <token>\""),
    data_dir: Path | None = typer.Option(None, "--data-dir", "-d", help="Collection directory"),
) -> None:
    """Show which principal a token resolves to."""
    directory = load_directory(resolve_settings(data_dir))
    principal = directory.authenticate(token)
    if principal is None:
        console.print(f"[yellow]No principal for token[/yellow] {token}")
        raise typer.Exit(code=1)
    console.print(f"[cyan]{principal.id}[/cyan] {principal.name} ({principal.role_name})")
