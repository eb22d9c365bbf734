"""
Root Typer application for the Topic Spine CLI.
"""

from __future__ import annotations

import typer
from typer import Typer

from topic_spine.core.logging import configure_logging
from topic_spine.core.settings import get_settings

app = Typer(
    name="topic-spine",
    help="topic-spine: versioned topic hierarchy with role-based access.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from topic_spine import __version__

        typer.echo(f"topic-spine {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Override TOPIC_SPINE_LOG_LEVEL."
    ),
) -> None:
    """topic-spine CLI: manage versioned topics as a given principal."""
    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.json_logs,
        service=settings.service_name,
    )


# ── Sub-command registration ─────────────────────────────────────────────

from topic_spine.cli.principals import app as principals_app  # noqa: E402
from topic_spine.cli.topics import app as topics_app  # noqa: E402

app.add_typer(topics_app, name="topics", help="Topic operations (run as a principal).")
app.add_typer(principals_app, name="principals", help="Principal directory.")


if __name__ == "__main__":
    app()
