from __future__ import annotations

import typer

from ghrel import __version__
from ghrel.cli.commands.create_release import create_release_cmd


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command("create-release")(create_release_cmd)


def _show_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_show_version,
        is_eager=True,
    ),
) -> None:
    """Create GitHub releases and synchronize their assets."""


def main() -> None:
    app()
