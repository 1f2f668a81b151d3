from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from ghrel.core.config import ReleaseConfig, load_project_config
from ghrel.core.errors import ErrorCode
from ghrel.core.result import Err
from ghrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    project_dir: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(
    *,
    project_dir: Path | None,
    config_path: Path | None,
    verbose: bool,
) -> CLIContext:
    root = (project_dir or Path.cwd()).expanduser().resolve()
    if not root.is_dir():
        typer.echo(f"error: project directory does not exist: {root}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_project_config(root, config_path)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    return CLIContext(
        project_dir=root,
        config=config_result.value,
        console=RichConsole(verbose=verbose),
    )
