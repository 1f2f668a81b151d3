from __future__ import annotations

import os
from pathlib import Path
from typing import NoReturn

import typer

from ghrel.cli.context import build_context
from ghrel.core.config import ReleaseConfig, project_version
from ghrel.core.errors import ErrorCode
from ghrel.core.result import Err, Result
from ghrel.release.client import ReleaseClient
from ghrel.release.credentials import connect
from ghrel.release.errors import ReleaseError
from ghrel.release.model import FileSetSpec, ReleaseOptions
from ghrel.release.service import ReleaseRequest, create_release


def release_error_code(error: ReleaseError) -> ErrorCode:
    match error.kind:
        case "validation" | "not_mapped":
            return ErrorCode.USER_ERROR
        case "environment" | "config":
            return ErrorCode.ENV_ERROR
        case "conflict":
            return ErrorCode.CONFLICT
        case "remote":
            return ErrorCode.NETWORK_ERROR
        case "io":
            return ErrorCode.IO_ERROR
    return ErrorCode.USER_ERROR


def exit_release(error: ReleaseError) -> NoReturn:
    typer.echo(f"error: {error.message}", err=True)
    if error.hint:
        typer.echo(f"hint: {error.hint}", err=True)
    raise typer.Exit(code=int(release_error_code(error)))


def parse_mime_types(items: list[str]) -> dict[str, str]:
    """Parse repeated ``EXT=TYPE`` options into a table."""
    out: dict[str, str] = {}
    for item in items:
        if "=" not in item:
            exit_release(
                ReleaseError(
                    kind="validation",
                    message=f"invalid --mime-type (expected ext=type): {item}",
                )
            )
        ext, content_type = item.split("=", 1)
        ext = ext.strip().lstrip(".")
        if not ext:
            exit_release(
                ReleaseError(
                    kind="validation",
                    message=f"invalid --mime-type (expected ext=type): {item}",
                )
            )
        out[ext] = content_type.strip()
    return out


def _pick[T](cli_value: T | None, config_value: T | None, default: T) -> T:
    if cli_value is not None:
        return cli_value
    if config_value is not None:
        return config_value
    return default


def _asset_sets(
    *,
    config: ReleaseConfig,
    assets_dir: Path | None,
    include: list[str] | None,
    exclude: list[str] | None,
) -> tuple[FileSetSpec, ...]:
    # A file set given on the command line replaces the configured ones;
    # --exclude alone narrows every configured set.
    if assets_dir is not None or include:
        return (
            FileSetSpec(
                directory=assets_dir or Path("."),
                includes=tuple(include or ()),
                excludes=tuple(exclude or ()),
            ),
        )
    if exclude and not config.assets:
        exit_release(
            ReleaseError(
                kind="validation",
                message="--exclude needs --assets-dir, --include or configured [[assets]]",
            )
        )
    return tuple(
        FileSetSpec(
            directory=Path(s.directory),
            includes=s.includes,
            excludes=(*s.excludes, *(exclude or ())),
        )
        for s in config.assets
    )


def build_request(
    *,
    config: ReleaseConfig,
    project_dir: Path,
    repository: str | None,
    tag: str | None,
    name: str | None,
    description: str | None,
    description_file: Path | None,
    commitish: str | None,
    draft: bool | None,
    pre_release: bool | None,
    assets_dir: Path | None,
    include: list[str] | None,
    exclude: list[str] | None,
    mime_type: list[str] | None,
    overwrite_assets: bool | None,
    exclude_pre_releases: bool | None,
    fail_if_exists: bool | None,
    delete_existing: bool | None,
) -> ReleaseRequest:
    """Merge command line options over config values over built-in defaults."""
    desc_file: Path | None = description_file
    if desc_file is None and config.description_file is not None:
        desc_file = Path(config.description_file)
    if desc_file is not None and not desc_file.is_absolute():
        desc_file = project_dir / desc_file

    mime_types = parse_mime_types(mime_type) if mime_type else config.mime_types

    return ReleaseRequest(
        tag=tag or config.tag or project_version(project_dir),
        name=name or config.name,
        repository=repository or config.repository,
        description=description if description is not None else config.description,
        description_file=desc_file,
        commitish=commitish or config.commitish,
        draft=_pick(draft, config.draft, False),
        pre_release=pre_release if pre_release is not None else config.pre_release,
        asset_sets=_asset_sets(
            config=config, assets_dir=assets_dir, include=include, exclude=exclude
        ),
        mime_types=mime_types,
        options=ReleaseOptions(
            overwrite_existing_assets=_pick(
                overwrite_assets, config.overwrite_existing_assets, False
            ),
            exclude_pre_releases=_pick(exclude_pre_releases, config.exclude_pre_releases, True),
            fail_if_release_exists=_pick(fail_if_exists, config.fail_if_release_exists, False),
            delete_existing_release=_pick(
                delete_existing, config.delete_existing_release, False
            ),
        ),
    )


def create_release_cmd(
    repository: str | None = typer.Option(
        None,
        "--repository",
        "-r",
        help="owner/name or SCM URL (default: git remote 'origin')",
    ),
    tag: str | None = typer.Option(
        None, "--tag", "-t", help="Tag to release (default: pyproject version)"
    ),
    name: str | None = typer.Option(None, "--name", "-n", help="Release name"),
    description: str | None = typer.Option(None, "--description", help="Release body"),
    description_file: Path | None = typer.Option(
        None, "--description-file", help="File holding the release body"
    ),
    commitish: str | None = typer.Option(
        None, "--commitish", help="Branch or SHA to tag when the tag does not exist yet"
    ),
    draft: bool | None = typer.Option(None, "--draft/--no-draft", help="Create as draft"),
    pre_release: bool | None = typer.Option(
        None,
        "--pre-release/--no-pre-release",
        help="Mark as pre-release (default: derived from the tag)",
    ),
    assets_dir: Path | None = typer.Option(
        None, "--assets-dir", help="Directory holding asset files"
    ),
    include: list[str] | None = typer.Option(
        None, "--include", help="Asset include pattern (repeatable)"
    ),
    exclude: list[str] | None = typer.Option(
        None, "--exclude", help="Asset exclude pattern (repeatable)"
    ),
    mime_type: list[str] | None = typer.Option(
        None,
        "--mime-type",
        help="EXT=TYPE content type mapping (repeatable; replaces the defaults)",
    ),
    overwrite_assets: bool | None = typer.Option(
        None, "--overwrite-assets/--keep-assets", help="Replace assets with the same name"
    ),
    exclude_pre_releases: bool | None = typer.Option(
        None,
        "--exclude-pre-releases/--include-pre-releases",
        help="Skip the run for pre-releases (default: exclude)",
    ),
    fail_if_exists: bool | None = typer.Option(
        None, "--fail-if-exists/--no-fail-if-exists", help="Fail if the release exists"
    ),
    delete_existing: bool | None = typer.Option(
        None,
        "--delete-existing/--keep-existing",
        help="Delete an existing release before creating it again",
    ),
    token: str | None = typer.Option(None, "--token", help="GitHub token"),
    config_path: Path | None = typer.Option(None, "--config", help="Config file"),
    project_dir: Path | None = typer.Option(None, "--project-dir", help="Project root"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug output"),
) -> None:
    """Create (or reuse) a GitHub release and upload its assets."""
    ctx = build_context(project_dir=project_dir, config_path=config_path, verbose=verbose)
    request = build_request(
        config=ctx.config,
        project_dir=ctx.project_dir,
        repository=repository,
        tag=tag,
        name=name,
        description=description,
        description_file=description_file,
        commitish=commitish,
        draft=draft,
        pre_release=pre_release,
        assets_dir=assets_dir,
        include=include,
        exclude=exclude,
        mime_type=mime_type,
        overwrite_assets=overwrite_assets,
        exclude_pre_releases=exclude_pre_releases,
        fail_if_exists=fail_if_exists,
        delete_existing=delete_existing,
    )

    def connect_client() -> Result[ReleaseClient, ReleaseError]:
        return connect(
            workspace_root=ctx.project_dir,
            explicit_token=token,
            token_env=ctx.config.token_env,
            env=os.environ,
        )

    result = create_release(
        request,
        project_dir=ctx.project_dir,
        connect_client=connect_client,
        console=ctx.console,
    )
    if isinstance(result, Err):
        exit_release(result.error)
