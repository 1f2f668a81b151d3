"""Release pipeline.

Runs the stages of a release in a fixed order and reports each one on the
console:

1. validate the tag and apply the pre-release gate (no remote calls when the
   release is excluded)
2. read the description file and build the immutable ``ReleaseSpec``
3. expand asset file sets
4. resolve the repository and connect
5. reconcile the release
6. upload assets

Stage functions never print; logging happens here, around them.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from ghrel.core.result import Err, Ok, Result
from ghrel.output.console import ConsoleProtocol, Style
from ghrel.release.assets import sync_assets
from ghrel.release.client import ReleaseClient
from ghrel.release.errors import ReleaseError, validation_error
from ghrel.release.files import read_description_file, resolve_file_sets
from ghrel.release.mime import mime_types_or_default
from ghrel.release.model import (
    AssetSyncReport,
    FileSetSpec,
    ReconcileOutcome,
    ReleaseOptions,
    ReleaseRunReport,
    ReleaseSpec,
    RepositoryReference,
)
from ghrel.release.reconcile import reconcile_release
from ghrel.release.repository import origin_remote_url, parse_repository
from ghrel.release.version import is_pre_release_version

ClientFactory = Callable[[], Result[ReleaseClient, ReleaseError]]


@dataclass(frozen=True, slots=True)
class ReleaseRequest:
    """Caller input after config file and command line have been merged."""

    tag: str | None
    name: str | None
    repository: str | None = None
    description: str | None = None
    description_file: Path | None = None
    commitish: str | None = None
    draft: bool = False
    pre_release: bool | None = None
    asset_sets: tuple[FileSetSpec, ...] = ()
    mime_types: Mapping[str, str] | None = None
    options: ReleaseOptions = field(default_factory=ReleaseOptions)


def build_release_spec(
    *,
    tag: str | None,
    name: str | None,
    description: str | None = None,
    description_file_text: str | None = None,
    commitish: str | None = None,
    draft: bool = False,
    pre_release: bool | None = None,
) -> Result[ReleaseSpec, ReleaseError]:
    """Build the desired release state.

    A non-empty ``description`` wins over the description file's text. When
    ``pre_release`` is None it is derived from the tag.
    """
    if not tag or not tag.strip():
        return Err(validation_error("tag must not be empty"))
    if not name or not name.strip():
        return Err(validation_error("release name must not be empty"))

    body: str | None = None
    if description:
        body = description
    elif description_file_text:
        body = description_file_text

    tag = tag.strip()
    return Ok(
        ReleaseSpec(
            tag=tag,
            name=name,
            description=body,
            commitish=commitish.strip() if commitish and commitish.strip() else None,
            draft=draft,
            pre_release=is_pre_release_version(tag) if pre_release is None else pre_release,
        )
    )


def resolve_repository(
    repository: str | None, *, project_dir: Path
) -> Result[RepositoryReference, ReleaseError]:
    """Parse the configured repository id, defaulting to the git ``origin`` remote."""
    if repository:
        return parse_repository(repository)

    url = origin_remote_url(project_dir)
    if isinstance(url, Err):
        return url
    return parse_repository(url.value)


def _report_outcome(console: ConsoleProtocol, outcome: ReconcileOutcome) -> None:
    release = outcome.release
    match outcome.action:
        case "created":
            console.success(f"created release {release.name} ({release.tag})")
        case "replaced":
            console.success(f"replaced existing release {release.name} ({release.tag})")
        case "reused":
            console.info(f"release {release.name} already exists; using the existing release")


def _report_assets(console: ConsoleProtocol, report: AssetSyncReport) -> None:
    for name in report.replaced:
        console.debug(f"deleted existing asset {name} before upload")
    for asset in report.uploaded:
        console.print(f"  uploaded {asset.name} as {asset.content_type}", Style.DIM)
    for name in report.skipped:
        console.warning(f"asset {name} already exists; skipping upload")


def create_release(
    request: ReleaseRequest,
    *,
    project_dir: Path,
    connect_client: ClientFactory,
    console: ConsoleProtocol,
) -> Result[ReleaseRunReport, ReleaseError]:
    """Create or reuse the requested release and upload its assets.

    ``connect_client`` is only called once the run is known to need GitHub,
    so an excluded pre-release never touches the network.

    Required inputs are checked before the pre-release gate. All local inputs
    (description file, asset file sets, repository id) are checked before the
    first remote call, so a missing description file fails the run even when
    the existing release would be reused.
    """
    tag = (request.tag or "").strip()
    if not tag:
        return Err(validation_error("tag must not be empty"))
    if not request.name or not request.name.strip():
        return Err(validation_error("release name must not be empty"))

    name = request.name
    pre_release = (
        is_pre_release_version(tag) if request.pre_release is None else request.pre_release
    )
    if pre_release and request.options.exclude_pre_releases:
        console.info(
            f"release '{name}' with tag '{tag}' is a pre-release and pre-releases are excluded"
        )
        return Ok(ReleaseRunReport(tag=tag, name=name, pre_release=True))

    file_text: str | None = None
    if not request.description and request.description_file is not None:
        read = read_description_file(request.description_file)
        if isinstance(read, Err):
            return read
        file_text = read.value
        console.debug(f"release body read from {request.description_file}")

    spec = build_release_spec(
        tag=tag,
        name=request.name,
        description=request.description,
        description_file_text=file_text,
        commitish=request.commitish,
        draft=request.draft,
        pre_release=pre_release,
    )
    if isinstance(spec, Err):
        return spec

    files = resolve_file_sets(request.asset_sets, base_dir=project_dir)
    if isinstance(files, Err):
        return files
    console.debug(f"{len(files.value)} asset file(s) matched")

    repo = resolve_repository(request.repository, project_dir=project_dir)
    if isinstance(repo, Err):
        return repo
    console.debug(f"repository: {repo.value.slug}")

    client = connect_client()
    if isinstance(client, Err):
        return client

    console.header(f"Release {spec.value.name} ({repo.value.slug})")
    outcome = reconcile_release(client.value, repo.value, spec.value, request.options)
    if isinstance(outcome, Err):
        return outcome
    _report_outcome(console, outcome.value)

    synced = sync_assets(
        client.value,
        outcome.value.release,
        files.value,
        mime_types=mime_types_or_default(request.mime_types),
        overwrite_existing_assets=request.options.overwrite_existing_assets,
    )
    if isinstance(synced, Err):
        return synced
    _report_assets(console, synced.value)

    if files.value:
        console.success(
            f"{len(synced.value.uploaded)} asset(s) uploaded, {len(synced.value.skipped)} skipped"
        )

    return Ok(
        ReleaseRunReport(
            tag=tag,
            name=spec.value.name,
            pre_release=spec.value.pre_release,
            repo=repo.value,
            outcome=outcome.value,
            assets=synced.value,
        )
    )
