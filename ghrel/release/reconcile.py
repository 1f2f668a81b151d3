"""Release reconciliation.

Decides, for one release name in one repository, whether the run reuses the
existing release, replaces it, creates a new one, or stops with a conflict.
"""

from __future__ import annotations

from ghrel.core.result import Err, Ok, Result
from ghrel.release.client import ClientError, ReleaseClient
from ghrel.release.errors import ReleaseError, validation_error
from ghrel.release.model import (
    CreateReleaseRequest,
    ReconcileOutcome,
    ReleaseOptions,
    ReleaseSpec,
    RemoteRelease,
    RepositoryReference,
)


def remote_error(error: ClientError, message: str) -> ReleaseError:
    """Wrap a client failure, keeping the cause and the attempted operation."""
    return ReleaseError(
        kind="remote",
        message=message,
        hint=error.detail or error.message,
        operation=error.operation,
    )


def find_release_by_name(
    client: ReleaseClient,
    repo: RepositoryReference,
    name: str,
) -> Result[RemoteRelease | None, ReleaseError]:
    """Return the first release whose name equals ``name`` exactly, or None.

    Releases are scanned in the order the remote lists them.
    """
    if not name:
        return Err(validation_error("release name must not be empty"))

    releases = client.list_releases(repo)
    if isinstance(releases, Err):
        return releases.map_err(lambda e: remote_error(e, f"failed to find release {name}"))

    for release in releases.value:
        if release.name == name:
            return Ok(release)
    return Ok(None)


def create_request(spec: ReleaseSpec) -> CreateReleaseRequest:
    return CreateReleaseRequest(
        tag=spec.tag,
        name=spec.name,
        pre_release=spec.pre_release,
        draft=spec.draft,
        description=spec.description or None,
        commitish=spec.commitish or None,
    )


def reconcile_release(
    client: ReleaseClient,
    repo: RepositoryReference,
    spec: ReleaseSpec,
    options: ReleaseOptions,
) -> Result[ReconcileOutcome, ReleaseError]:
    """Resolve the release that assets should be attached to.

    - no release named ``spec.name``: create one
    - found, ``fail_if_release_exists``: conflict, nothing is changed
    - found, ``delete_existing_release``: delete it, then create a new one
    - found otherwise: reuse it as-is

    A failed create after a successful delete is returned as a ``remote``
    error; the deleted release is not restored.
    """
    if not spec.tag:
        return Err(validation_error("tag must not be empty"))

    found = find_release_by_name(client, repo, spec.name)
    if isinstance(found, Err):
        return found

    existing = found.value
    replaced = False
    if existing is not None:
        if options.fail_if_release_exists:
            return Err(
                ReleaseError(
                    kind="conflict",
                    message=(
                        f"release {existing.name} already exists "
                        "and fail_if_release_exists is set"
                    ),
                    hint=f"tag: {existing.tag}",
                )
            )

        if not options.delete_existing_release:
            return Ok(ReconcileOutcome(release=existing, action="reused"))

        deleted = client.delete_release(existing)
        if isinstance(deleted, Err):
            message = f"failed to delete release {existing.name}"
            return deleted.map_err(lambda e: remote_error(e, message))
        replaced = True

    created = client.create_release(repo, create_request(spec))
    if isinstance(created, Err):
        message = f"failed to create new release {spec.name}"
        return created.map_err(lambda e: remote_error(e, message))

    return Ok(ReconcileOutcome(release=created.value, action="replaced" if replaced else "created"))
