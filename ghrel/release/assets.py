from __future__ import annotations

from collections.abc import Mapping, Sequence

from ghrel.core.result import Err, Ok, Result
from ghrel.release.client import ReleaseClient
from ghrel.release.errors import ReleaseError, validation_error
from ghrel.release.mime import DEFAULT_MIME_TYPES, resolve_content_type
from ghrel.release.model import AssetSyncReport, LocalAssetFile, RemoteAsset, RemoteRelease
from ghrel.release.reconcile import remote_error


def sync_assets(
    client: ReleaseClient,
    release: RemoteRelease,
    files: Sequence[LocalAssetFile | None],
    *,
    mime_types: Mapping[str, str] = DEFAULT_MIME_TYPES,
    overwrite_existing_assets: bool = False,
) -> Result[AssetSyncReport, ReleaseError]:
    """Upload ``files`` to ``release`` in order.

    A file whose name is already taken by an asset is skipped, unless
    ``overwrite_existing_assets`` is set, in which case every asset with
    that name is deleted before the upload. Any other problem stops the run
    at the failing file.
    """
    uploaded: list[RemoteAsset] = []
    skipped: list[str] = []
    replaced: list[str] = []

    for position, local in enumerate(files, start=1):
        if local is None:
            return Err(validation_error(f"asset file at position {position} is null"))
        if not local.path.is_file():
            return Err(
                validation_error(
                    f"asset file {local.name} does not exist",
                    hint=str(local.path),
                )
            )

        existing = client.list_assets(release)
        if isinstance(existing, Err):
            message = f"failed to list existing assets for release {release.name}"
            return existing.map_err(lambda e: remote_error(e, message))

        matches = [a for a in existing.value if a.name == local.name]
        if matches:
            if not overwrite_existing_assets:
                skipped.append(local.name)
                continue
            for asset in matches:
                deleted = client.delete_asset(asset)
                if isinstance(deleted, Err):
                    message = f"failed to delete existing asset {asset.name}"
                    return deleted.map_err(lambda e: remote_error(e, message))
            replaced.append(local.name)

        content_type = resolve_content_type(local.name, mime_types)
        if isinstance(content_type, Err):
            return content_type

        upload = client.upload_asset(release, local.path, content_type.value)
        if isinstance(upload, Err):
            return upload.map_err(lambda e: remote_error(e, f"failed to upload asset {local.name}"))
        uploaded.append(upload.value)

    return Ok(
        AssetSyncReport(
            uploaded=tuple(uploaded),
            skipped=tuple(skipped),
            replaced=tuple(replaced),
        )
    )
