"""Asset content types.

GitHub stores the ``Content-Type`` sent with each upload and serves the asset
back with it, so the type is chosen from a fixed extension table rather than
guessed.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

from ghrel.core.result import Err, Ok, Result
from ghrel.release.errors import ReleaseError, not_mapped_error, validation_error

DEFAULT_MIME_TYPES: Mapping[str, str] = MappingProxyType(
    {
        "zip": "application/zip",
        # .tar.gz resolves through its final "gz" segment.
        "tgz": "application/gzip",
        "gz": "application/gzip",
        "jar": "application/java-archive",
    }
)


def mime_types_or_default(custom: Mapping[str, str] | None) -> Mapping[str, str]:
    """Return the table to use for a run.

    A custom table replaces the defaults entirely; the two are never merged.
    """
    if custom is None:
        return DEFAULT_MIME_TYPES
    return MappingProxyType(dict(custom))


def file_extension(file_name: str) -> Result[str, ReleaseError]:
    if not file_name:
        return Err(validation_error("asset file name was empty"))

    _, dot, extension = file_name.rpartition(".")
    if not dot:
        return Err(
            not_mapped_error(
                f"file {file_name} has no extension so it cannot be mapped to a MIME type"
            )
        )
    if not extension:
        return Err(
            not_mapped_error(
                f"unable to determine content type for asset file {file_name} "
                "due to an empty file extension"
            )
        )
    return Ok(extension)


def resolve_content_type(
    file_name: str, mime_types: Mapping[str, str] = DEFAULT_MIME_TYPES
) -> Result[str, ReleaseError]:
    """Map ``file_name`` to a content type via its last dot-separated segment.

    Lookups are exact (case-sensitive) on the extension.

    Returns:
        Ok(content type), or Err with kind ``validation`` for an empty name and
        ``not_mapped`` when the extension is missing, empty, unknown or mapped
        to an empty type.
    """
    ext = file_extension(file_name)
    if isinstance(ext, Err):
        return ext

    extension = ext.value
    if extension not in mime_types:
        return Err(
            not_mapped_error(
                f"missing MIME type mapping for file extension {extension}",
                hint="Add it to [mime_types] or pass --mime-type EXT=TYPE",
            )
        )

    content_type = mime_types[extension]
    if not content_type:
        return Err(not_mapped_error(f"MIME type map mapped extension {extension} to an empty type"))
    return Ok(content_type)
