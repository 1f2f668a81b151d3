"""Release reconciliation and asset synchronization."""

from .assets import sync_assets
from .client import ClientError, FakeReleaseClient, GhReleaseClient, ReleaseClient
from .errors import ReleaseError
from .mime import DEFAULT_MIME_TYPES, resolve_content_type
from .reconcile import find_release_by_name, reconcile_release
from .repository import parse_repository, repository_id_from_scm
from .service import ReleaseRequest, build_release_spec, create_release
from .version import is_pre_release_version

__all__ = [
    "ClientError",
    "DEFAULT_MIME_TYPES",
    "FakeReleaseClient",
    "GhReleaseClient",
    "ReleaseClient",
    "ReleaseError",
    "ReleaseRequest",
    "build_release_spec",
    "create_release",
    "find_release_by_name",
    "is_pre_release_version",
    "parse_repository",
    "reconcile_release",
    "repository_id_from_scm",
    "resolve_content_type",
    "sync_assets",
]
