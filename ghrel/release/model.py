from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

ReconcileAction = Literal["created", "reused", "replaced"]


@dataclass(frozen=True, slots=True)
class RepositoryReference:
    owner: str
    name: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.name}"

    def __str__(self) -> str:
        return self.slug


@dataclass(frozen=True, slots=True)
class ReleaseSpec:
    """Desired state of a release, as the caller asked for it."""

    tag: str
    name: str
    description: str | None
    commitish: str | None
    draft: bool
    pre_release: bool


@dataclass(frozen=True, slots=True)
class ReleaseOptions:
    """Policy applied when the release or its assets already exist."""

    overwrite_existing_assets: bool = False
    exclude_pre_releases: bool = True
    fail_if_release_exists: bool = False
    delete_existing_release: bool = False


@dataclass(frozen=True, slots=True)
class RemoteAsset:
    id: int
    repo: RepositoryReference
    name: str
    content_type: str


@dataclass(frozen=True, slots=True)
class RemoteRelease:
    """A release as GitHub reports it."""

    id: int
    repo: RepositoryReference
    tag: str
    name: str
    draft: bool
    pre_release: bool
    # Templated (RFC 6570) upload endpoint, e.g. ".../assets{?name,label}".
    upload_url: str
    assets: tuple[RemoteAsset, ...] = ()


@dataclass(frozen=True, slots=True)
class LocalAssetFile:
    path: Path

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True, slots=True)
class FileSetSpec:
    """Include/exclude patterns rooted at ``directory``."""

    directory: Path
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class CreateReleaseRequest:
    tag: str
    name: str
    pre_release: bool
    draft: bool
    description: str | None = None
    commitish: str | None = None


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    release: RemoteRelease
    action: ReconcileAction


@dataclass(frozen=True, slots=True)
class AssetSyncReport:
    uploaded: tuple[RemoteAsset, ...]
    skipped: tuple[str, ...]
    replaced: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ReleaseRunReport:
    """What a full run did; ``outcome`` is None when the run was gated off."""

    tag: str
    name: str
    pre_release: bool
    repo: RepositoryReference | None = None
    outcome: ReconcileOutcome | None = None
    assets: AssetSyncReport | None = None

    @property
    def skipped_pre_release(self) -> bool:
        return self.outcome is None
