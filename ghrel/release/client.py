"""Remote release client.

This module provides:
- ReleaseClient: Protocol for the six GitHub operations a run needs
- GhReleaseClient: Real implementation driving ``gh api``
- FakeReleaseClient: In-memory implementation for tests and dry wiring

The reconciliation and asset logic only ever sees ``ReleaseClient``.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from time import sleep
from typing import Protocol, runtime_checkable
from urllib.parse import quote

from ghrel.core.result import Err, Ok, Result
from ghrel.core.structured import as_obj_list, as_str_dict, get_bool, get_int, get_raw_str, get_str
from ghrel.platform.process import ProcessError
from ghrel.platform.process import run as run_process
from ghrel.release.model import (
    CreateReleaseRequest,
    RemoteAsset,
    RemoteRelease,
    RepositoryReference,
)
from ghrel.release.timeouts import (
    GH_PAGE_SIZE,
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
    GH_UPLOAD_TIMEOUT_SECONDS,
)

__all__ = [
    "ClientError",
    "ReleaseClient",
    "GhReleaseClient",
    "FakeReleaseClient",
]


@dataclass(frozen=True, slots=True)
class ClientError:
    """Failure of a single remote call.

    Attributes:
        operation: Client method that failed (e.g. ``upload_asset``)
        message: Human-readable summary
        detail: Underlying cause (gh stderr, HTTP status text, ...)
    """

    operation: str
    message: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}: {self.detail}"
        return self.message


@runtime_checkable
class ReleaseClient(Protocol):
    """Capability to read and mutate releases of a GitHub repository."""

    def list_releases(self, repo: RepositoryReference) -> Result[list[RemoteRelease], ClientError]:
        """Return all releases, in the order GitHub lists them (newest first)."""
        ...

    def create_release(
        self, repo: RepositoryReference, request: CreateReleaseRequest
    ) -> Result[RemoteRelease, ClientError]: ...

    def delete_release(self, release: RemoteRelease) -> Result[None, ClientError]: ...

    def list_assets(self, release: RemoteRelease) -> Result[list[RemoteAsset], ClientError]: ...

    def upload_asset(
        self, release: RemoteRelease, path: Path, content_type: str
    ) -> Result[RemoteAsset, ClientError]: ...

    def delete_asset(self, asset: RemoteAsset) -> Result[None, ClientError]: ...


# -----------------------------------------------------------------------------
# gh-backed client
# -----------------------------------------------------------------------------


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "tls handshake timeout",
        "network is unreachable",
        "http 429",
        "http 500",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def _parse_asset(repo: RepositoryReference, obj: object) -> RemoteAsset | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    asset_id = get_int(data, "id")
    name = get_str(data, "name")
    if asset_id is None or name is None:
        return None
    return RemoteAsset(
        id=asset_id,
        repo=repo,
        name=name,
        content_type=get_str(data, "content_type") or "",
    )


def _parse_release(repo: RepositoryReference, obj: object) -> RemoteRelease | None:
    data = as_str_dict(obj)
    if data is None:
        return None
    release_id = get_int(data, "id")
    tag = get_str(data, "tag_name")
    if release_id is None or tag is None:
        return None

    assets: list[RemoteAsset] = []
    for item in as_obj_list(data.get("assets")) or []:
        asset = _parse_asset(repo, item)
        if asset is not None:
            assets.append(asset)

    return RemoteRelease(
        id=release_id,
        repo=repo,
        tag=tag,
        # Unnamed releases report null; they never match a requested name.
        name=get_raw_str(data, "name") or "",
        draft=get_bool(data, "draft") or False,
        pre_release=get_bool(data, "prerelease") or False,
        upload_url=get_str(data, "upload_url") or "",
        assets=tuple(assets),
    )


class GhReleaseClient:
    """ReleaseClient on top of the GitHub CLI.

    ``gh`` handles authentication and HTTP. Reads are retried on transient
    failures; mutations run exactly once.

    Args:
        workspace_root: Working directory for ``gh`` invocations
        token: Token exported as ``GH_TOKEN``; None uses gh's stored login
        timeout: Seconds allowed per API call
        upload_timeout: Seconds allowed per asset upload
        retry_attempts: Attempts for idempotent reads
    """

    def __init__(
        self,
        *,
        workspace_root: Path,
        token: str | None = None,
        timeout: float = GH_TIMEOUT_SECONDS,
        upload_timeout: float = GH_UPLOAD_TIMEOUT_SECONDS,
        retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
    ) -> None:
        self.workspace_root = workspace_root
        self._token = token
        self.timeout = timeout
        self.upload_timeout = upload_timeout
        self.retry_attempts = retry_attempts

    def _env(self) -> dict[str, str] | None:
        if not self._token:
            return None
        env = dict(os.environ)
        env["GH_TOKEN"] = self._token
        return env

    def _gh(
        self,
        args: list[str],
        *,
        operation: str,
        message: str,
        timeout: float | None = None,
    ) -> Result[str, ClientError]:
        result = run_process(
            ["gh", "api", *args],
            cwd=self.workspace_root,
            env=self._env(),
            timeout=timeout or self.timeout,
        )
        if isinstance(result, Err):
            return Err(
                ClientError(operation=operation, message=message, detail=result.error.detail)
            )
        return result

    def _gh_read(
        self, args: list[str], *, operation: str, message: str
    ) -> Result[str, ClientError]:
        attempts = max(1, self.retry_attempts)
        for attempt in range(attempts):
            result = run_process(
                ["gh", "api", *args],
                cwd=self.workspace_root,
                env=self._env(),
                timeout=self.timeout,
            )
            if isinstance(result, Ok):
                return result

            error = result.error
            if attempt < attempts - 1 and _is_transient_gh_error(error):
                sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
                continue

            return Err(ClientError(operation=operation, message=message, detail=error.detail))

        return Err(ClientError(operation=operation, message=message))

    @staticmethod
    def _decode(raw: str, *, operation: str) -> Result[object, ClientError]:
        try:
            obj: object = json.loads(raw)
        except json.JSONDecodeError as e:
            return Err(
                ClientError(
                    operation=operation, message="gh api returned invalid JSON", detail=str(e)
                )
            )
        return Ok(obj)

    def _list_pages(
        self, endpoint: str, *, operation: str, message: str
    ) -> Result[list[object], ClientError]:
        items: list[object] = []
        page = 1
        while True:
            raw = self._gh_read(
                [f"{endpoint}?per_page={GH_PAGE_SIZE}&page={page}"],
                operation=operation,
                message=message,
            )
            if isinstance(raw, Err):
                return raw

            decoded = self._decode(raw.value, operation=operation)
            if isinstance(decoded, Err):
                return decoded

            batch = as_obj_list(decoded.value)
            if batch is None:
                return Err(
                    ClientError(operation=operation, message=f"unexpected payload: {endpoint}")
                )

            items.extend(batch)
            if len(batch) < GH_PAGE_SIZE:
                return Ok(items)
            page += 1

    def list_releases(self, repo: RepositoryReference) -> Result[list[RemoteRelease], ClientError]:
        raw = self._list_pages(
            f"repos/{repo.slug}/releases",
            operation="list_releases",
            message=f"failed to list releases of {repo.slug}",
        )
        if isinstance(raw, Err):
            return raw

        out: list[RemoteRelease] = []
        for item in raw.value:
            release = _parse_release(repo, item)
            if release is not None:
                out.append(release)
        return Ok(out)

    def create_release(
        self, repo: RepositoryReference, request: CreateReleaseRequest
    ) -> Result[RemoteRelease, ClientError]:
        args = [
            "--method",
            "POST",
            f"repos/{repo.slug}/releases",
            "-f",
            f"tag_name={request.tag}",
            "-f",
            f"name={request.name}",
            "-F",
            f"draft={str(request.draft).lower()}",
            "-F",
            f"prerelease={str(request.pre_release).lower()}",
        ]
        if request.description:
            args += ["-f", f"body={request.description}"]
        if request.commitish:
            args += ["-f", f"target_commitish={request.commitish}"]

        operation = "create_release"
        raw = self._gh(
            args, operation=operation, message=f"failed to create release {request.name}"
        )
        if isinstance(raw, Err):
            return raw

        decoded = self._decode(raw.value, operation=operation)
        if isinstance(decoded, Err):
            return decoded

        release = _parse_release(repo, decoded.value)
        if release is None:
            return Err(ClientError(operation=operation, message="unexpected release payload"))
        return Ok(release)

    def delete_release(self, release: RemoteRelease) -> Result[None, ClientError]:
        raw = self._gh(
            ["--method", "DELETE", f"repos/{release.repo.slug}/releases/{release.id}"],
            operation="delete_release",
            message=f"failed to delete release {release.name}",
        )
        if isinstance(raw, Err):
            return raw
        return Ok(None)

    def list_assets(self, release: RemoteRelease) -> Result[list[RemoteAsset], ClientError]:
        raw = self._list_pages(
            f"repos/{release.repo.slug}/releases/{release.id}/assets",
            operation="list_assets",
            message=f"failed to list assets of release {release.name}",
        )
        if isinstance(raw, Err):
            return raw

        out: list[RemoteAsset] = []
        for item in raw.value:
            asset = _parse_asset(release.repo, item)
            if asset is not None:
                out.append(asset)
        return Ok(out)

    def upload_asset(
        self, release: RemoteRelease, path: Path, content_type: str
    ) -> Result[RemoteAsset, ClientError]:
        operation = "upload_asset"
        if not release.upload_url:
            return Err(
                ClientError(
                    operation=operation, message=f"release {release.name} has no upload URL"
                )
            )

        # Drop the RFC 6570 template suffix ("{?name,label}").
        base = release.upload_url.split("{", 1)[0]
        url = f"{base}?name={quote(path.name)}"
        raw = self._gh(
            [
                "--method",
                "POST",
                "-H",
                f"Content-Type: {content_type}",
                "--input",
                str(path),
                url,
            ],
            operation=operation,
            message=f"failed to upload asset {path.name}",
            timeout=self.upload_timeout,
        )
        if isinstance(raw, Err):
            return raw

        decoded = self._decode(raw.value, operation=operation)
        if isinstance(decoded, Err):
            return decoded

        asset = _parse_asset(release.repo, decoded.value)
        if asset is None:
            return Err(ClientError(operation=operation, message="unexpected asset payload"))
        return Ok(asset)

    def delete_asset(self, asset: RemoteAsset) -> Result[None, ClientError]:
        raw = self._gh(
            ["--method", "DELETE", f"repos/{asset.repo.slug}/releases/assets/{asset.id}"],
            operation="delete_asset",
            message=f"failed to delete asset {asset.name}",
        )
        if isinstance(raw, Err):
            return raw
        return Ok(None)


# -----------------------------------------------------------------------------
# In-memory client
# -----------------------------------------------------------------------------

MUTATING_OPERATIONS = frozenset(
    {"create_release", "delete_release", "upload_asset", "delete_asset"}
)


def _empty_calls() -> list[tuple[str, str]]:
    return []


@dataclass
class FakeReleaseClient:
    """In-memory ReleaseClient.

    Keeps releases and assets in lists, records every call as
    ``(operation, target)`` and fails on demand.

    Usage:
        client = FakeReleaseClient()
        client.add_release("v1.0")
        client.fail("create_release", "HTTP 422")
        ...
        assert client.mutations == []
    """

    releases: list[RemoteRelease] = field(default_factory=list)
    calls: list[tuple[str, str]] = field(default_factory=_empty_calls)
    _assets: dict[int, list[RemoteAsset]] = field(default_factory=dict)
    _failures: dict[tuple[str, str | None], str] = field(default_factory=dict)
    _next_id: int = 1

    def __post_init__(self) -> None:
        for release in self.releases:
            self._assets.setdefault(release.id, list(release.assets))
            self._next_id = max(self._next_id, release.id + 1)

    # Test setup helpers

    def _new_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def add_release(
        self,
        name: str,
        *,
        tag: str | None = None,
        repo: RepositoryReference | None = None,
        assets: tuple[str, ...] = (),
    ) -> RemoteRelease:
        """Seed a release (and named assets) as if it already existed remotely."""
        repo = repo or RepositoryReference("acme", "widgets")
        release_id = self._new_id()
        seeded = tuple(
            RemoteAsset(id=self._new_id(), repo=repo, name=a, content_type="application/zip")
            for a in assets
        )
        release = RemoteRelease(
            id=release_id,
            repo=repo,
            tag=tag or name,
            name=name,
            draft=False,
            pre_release=False,
            upload_url=f"https://uploads.example.test/releases/{release_id}/assets{{?name,label}}",
            assets=seeded,
        )
        self.releases.append(release)
        self._assets[release_id] = list(seeded)
        return release

    def fail(
        self, operation: str, detail: str = "simulated failure", *, target: str | None = None
    ) -> None:
        """Make ``operation`` fail, for every target or only for ``target``."""
        self._failures[(operation, target)] = detail

    def assets_of(self, release: RemoteRelease) -> list[RemoteAsset]:
        return list(self._assets.get(release.id, []))

    @property
    def mutations(self) -> list[tuple[str, str]]:
        return [c for c in self.calls if c[0] in MUTATING_OPERATIONS]

    def _record(self, operation: str, target: str) -> ClientError | None:
        self.calls.append((operation, target))
        detail = self._failures.get((operation, target)) or self._failures.get((operation, None))
        if detail is None:
            return None
        return ClientError(operation=operation, message=f"{operation} failed", detail=detail)

    # ReleaseClient

    def list_releases(self, repo: RepositoryReference) -> Result[list[RemoteRelease], ClientError]:
        error = self._record("list_releases", repo.slug)
        if error is not None:
            return Err(error)
        return Ok([r for r in self.releases if r.repo == repo])

    def create_release(
        self, repo: RepositoryReference, request: CreateReleaseRequest
    ) -> Result[RemoteRelease, ClientError]:
        error = self._record("create_release", request.name)
        if error is not None:
            return Err(error)
        release_id = self._new_id()
        release = RemoteRelease(
            id=release_id,
            repo=repo,
            tag=request.tag,
            name=request.name,
            draft=request.draft,
            pre_release=request.pre_release,
            upload_url=f"https://uploads.example.test/releases/{release_id}/assets{{?name,label}}",
        )
        self.releases.insert(0, release)
        self._assets[release_id] = []
        return Ok(release)

    def delete_release(self, release: RemoteRelease) -> Result[None, ClientError]:
        error = self._record("delete_release", release.name)
        if error is not None:
            return Err(error)
        self.releases = [r for r in self.releases if r.id != release.id]
        self._assets.pop(release.id, None)
        return Ok(None)

    def list_assets(self, release: RemoteRelease) -> Result[list[RemoteAsset], ClientError]:
        error = self._record("list_assets", release.name)
        if error is not None:
            return Err(error)
        return Ok(self.assets_of(release))

    def upload_asset(
        self, release: RemoteRelease, path: Path, content_type: str
    ) -> Result[RemoteAsset, ClientError]:
        error = self._record("upload_asset", path.name)
        if error is not None:
            return Err(error)
        asset = RemoteAsset(
            id=self._new_id(), repo=release.repo, name=path.name, content_type=content_type
        )
        self._assets.setdefault(release.id, []).append(asset)
        return Ok(asset)

    def delete_asset(self, asset: RemoteAsset) -> Result[None, ClientError]:
        error = self._record("delete_asset", asset.name)
        if error is not None:
            return Err(error)
        for assets in self._assets.values():
            assets[:] = [a for a in assets if a.id != asset.id]
        return Ok(None)
