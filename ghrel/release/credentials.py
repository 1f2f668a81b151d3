"""Authentication for the gh-backed client.

A token is looked up in this order:
1. ``--token`` on the command line
2. the environment variable named by ``token_env`` (default ``GITHUB_TOKEN``)
3. ``GH_TOKEN``

Without a token the run relies on ``gh auth login`` having been done.
"""

from __future__ import annotations

import os
import shutil
from collections.abc import Mapping
from pathlib import Path

from ghrel.core.result import Err, Ok, Result
from ghrel.platform.process import run as run_process
from ghrel.release.client import GhReleaseClient
from ghrel.release.errors import ReleaseError
from ghrel.release.timeouts import GH_TIMEOUT_SECONDS

DEFAULT_TOKEN_ENV = "GITHUB_TOKEN"
GH_TOKEN_ENV = "GH_TOKEN"


def resolve_token(
    *,
    explicit: str | None,
    env: Mapping[str, str],
    token_env: str | None = None,
) -> str | None:
    if explicit and explicit.strip():
        return explicit.strip()
    for name in (token_env or DEFAULT_TOKEN_ENV, GH_TOKEN_ENV):
        value = env.get(name, "").strip()
        if value:
            return value
    return None


def ensure_gh_available() -> Result[None, ReleaseError]:
    if shutil.which("gh") is None:
        return Err(
            ReleaseError(
                kind="environment",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, workspace_root: Path) -> Result[None, ReleaseError]:
    result = run_process(["gh", "auth", "status"], cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ReleaseError(
                kind="environment",
                message="gh auth required",
                hint="Run: gh auth login, or set GITHUB_TOKEN",
            )
        )
    return Ok(None)


def connect(
    *,
    workspace_root: Path,
    explicit_token: str | None = None,
    token_env: str | None = None,
    env: Mapping[str, str] | None = None,
) -> Result[GhReleaseClient, ReleaseError]:
    """Return an authenticated client, or an ``environment`` error."""
    available = ensure_gh_available()
    if isinstance(available, Err):
        return available

    token = resolve_token(
        explicit=explicit_token,
        env=os.environ if env is None else env,
        token_env=token_env,
    )
    if token is None:
        auth = ensure_gh_auth(workspace_root=workspace_root)
        if isinstance(auth, Err):
            return auth

    return Ok(GhReleaseClient(workspace_root=workspace_root, token=token))
