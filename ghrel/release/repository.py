"""Repository identification.

Accepts the forms people actually paste into config: SCM connection strings
(``scm:git:https://github.com/acme/widgets.git``), clone URLs
(``git@github.com:acme/widgets.git``) and bare ``owner/name`` ids.
"""

from __future__ import annotations

import re
from pathlib import Path

from ghrel.core.result import Err, Ok, Result
from ghrel.platform.process import run as run_process
from ghrel.release.errors import ReleaseError, validation_error
from ghrel.release.model import RepositoryReference
from ghrel.release.timeouts import GIT_TIMEOUT_SECONDS

# https://maven.apache.org/scm/scm-url-format.html
_SCM_CONNECTION_RE = re.compile(
    r"(scm:git[:|])?"  # SCM provider prefix
    r"(https?://github\.com/|git@github\.com:)"  # HTTP(S) or SSH host prefix
    r"([^/]+/[^/.]+)"  # owner/name; name stops before ".git"
    r"(\.git)?"
    r"(/.*)?",  # optional path inside the repository
    re.IGNORECASE,
)


def repository_id_from_scm(connection: str | None) -> Result[str, ReleaseError]:
    """Extract ``owner/name`` from an SCM connection string.

    Input that does not look like a GitHub connection string is returned
    unchanged, so a bare ``owner/name`` passes through as-is.
    """
    if not connection:
        return Err(validation_error("repository id must not be empty"))

    m = _SCM_CONNECTION_RE.fullmatch(connection)
    if m is None:
        return Ok(connection)
    return Ok(m.group(3))


def parse_repository(text: str | None) -> Result[RepositoryReference, ReleaseError]:
    repo_id = repository_id_from_scm(text.strip() if text else text)
    if isinstance(repo_id, Err):
        return repo_id

    parts = repo_id.value.split("/")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        return Err(
            validation_error(
                f"invalid repository id: {repo_id.value}",
                hint="Expected owner/name or a github.com SCM URL",
            )
        )
    return Ok(RepositoryReference(owner=parts[0].strip(), name=parts[1].strip()))


def origin_remote_url(project_dir: Path) -> Result[str, ReleaseError]:
    """Return the ``origin`` remote URL of the git checkout at ``project_dir``."""
    result = run_process(
        ["git", "remote", "get-url", "origin"],
        cwd=project_dir,
        timeout=GIT_TIMEOUT_SECONDS,
    )
    if isinstance(result, Err):
        return Err(
            validation_error(
                "repository id must not be empty",
                hint="Pass --repository or run inside a checkout with an 'origin' remote",
            )
        )

    url = result.value.strip()
    if not url:
        return Err(validation_error("git remote 'origin' has no URL"))
    return Ok(url)
