from __future__ import annotations

# Matched case-insensitively anywhere in the version.
_PRE_RELEASE_MARKERS = ("-alpha", "-beta", "-rc", ".rc", "-m", ".m")


def is_pre_release_version(version: str) -> bool:
    """Return True if ``version`` follows a common unstable-version convention.

    Snapshots (``1.0-SNAPSHOT``), alphas, betas, release candidates
    (``2.0-RC1``, ``2.0.RC1``) and milestones (``3.0.0-M1``) qualify.
    """
    if version.endswith("-SNAPSHOT"):
        return True
    lowered = version.lower()
    return any(marker in lowered for marker in _PRE_RELEASE_MARKERS)
