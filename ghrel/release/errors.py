from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

ReleaseErrorKind = Literal[
    "validation",
    "conflict",
    "not_mapped",
    "remote",
    "environment",
    "config",
    "io",
]


@dataclass(frozen=True, slots=True)
class ReleaseError:
    """Canonical failure of a release run.

    ``operation`` names the remote call that failed (``create_release``,
    ``upload_asset``, ...) for ``remote`` errors; ``hint`` carries the
    underlying cause or a suggested fix.
    """

    kind: ReleaseErrorKind
    message: str
    hint: str | None = None
    operation: str | None = None

    def pretty(self) -> str:
        if self.hint:
            return f"{self.message} (hint: {self.hint})"
        return self.message


def validation_error(message: str, hint: str | None = None) -> ReleaseError:
    return ReleaseError(kind="validation", message=message, hint=hint)


def not_mapped_error(message: str, hint: str | None = None) -> ReleaseError:
    return ReleaseError(kind="not_mapped", message=message, hint=hint)
