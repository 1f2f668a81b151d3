"""Result values for explicit error propagation.

Every fallible step of a release run (parsing the repository id, listing
releases, uploading an asset, ...) returns either ``Ok(value)`` or
``Err(error)``. Callers branch on the variant instead of catching exceptions,
so a failure travels upward untouched until the CLI renders it.

Usage:
    def find_tag(tags: list[str], wanted: str) -> Result[str, str]:
        if wanted not in tags:
            return Err(f"unknown tag: {wanted}")
        return Ok(wanted)

    match find_tag(["v1.0"], "v1.0"):
        case Ok(tag):
            print(tag)
        case Err(message):
            print(f"error: {message}")
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Ok[T]:
    """Successful outcome carrying ``value``."""

    value: T

    def map_err[E, F](self, f: Callable[[E], F]) -> Ok[T]:
        """Return self; there is no error to translate."""
        return self

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err[E]:
    """Failed outcome carrying ``error``."""

    error: E

    def map_err[F](self, f: Callable[[E], F]) -> Err[F]:
        """Translate the contained error with ``f``.

        Used at layer boundaries, e.g. turning a client failure into a
        release error.
        """
        return Err(f(self.error))

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


type Result[T, E] = Ok[T] | Err[E]
