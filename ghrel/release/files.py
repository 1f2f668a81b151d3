"""Local inputs of a release run: asset file sets and the description file.

File sets use Ant-style patterns relative to the set's directory:
``*`` and ``?`` stay within one path segment, ``**`` spans any number of
segments, and a trailing ``/`` stands for ``/**``. Patterns may also be given
comma-separated (``"*.zip, *.tar.gz"``).
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from pathlib import Path

from ghrel.core.result import Err, Ok, Result
from ghrel.release.errors import ReleaseError, validation_error
from ghrel.release.model import FileSetSpec, LocalAssetFile

# Version-control metadata never ships as a release asset.
DEFAULT_EXCLUDES: tuple[str, ...] = (
    "**/.git/**",
    "**/.svn/**",
    "**/.hg/**",
    "**/.bzr/**",
    "**/CVS/**",
    "**/.gitignore",
    "**/.gitattributes",
)


def split_patterns(patterns: Iterable[str]) -> tuple[str, ...]:
    out: list[str] = []
    for pattern in patterns:
        for part in pattern.split(","):
            p = part.strip().replace("\\", "/")
            if not p:
                continue
            if p.endswith("/"):
                p += "**"
            out.append(p)
    return tuple(out)


def _segment_regex(segment: str) -> str:
    out: list[str] = []
    for ch in segment:
        if ch == "*":
            out.append("[^/]*")
        elif ch == "?":
            out.append("[^/]")
        else:
            out.append(re.escape(ch))
    return "".join(out)


def pattern_regex(pattern: str) -> re.Pattern[str]:
    """Compile an Ant-style pattern into a regex over POSIX relative paths."""
    segments = pattern.split("/")
    parts: list[str] = []
    for index, segment in enumerate(segments):
        last = index == len(segments) - 1
        if segment == "**":
            parts.append(".*" if last else "(?:[^/]*/)*")
        else:
            parts.append(_segment_regex(segment) + ("" if last else "/"))
    return re.compile("".join(parts))


def _matches_any(rel_path: str, regexes: Sequence[re.Pattern[str]]) -> bool:
    return any(r.fullmatch(rel_path) for r in regexes)


def resolve_file_set(
    spec: FileSetSpec,
    *,
    base_dir: Path,
    position: int = 1,
) -> Result[list[LocalAssetFile], ReleaseError]:
    """Expand one file set into concrete files, sorted by relative path.

    Relative set directories resolve against ``base_dir``. ``position`` is
    the 1-based index of the set, used in error messages.
    """
    directory = spec.directory if spec.directory.is_absolute() else base_dir / spec.directory
    if not directory.is_dir():
        return Err(
            validation_error(
                f"failed to get files for file set at position {position}: "
                f"directory {spec.directory} does not exist",
                hint=str(directory),
            )
        )

    includes = [pattern_regex(p) for p in split_patterns(spec.includes) or ("**",)]
    excludes = [pattern_regex(p) for p in (*split_patterns(spec.excludes), *DEFAULT_EXCLUDES)]

    found: list[tuple[str, Path]] = []
    try:
        for path in directory.rglob("*"):
            if not path.is_file():
                continue
            rel = path.relative_to(directory).as_posix()
            if _matches_any(rel, includes) and not _matches_any(rel, excludes):
                found.append((rel, path))
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io",
                message=f"failed to get files for file set at position {position}: {e}",
            )
        )

    found.sort(key=lambda item: item[0])
    return Ok([LocalAssetFile(path=path) for _, path in found])


def resolve_file_sets(
    specs: Sequence[FileSetSpec], *, base_dir: Path
) -> Result[list[LocalAssetFile], ReleaseError]:
    """Expand file sets in order and concatenate their files."""
    files: list[LocalAssetFile] = []
    for position, spec in enumerate(specs, start=1):
        resolved = resolve_file_set(spec, base_dir=base_dir, position=position)
        if isinstance(resolved, Err):
            return resolved
        files.extend(resolved.value)
    return Ok(files)


def read_description_file(path: Path | None) -> Result[str, ReleaseError]:
    """Return the file's text with every line terminated by ``\\n``."""
    if path is None:
        return Err(validation_error("description file must not be null"))
    if not path.exists():
        return Err(validation_error("description file does not exist", hint=str(path)))
    if path.is_dir():
        return Err(validation_error("description file must not be a directory", hint=str(path)))

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(
            ReleaseError(kind="io", message=f"reading the contents of file {path} failed: {e}")
        )

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    if text and not text.endswith("\n"):
        text += "\n"
    return Ok(text)
