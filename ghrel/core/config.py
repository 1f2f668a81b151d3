"""Typed configuration loading.

Release settings can live in a dedicated ``ghrel.toml`` or in the
``[tool.ghrel]`` table of ``pyproject.toml``. Every value is optional here;
the CLI layers its own options on top and fills the remaining defaults.

Example ``ghrel.toml``::

    repository = "scm:git:https://github.com/acme/widgets.git"
    name = "Widgets 1.4.0"
    description_file = "CHANGES.md"
    overwrite_existing_assets = true

    [mime_types]
    zip = "application/zip"
    whl = "application/zip"

    [[assets]]
    directory = "dist"
    includes = ["*.whl", "*.tar.gz"]
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_obj_list,
    as_str_dict,
    get_bool,
    get_raw_str,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "AssetSetConfig",
    "ConfigError",
    "ReleaseConfig",
    "CONFIG_FILE_NAME",
    "PYPROJECT_FILE_NAME",
    "find_config_file",
    "load_config",
    "load_project_config",
    "project_version",
]

CONFIG_FILE_NAME = "ghrel.toml"
PYPROJECT_FILE_NAME = "pyproject.toml"
PYPROJECT_TOOL_KEY = "ghrel"


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class AssetSetConfig:
    """One ``[[assets]]`` entry: a directory plus include/exclude patterns."""

    directory: str
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class ReleaseConfig:
    """Release settings read from a config file.

    ``None`` means "not configured" so that CLI options and built-in
    defaults can be applied afterwards.
    """

    repository: str | None = None
    tag: str | None = None
    name: str | None = None
    description: str | None = None
    description_file: str | None = None
    commitish: str | None = None
    draft: bool | None = None
    pre_release: bool | None = None
    overwrite_existing_assets: bool | None = None
    exclude_pre_releases: bool | None = None
    fail_if_release_exists: bool | None = None
    delete_existing_release: bool | None = None
    token_env: str | None = None
    mime_types: Mapping[str, str] | None = None
    assets: tuple[AssetSetConfig, ...] = ()
    source: Path | None = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object], *, source: Path | None = None) -> ReleaseConfig:
        """Create a ReleaseConfig from a parsed TOML table.

        Raises:
            ValueError: If ``mime_types`` or ``assets`` have the wrong shape.
        """
        return cls(
            repository=get_str(data, "repository"),
            tag=get_str(data, "tag"),
            name=get_str(data, "name"),
            description=get_raw_str(data, "description"),
            description_file=get_str(data, "description_file"),
            commitish=get_str(data, "commitish"),
            draft=get_bool(data, "draft"),
            pre_release=get_bool(data, "pre_release"),
            overwrite_existing_assets=get_bool(data, "overwrite_existing_assets"),
            exclude_pre_releases=get_bool(data, "exclude_pre_releases"),
            fail_if_release_exists=get_bool(data, "fail_if_release_exists"),
            delete_existing_release=get_bool(data, "delete_existing_release"),
            token_env=get_str(data, "token_env"),
            mime_types=_parse_mime_types(data),
            assets=_parse_assets(data),
            source=source,
        )


def _parse_mime_types(data: Mapping[str, object]) -> Mapping[str, str] | None:
    if "mime_types" not in data:
        return None
    table = get_table(data, "mime_types")
    if table is None:
        raise ValueError("mime_types must be a table of extension = content type")

    out: dict[str, str] = {}
    for ext, content_type in table.items():
        if not isinstance(content_type, str):
            raise ValueError(f"mime_types.{ext} must be a string")
        # Empty values are kept; resolving such an extension is an error.
        out[ext] = content_type.strip()
    return MappingProxyType(out)


def _parse_assets(data: Mapping[str, object]) -> tuple[AssetSetConfig, ...]:
    if "assets" not in data:
        return ()
    raw = as_obj_list(data.get("assets"))
    if raw is None:
        raise ValueError("assets must be an array of tables")

    out: list[AssetSetConfig] = []
    for position, item in enumerate(raw, start=1):
        entry = as_str_dict(item)
        if entry is None:
            raise ValueError(f"assets entry {position} must be a table")
        directory = get_str(entry, "directory")
        if directory is None:
            raise ValueError(f"assets entry {position} is missing 'directory'")
        out.append(
            AssetSetConfig(
                directory=directory,
                includes=tuple(get_str_list(entry, "includes") or ()),
                excludes=tuple(get_str_list(entry, "excludes") or ()),
            )
        )
    return tuple(out)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and syntax errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def _tool_table(data: StrDict) -> StrDict | None:
    tool = get_table(data, "tool")
    if tool is None:
        return None
    return get_table(tool, PYPROJECT_TOOL_KEY)


def load_config(path: Path) -> Result[ReleaseConfig, ConfigError]:
    """Load release settings from ``path``.

    A ``pyproject.toml`` is read from its ``[tool.ghrel]`` table (an absent
    table yields an empty config); any other file is read from its root.

    Returns:
        Ok(ReleaseConfig) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    data: StrDict = result.value
    if path.name == PYPROJECT_FILE_NAME:
        data = _tool_table(data) or {}

    try:
        return Ok(ReleaseConfig.from_dict(data, source=path))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def find_config_file(project_dir: Path) -> Path | None:
    """Return the config file to use for ``project_dir``, if any.

    ``ghrel.toml`` wins over ``pyproject.toml``; the latter only counts when it
    has a ``[tool.ghrel]`` table.
    """
    candidate = project_dir / CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate

    pyproject = project_dir / PYPROJECT_FILE_NAME
    if pyproject.is_file():
        parsed = _parse_toml(pyproject)
        if isinstance(parsed, Ok) and _tool_table(parsed.value) is not None:
            return pyproject
    return None


def load_project_config(
    project_dir: Path, explicit: Path | None = None
) -> Result[ReleaseConfig, ConfigError]:
    """Load the explicit config file, else the discovered one, else defaults."""
    if explicit is not None:
        return load_config(explicit)

    found = find_config_file(project_dir)
    if found is None:
        return Ok(ReleaseConfig())
    return load_config(found)


def project_version(project_dir: Path) -> str | None:
    """Return ``[project].version`` from ``pyproject.toml``, if declared.

    Used as the default release tag.
    """
    pyproject = project_dir / PYPROJECT_FILE_NAME
    if not pyproject.is_file():
        return None
    parsed = _parse_toml(pyproject)
    if isinstance(parsed, Err):
        return None
    project = get_table(parsed.value, "project")
    if project is None:
        return None
    return get_str(project, "version")
