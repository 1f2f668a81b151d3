from __future__ import annotations

from pathlib import Path

import pytest
import typer

from ghrel import __version__
from ghrel.cli import app as app_mod
from ghrel.cli import context as context_mod
from ghrel.cli.commands import create_release as cmd
from ghrel.cli.context import CLIContext, build_context
from ghrel.core.config import AssetSetConfig, ReleaseConfig
from ghrel.core.errors import ErrorCode
from ghrel.core.result import Ok
from ghrel.output.console import MockConsole
from ghrel.release.client import FakeReleaseClient
from ghrel.release.errors import ReleaseError
from ghrel.release.model import FileSetSpec


def _build(config: ReleaseConfig, project_dir: Path, **overrides: object):
    values: dict[str, object] = {
        "repository": None,
        "tag": None,
        "name": None,
        "description": None,
        "description_file": None,
        "commitish": None,
        "draft": None,
        "pre_release": None,
        "assets_dir": None,
        "include": None,
        "exclude": None,
        "mime_type": None,
        "overwrite_assets": None,
        "exclude_pre_releases": None,
        "fail_if_exists": None,
        "delete_existing": None,
    }
    values.update(overrides)
    return cmd.build_request(
        config=config, project_dir=project_dir, **values  # type: ignore[arg-type]
    )


@pytest.mark.parametrize(
    ("kind", "code"),
    [
        ("validation", ErrorCode.USER_ERROR),
        ("not_mapped", ErrorCode.USER_ERROR),
        ("environment", ErrorCode.ENV_ERROR),
        ("config", ErrorCode.ENV_ERROR),
        ("conflict", ErrorCode.CONFLICT),
        ("remote", ErrorCode.NETWORK_ERROR),
        ("io", ErrorCode.IO_ERROR),
    ],
)
def test_release_error_code(kind: str, code: ErrorCode) -> None:
    error = ReleaseError(kind=kind, message="x")  # type: ignore[arg-type]
    assert cmd.release_error_code(error) == code


def test_exit_release_prints_message_and_hint(capsys: pytest.CaptureFixture[str]) -> None:
    error = ReleaseError(kind="remote", message="failed to upload asset w.zip", hint="HTTP 500")
    with pytest.raises(typer.Exit) as exc:
        cmd.exit_release(error)
    assert exc.value.exit_code == int(ErrorCode.NETWORK_ERROR)
    err = capsys.readouterr().err
    assert "error: failed to upload asset w.zip" in err
    assert "hint: HTTP 500" in err


class TestParseMimeTypes:
    def test_parses_pairs(self) -> None:
        assert cmd.parse_mime_types([".whl=application/zip", "txt = text/plain"]) == {
            "whl": "application/zip",
            "txt": "text/plain",
        }

    @pytest.mark.parametrize("item", ["application/zip", "=application/zip"])
    def test_rejects_malformed(self, item: str) -> None:
        with pytest.raises(typer.Exit) as exc:
            cmd.parse_mime_types([item])
        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)


class TestBuildRequest:
    def test_defaults(self, tmp_path: Path) -> None:
        request = _build(ReleaseConfig(), tmp_path)
        assert request.tag is None
        assert request.draft is False
        assert request.asset_sets == ()
        assert request.mime_types is None
        assert request.options.exclude_pre_releases is True
        assert request.options.overwrite_existing_assets is False

    def test_tag_defaults_to_project_version(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "widgets"\nversion = "1.4.0"\n', encoding="utf-8"
        )
        assert _build(ReleaseConfig(), tmp_path).tag == "1.4.0"

    def test_config_values_apply(self, tmp_path: Path) -> None:
        config = ReleaseConfig(
            repository="acme/widgets",
            tag="v1.0",
            name="Widgets",
            description_file="CHANGES.md",
            draft=True,
            exclude_pre_releases=False,
            delete_existing_release=True,
            mime_types={"whl": "application/zip"},
            assets=(AssetSetConfig(directory="dist", includes=("*.whl",)),),
        )
        request = _build(config, tmp_path)
        assert request.repository == "acme/widgets"
        assert request.description_file == tmp_path / "CHANGES.md"
        assert request.draft is True
        assert request.mime_types == {"whl": "application/zip"}
        assert request.options.exclude_pre_releases is False
        assert request.options.delete_existing_release is True
        assert request.asset_sets == (FileSetSpec(directory=Path("dist"), includes=("*.whl",)),)

    def test_cli_overrides_config(self, tmp_path: Path) -> None:
        config = ReleaseConfig(
            tag="v1.0",
            draft=True,
            overwrite_existing_assets=True,
            mime_types={"whl": "application/zip"},
            assets=(AssetSetConfig(directory="dist"),),
        )
        request = _build(
            config,
            tmp_path,
            tag="v2.0",
            draft=False,
            overwrite_assets=False,
            mime_type=["zip=application/zip"],
            assets_dir=Path("out"),
            include=["*.zip"],
        )
        assert request.tag == "v2.0"
        assert request.draft is False
        assert request.options.overwrite_existing_assets is False
        assert request.mime_types == {"zip": "application/zip"}
        assert request.asset_sets == (FileSetSpec(directory=Path("out"), includes=("*.zip",)),)

    def test_exclude_alone_narrows_configured_sets(self, tmp_path: Path) -> None:
        config = ReleaseConfig(
            assets=(
                AssetSetConfig(directory="dist", includes=("*",), excludes=("*.tmp",)),
                AssetSetConfig(directory="docs"),
            )
        )
        request = _build(config, tmp_path, exclude=["*.jar"])
        assert request.asset_sets == (
            FileSetSpec(directory=Path("dist"), includes=("*",), excludes=("*.tmp", "*.jar")),
            FileSetSpec(directory=Path("docs"), excludes=("*.jar",)),
        )

    def test_exclude_alone_without_sets_is_rejected(self, tmp_path: Path) -> None:
        with pytest.raises(typer.Exit) as exc:
            _build(ReleaseConfig(), tmp_path, exclude=["*.jar"])
        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)

    def test_absolute_description_file_is_kept(self, tmp_path: Path) -> None:
        notes = tmp_path / "notes" / "CHANGES.md"
        request = _build(ReleaseConfig(), Path("/elsewhere"), description_file=notes)
        assert request.description_file == notes


class TestBuildContext:
    def test_missing_project_dir(self, tmp_path: Path) -> None:
        with pytest.raises(typer.Exit) as exc:
            build_context(project_dir=tmp_path / "nope", config_path=None, verbose=False)
        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)

    def test_bad_config(self, tmp_path: Path) -> None:
        (tmp_path / "ghrel.toml").write_text("name = \n", encoding="utf-8")
        with pytest.raises(typer.Exit) as exc:
            build_context(project_dir=tmp_path, config_path=None, verbose=False)
        assert exc.value.exit_code == int(ErrorCode.ENV_ERROR)

    def test_loads_config(self, tmp_path: Path) -> None:
        (tmp_path / "ghrel.toml").write_text('name = "Widgets"\n', encoding="utf-8")
        ctx = build_context(project_dir=tmp_path, config_path=None, verbose=True)
        assert ctx.project_dir == tmp_path.resolve()
        assert ctx.config.name == "Widgets"
        assert context_mod.RichConsole is type(ctx.console)


def _run_cmd(tmp_path: Path, **overrides: object) -> None:
    values: dict[str, object] = {
        "repository": "acme/widgets",
        "tag": "v1.0",
        "name": "Widgets 1.0",
        "description": None,
        "description_file": None,
        "commitish": None,
        "draft": None,
        "pre_release": None,
        "assets_dir": None,
        "include": None,
        "exclude": None,
        "mime_type": None,
        "overwrite_assets": None,
        "exclude_pre_releases": None,
        "fail_if_exists": None,
        "delete_existing": None,
        "token": "t0k",
        "config_path": None,
        "project_dir": tmp_path,
        "verbose": False,
    }
    values.update(overrides)
    cmd.create_release_cmd(**values)  # type: ignore[arg-type]


class TestCreateReleaseCmd:
    def _wire(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Path,
        client: FakeReleaseClient,
        *,
        config: ReleaseConfig | None = None,
    ) -> MockConsole:
        console = MockConsole()
        tokens: list[str | None] = []

        def fake_build_context(
            *, project_dir: Path | None, config_path: Path | None, verbose: bool
        ) -> CLIContext:
            del config_path, verbose
            return CLIContext(
                project_dir=project_dir or tmp_path,
                config=config or ReleaseConfig(),
                console=console,
            )

        def fake_connect(**kwargs: object):
            tokens.append(kwargs.get("explicit_token"))  # type: ignore[arg-type]
            return Ok(client)

        monkeypatch.setattr(cmd, "build_context", fake_build_context)
        monkeypatch.setattr(cmd, "connect", fake_connect)
        return console

    def test_success(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        client = FakeReleaseClient()
        console = self._wire(monkeypatch, tmp_path, client)
        _run_cmd(tmp_path)
        assert client.mutations == [("create_release", "Widgets 1.0")]
        assert console.find("created release Widgets 1.0")

    def test_conflict_exit_code(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        client = FakeReleaseClient()
        client.add_release("Widgets 1.0")
        self._wire(monkeypatch, tmp_path, client)
        with pytest.raises(typer.Exit) as exc:
            _run_cmd(tmp_path, fail_if_exists=True)
        assert exc.value.exit_code == int(ErrorCode.CONFLICT)
        assert client.mutations == []

    def test_unmapped_asset_exit_code(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
        client = FakeReleaseClient()
        self._wire(monkeypatch, tmp_path, client)
        with pytest.raises(typer.Exit) as exc:
            _run_cmd(tmp_path, assets_dir=tmp_path, include=["*.txt"])
        assert exc.value.exit_code == int(ErrorCode.USER_ERROR)
        assert client.mutations == [("create_release", "Widgets 1.0")]

    def test_exclude_option_skips_configured_files(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        dist = tmp_path / "dist"
        dist.mkdir()
        (dist / "w.zip").write_bytes(b"zip")
        (dist / "w.jar").write_bytes(b"jar")
        client = FakeReleaseClient()
        self._wire(
            monkeypatch,
            tmp_path,
            client,
            config=ReleaseConfig(assets=(AssetSetConfig(directory="dist"),)),
        )
        _run_cmd(tmp_path, exclude=["*.jar"])
        assert client.mutations == [
            ("create_release", "Widgets 1.0"),
            ("upload_asset", "w.zip"),
        ]

    def test_excluded_pre_release_succeeds_without_client(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        client = FakeReleaseClient()
        console = self._wire(monkeypatch, tmp_path, client)
        _run_cmd(tmp_path, tag="1.0-SNAPSHOT")
        assert client.calls == []
        assert console.find("pre-releases are excluded")


def test_version_option(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(typer.Exit) as exc:
        app_mod._show_version(True)  # pyright: ignore[reportPrivateUsage]
    assert exc.value.exit_code == 0
    assert capsys.readouterr().out.strip() == __version__


def test_version_option_unset() -> None:
    app_mod._show_version(False)  # pyright: ignore[reportPrivateUsage]
