from __future__ import annotations

from ghrel.core.result import Err, Ok
from ghrel.release.client import FakeReleaseClient
from ghrel.release.model import ReleaseOptions, ReleaseSpec, RepositoryReference
from ghrel.release.reconcile import create_request, find_release_by_name, reconcile_release

REPO = RepositoryReference("acme", "widgets")


def _spec(name: str = "Widgets 1.0", *, tag: str = "v1.0") -> ReleaseSpec:
    return ReleaseSpec(
        tag=tag,
        name=name,
        description="notes\n",
        commitish=None,
        draft=False,
        pre_release=False,
    )


class TestFindReleaseByName:
    def test_first_match_wins(self) -> None:
        client = FakeReleaseClient()
        first = client.add_release("Widgets 1.0", tag="v1.0")
        client.add_release("Widgets 1.0", tag="v1.0-dup")
        assert find_release_by_name(client, REPO, "Widgets 1.0") == Ok(first)

    def test_exact_name_match(self) -> None:
        client = FakeReleaseClient()
        client.add_release("widgets 1.0")
        assert find_release_by_name(client, REPO, "Widgets 1.0") == Ok(None)

    def test_empty_name(self) -> None:
        client = FakeReleaseClient()
        result = find_release_by_name(client, REPO, "")
        assert isinstance(result, Err)
        assert result.error.kind == "validation"
        assert client.calls == []

    def test_list_failure_is_remote(self) -> None:
        client = FakeReleaseClient()
        client.fail("list_releases", "HTTP 502")
        result = find_release_by_name(client, REPO, "Widgets 1.0")
        assert isinstance(result, Err)
        assert result.error.kind == "remote"
        assert result.error.hint == "HTTP 502"
        assert result.error.operation == "list_releases"


def test_create_request_drops_empty_fields() -> None:
    spec = ReleaseSpec(
        tag="v1.0", name="W", description="", commitish="", draft=True, pre_release=True
    )
    request = create_request(spec)
    assert request.description is None
    assert request.commitish is None
    assert request.draft is True
    assert request.pre_release is True


class TestReconcileRelease:
    def test_creates_when_missing(self) -> None:
        client = FakeReleaseClient()
        result = reconcile_release(client, REPO, _spec(), ReleaseOptions())
        assert isinstance(result, Ok)
        assert result.value.action == "created"
        assert result.value.release.tag == "v1.0"
        assert client.mutations == [("create_release", "Widgets 1.0")]

    def test_reuses_existing(self) -> None:
        client = FakeReleaseClient()
        existing = client.add_release("Widgets 1.0")
        result = reconcile_release(client, REPO, _spec(), ReleaseOptions())
        assert isinstance(result, Ok)
        assert result.value.action == "reused"
        assert result.value.release == existing
        assert client.mutations == []

    def test_conflict_changes_nothing(self) -> None:
        client = FakeReleaseClient()
        client.add_release("Widgets 1.0")
        options = ReleaseOptions(fail_if_release_exists=True, delete_existing_release=True)
        result = reconcile_release(client, REPO, _spec(), options)
        assert isinstance(result, Err)
        assert result.error.kind == "conflict"
        assert client.mutations == []

    def test_fail_if_exists_without_existing_creates(self) -> None:
        client = FakeReleaseClient()
        options = ReleaseOptions(fail_if_release_exists=True)
        result = reconcile_release(client, REPO, _spec(), options)
        assert isinstance(result, Ok)
        assert result.value.action == "created"

    def test_replaces_existing(self) -> None:
        client = FakeReleaseClient()
        old = client.add_release("Widgets 1.0", assets=("old.zip",))
        options = ReleaseOptions(delete_existing_release=True)
        result = reconcile_release(client, REPO, _spec(), options)
        assert isinstance(result, Ok)
        assert result.value.action == "replaced"
        assert result.value.release.id != old.id
        assert client.mutations == [
            ("delete_release", "Widgets 1.0"),
            ("create_release", "Widgets 1.0"),
        ]
        assert client.assets_of(result.value.release) == []

    def test_failed_create_after_delete_leaves_release_absent(self) -> None:
        client = FakeReleaseClient()
        client.add_release("Widgets 1.0")
        client.fail("create_release", "HTTP 422 Validation Failed")
        options = ReleaseOptions(delete_existing_release=True)
        result = reconcile_release(client, REPO, _spec(), options)
        assert isinstance(result, Err)
        assert result.error.kind == "remote"
        assert result.error.message == "failed to create new release Widgets 1.0"
        assert client.releases == []

    def test_delete_failure_stops_before_create(self) -> None:
        client = FakeReleaseClient()
        client.add_release("Widgets 1.0")
        client.fail("delete_release", "HTTP 403")
        options = ReleaseOptions(delete_existing_release=True)
        result = reconcile_release(client, REPO, _spec(), options)
        assert isinstance(result, Err)
        assert result.error.operation == "delete_release"
        assert client.mutations == [("delete_release", "Widgets 1.0")]

    def test_empty_tag(self) -> None:
        client = FakeReleaseClient()
        result = reconcile_release(client, REPO, _spec(tag=""), ReleaseOptions())
        assert isinstance(result, Err)
        assert result.error.kind == "validation"
        assert client.calls == []
