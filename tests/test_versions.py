"""Test version ordering and resolution."""

from wp_since.models import ErrorKind
from wp_since.versions import VersionResolver, compare_versions, earliest_version, parse_version


def test_parse_version():
    parsed = parse_version("5.0-beta1")
    assert parsed["release"] == (5, 0)
    assert parsed["pre_release"] == "beta1"
    assert parsed["is_valid"]

    mu = parse_version("MU (3.0.0)")
    assert not mu["is_valid"]
    assert mu["release"] == (3, 0, 0)


def test_compare_versions():
    assert compare_versions("4.10", "4.9") == 1
    assert compare_versions("4.2", "4.2.0") == 0
    assert compare_versions("5.0-beta1", "5.0") == -1
    assert compare_versions("2.0.0", "2.0.1") == -1


def test_earliest_version():
    assert earliest_version(["4.7.1", "4.10", "4.7"]) == "4.7"
    assert earliest_version(["MU (3.0.0)", "2.0.0"]) == "2.0.0"
    assert earliest_version([]) is None


def test_explicit_version_is_returned_unchanged(store):
    result = VersionResolver(store).resolve("not-a-known-version")
    assert result.ok
    assert result.value == "not-a-known-version"


def test_current_version_from_imported_option(store):
    store.ensure_term("since", "4.9.0")
    store.set_option("imported_version", "4.9.0")

    result = VersionResolver(store).resolve()

    assert result.ok
    assert result.value == "4.9.0"


def test_current_version_failure_reports_all_messages(store):
    store.set_option("imported_version", "4.9.0")

    result = VersionResolver(store).resolve(None)

    assert not result.ok
    assert result.error_kind is ErrorKind.INPUT
    assert result.messages[0] == "Couldn't get current version"
    assert len(result.messages) == 2
