from modpackctl.models import VersionInfo
from modpackctl.services import VersionMatcher

from conftest import make_file, make_version


def versions(*raw):
    return [VersionInfo.from_modrinth(v) for v in raw]


def test_select_latest_by_publish_date():
    matcher = VersionMatcher()
    picked = matcher.select_latest(
        versions(
            make_version("a", "1.0", "2024-01-01T00:00:00Z"),
            make_version("b", "1.2", "2024-03-01T00:00:00Z"),
            make_version("c", "1.1", "2024-02-01T00:00:00Z"),
        )
    )
    assert picked.id == "b"


def test_equal_timestamps_keep_response_order():
    matcher = VersionMatcher()
    picked = matcher.select_latest(
        versions(
            make_version("first", "1.0", "2024-01-01T00:00:00Z"),
            make_version("second", "1.0-b", "2024-01-01T00:00:00Z"),
        )
    )
    assert picked.id == "first"


def test_missing_date_sorts_last():
    matcher = VersionMatcher()
    picked = matcher.select_latest(
        versions(
            make_version("undated", "2.0", None),
            make_version("dated", "1.0", "2020-01-01T00:00:00Z"),
        )
    )
    assert picked.id == "dated"


def test_select_empty():
    assert VersionMatcher().select([]) is None


def test_select_pinned_by_number_or_id():
    matcher = VersionMatcher()
    available = versions(
        make_version("a", "1.0", "2024-01-01T00:00:00Z"),
        make_version("b", "2.0", "2024-02-01T00:00:00Z"),
    )
    assert matcher.select(available, pinned="1.0").id == "a"
    assert matcher.select(available, pinned="b").id == "b"
    assert matcher.select(available, pinned="3.0") is None


def test_primary_file_preferred():
    (version,) = versions(
        make_version(
            "a",
            "1.0",
            "2024-01-01T00:00:00Z",
            [make_file("sources.jar"), make_file("main.jar", primary=True)],
        )
    )
    assert VersionMatcher.primary_file(version).filename == "main.jar"


def test_first_file_when_no_primary():
    (version,) = versions(
        make_version(
            "a", "1.0", "2024-01-01T00:00:00Z", [make_file("x.jar"), make_file("y.jar")]
        )
    )
    assert VersionMatcher.primary_file(version).filename == "x.jar"


def test_find_file_scans_all_versions():
    available = versions(
        make_version("a", "2.0", "2024-02-01T00:00:00Z", [make_file("m-2.0.jar")]),
        make_version("b", "1.0", "2024-01-01T00:00:00Z", [make_file("m-1.0.jar")]),
    )
    assert VersionMatcher.find_file(available, "m-1.0.jar").url.endswith("m-1.0.jar")
    assert VersionMatcher.find_file(available, "m-3.0.jar") is None
