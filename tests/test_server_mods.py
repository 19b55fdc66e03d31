import json
import os

import pytest

from modpackctl.exceptions import ServerModsError
from modpackctl.models import ExternalMod, ReportEntry, ReportStatus, SideSupport
from modpackctl.server_mods import ServerModExtractor, extract_server_mods


def write(path, content=b"jar"):
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(content)


def entry(file, server_side=None, status=ReportStatus.DOWNLOADED):
    return ReportEntry(
        query=file, status=status, id="p", file=file, server_side=server_side
    )


@pytest.fixture
def extractor(config):
    return ServerModExtractor(config.mods_dir, config.server_dir)


def copied(config):
    return sorted(os.listdir(config.server_dir))


def test_external_server_side_is_copied(config, extractor):
    write(os.path.join(config.mods_dir, "server.jar"))
    write(os.path.join(config.mods_dir, "client.jar"))
    external = [
        ExternalMod(file="server.jar", url="u", side="server"),
        ExternalMod(file="client.jar", url="u", side="client"),
    ]
    result = extractor.extract([], external)
    assert copied(config) == ["server.jar"]
    assert [mod.name for mod in result.excluded] == ["client.jar"]


def test_unsupported_never_copied_even_with_unknown_flag(config):
    write(os.path.join(config.mods_dir, "a.jar"))
    write(os.path.join(config.mods_dir, "b.jar"))
    extractor = ServerModExtractor(
        config.mods_dir, config.server_dir, include_unknown=True
    )
    result = extractor.extract(
        [entry("a.jar", server_side="unsupported"), entry("b.jar")], []
    )
    assert copied(config) == ["b.jar"]
    assert [mod.file for mod in result.unknown] == ["b.jar"]


def test_unknown_listed_but_not_copied_by_default(config, extractor):
    write(os.path.join(config.mods_dir, "a.jar"))
    write(os.path.join(config.mods_dir, "b.jar"))
    result = extractor.extract(
        [entry("a.jar", server_side="required"), entry("b.jar")], []
    )
    assert copied(config) == ["a.jar"]
    assert [(mod.file, mod.support) for mod in result.unknown] == [
        ("b.jar", SideSupport.UNKNOWN)
    ]


def test_only_downloaded_entries_considered(config, extractor):
    result = extractor.extract(
        [entry("gone.jar", server_side="required", status=ReportStatus.NOT_FOUND)],
        [],
    )
    assert result.copied == []
    assert copied(config) == []


def test_copy_flattens_subdirectories(config, extractor):
    write(os.path.join(config.mods_dir, "extra", "deep.jar"), b"deep")
    extractor.extract([], [ExternalMod(file="extra/deep.jar", url="u", side="both")])
    assert copied(config) == ["deep.jar"]
    with open(os.path.join(config.server_dir, "deep.jar"), "rb") as f:
        assert f.read() == b"deep"


def test_external_without_file_is_skipped(config, extractor):
    result = extractor.extract([], [ExternalMod(file="", url="u", side="server")])
    assert result.copied == []


def test_clean_removes_stale_files(config):
    write(os.path.join(config.server_dir, "stale.jar"))
    write(os.path.join(config.mods_dir, "a.jar"))
    extractor = ServerModExtractor(config.mods_dir, config.server_dir, clean=True)
    extractor.extract([entry("a.jar", server_side="optional")], [])
    assert copied(config) == ["a.jar"]


def test_without_clean_keeps_existing_files(config, extractor):
    write(os.path.join(config.server_dir, "stale.jar"))
    write(os.path.join(config.mods_dir, "a.jar"))
    extractor.extract([entry("a.jar", server_side="optional")], [])
    assert copied(config) == ["a.jar", "stale.jar"]


def test_missing_source_is_fatal(config, extractor):
    with pytest.raises(ServerModsError):
        extractor.extract([entry("missing.jar", server_side="required")], [])


def test_extract_server_mods_without_inputs(config):
    result = extract_server_mods(config)
    assert result.copied == []
    assert os.path.isdir(config.server_dir)


def test_extract_server_mods_reads_files(config):
    write(os.path.join(config.mods_dir, "a.jar"))
    write(os.path.join(config.mods_dir, "ext.jar"))
    with open(config.report_path, "w") as f:
        json.dump(
            [{"query": "a", "status": "downloaded", "file": "a.jar", "id": "p",
              "server_side": "required"}],
            f,
        )
    with open(config.external_path, "w") as f:
        json.dump([{"file": "ext.jar", "url": "u", "serverSide": "optional"}], f)

    result = extract_server_mods(config)
    assert sorted(mod.file for mod in result.copied) == ["a.jar", "ext.jar"]
