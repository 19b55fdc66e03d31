import json

import pytest

from modpackctl.exceptions import ModListError
from modpackctl.modlist import (
    add_mods,
    load_list_file,
    load_mod_list,
    merge_mods,
    normalize_mod_input,
    save_mod_list,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("sodium", "sodium"),
        ("  sodium  ", "sodium"),
        ("Distant Horizons", "Distant Horizons"),
        ("", None),
        ("   ", None),
    ],
)
def test_normalize_plain_identifier(value, expected):
    assert normalize_mod_input(value) == expected


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://modrinth.com/mod/xaeros-minimap", "xaeros-minimap"),
        ("https://modrinth.com/project/xaeros-minimap", "xaeros-minimap"),
        ("https://modrinth.com/mod/xaeros-minimap/versions", "xaeros-minimap"),
        ("https://modrinth.com/mod/sodium/", "sodium"),
        ("https://modrinth.com/plugin/luckperms", "luckperms"),
        ("https://example.com/downloads/some-mod", "some-mod"),
        ("https://modrinth.com/", None),
    ],
)
def test_normalize_url(url, expected):
    assert normalize_mod_input(url) == expected


def test_merge_keeps_order_and_dedupes():
    assert merge_mods(["a", "b"], ["b", "c", "c"]) == ["a", "b", "c"]


def test_add_mods_creates_file(tmp_path):
    path = tmp_path / "mods" / "mods.json"
    updated, added = add_mods(
        str(path), ["sodium", "https://modrinth.com/mod/lithium", " "]
    )
    assert updated == ["sodium", "lithium"]
    assert added == 2
    assert json.loads(path.read_text()) == ["sodium", "lithium"]
    assert path.read_text().endswith("\n")


def test_add_mods_is_idempotent(tmp_path):
    path = str(tmp_path / "mods.json")
    add_mods(path, ["sodium"])
    add_mods(path, ["sodium", "https://modrinth.com/project/sodium"])
    assert load_mod_list(path) == ["sodium"]


def test_add_mods_rejects_non_array_before_writing(tmp_path):
    path = tmp_path / "mods.json"
    path.write_text('{"mods": ["sodium"]}')
    with pytest.raises(ModListError):
        add_mods(str(path), ["lithium"])
    assert json.loads(path.read_text()) == {"mods": ["sodium"]}


def test_save_then_load_round_trip(tmp_path):
    path = str(tmp_path / "mods.json")
    save_mod_list(path, ["a", "b", "c"])
    assert set(load_mod_list(path)) == {"a", "b", "c"}


def test_load_mod_list_missing_file(tmp_path):
    assert load_mod_list(str(tmp_path / "missing.json")) == []
    with pytest.raises(ModListError):
        load_mod_list(str(tmp_path / "missing.json"), required=True)


def test_load_text_list_file_skips_comments(tmp_path):
    path = tmp_path / "mods.txt"
    path.write_text("# client mods\nsodium\n\n  iris  \n#lithium\n")
    assert load_list_file(str(path)) == ["sodium", "iris"]


def test_load_json_list_file(tmp_path):
    path = tmp_path / "list.json"
    path.write_text('[" sodium ", "", "iris"]')
    assert load_list_file(str(path)) == ["sodium", "iris"]
