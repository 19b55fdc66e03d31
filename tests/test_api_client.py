import re

import pytest
from aioresponses import aioresponses

from modpackctl.exceptions import APINotFoundError, APIServerError
from modpackctl.models import ResolvedBy
from modpackctl.services import ModrinthClient, ModResolver

from conftest import make_file, make_version

API = "https://api.modrinth.com/v2"


@pytest.fixture
def mocked():
    with aioresponses() as m:
        yield m


async def test_get_project(mocked):
    mocked.get(
        f"{API}/project/sodium",
        payload={"id": "AANobbMI", "slug": "sodium", "title": "Sodium"},
    )
    async with ModrinthClient() as client:
        project = await client.get_project("sodium")
    assert project.id == "AANobbMI"
    assert project.resolved_by is ResolvedBy.SLUG


async def test_get_project_404_is_none(mocked):
    mocked.get(f"{API}/project/missing", status=404)
    async with ModrinthClient() as client:
        assert await client.get_project("missing") is None


async def test_get_project_server_error_raises(mocked):
    mocked.get(f"{API}/project/sodium", status=503)
    async with ModrinthClient() as client:
        with pytest.raises(APIServerError):
            await client.get_project("sodium")


async def test_versions_404_is_fatal(mocked):
    mocked.get(re.compile(rf"{re.escape(API)}/project/gone/version\?.*"), status=404)
    async with ModrinthClient() as client:
        with pytest.raises(APINotFoundError):
            await client.get_versions("gone", "1.21.1", "neoforge")


async def test_get_versions_sends_filters(mocked):
    mocked.get(
        re.compile(rf"{re.escape(API)}/project/abc123/version\?.*"),
        payload=[
            make_version("v1", "1.0", "2024-01-01T00:00:00Z", [make_file("a.jar")])
        ],
    )
    async with ModrinthClient() as client:
        versions = await client.get_versions("abc123", "1.21.1", "neoforge")

    assert [v.version for v in versions] == ["1.0"]
    (method, url), calls = next(iter(mocked.requests.items()))
    assert calls[0].kwargs["params"] == {
        "game_versions": '["1.21.1"]',
        "loaders": '["neoforge"]',
    }


async def test_resolver_falls_back_to_search(mocked):
    mocked.get(re.compile(rf"{re.escape(API)}/project/xaeros.*minimap$"), status=404)
    mocked.get(
        re.compile(rf"{re.escape(API)}/search\?.*"),
        payload={
            "hits": [
                {"project_id": "1bokaNcj", "slug": "xaeros-minimap", "title": "Xaero's"},
                {"project_id": "other", "slug": "other", "title": "Other"},
            ]
        },
    )
    async with ModrinthClient() as client:
        project = await ModResolver(client).resolve("xaeros minimap")

    assert project.id == "1bokaNcj"
    assert project.resolved_by is ResolvedBy.SEARCH


async def test_resolver_no_hits(mocked):
    mocked.get(f"{API}/project/nothing", status=404)
    mocked.get(re.compile(rf"{re.escape(API)}/search\?.*"), payload={"hits": []})
    async with ModrinthClient() as client:
        assert await ModResolver(client).resolve("nothing") is None
