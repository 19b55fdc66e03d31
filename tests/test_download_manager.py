import os

import aiohttp
import pytest

from modpackctl.download import DownloadManager
from modpackctl.exceptions import DownloadNetworkError

URL = "https://cdn.example/m.jar"


class BrokenContent:
    """先返回一块数据，随后连接中断"""

    async def iter_chunked(self, size):
        yield b"partial"
        raise aiohttp.ClientPayloadError("connection reset")


class FakeResponse:
    def __init__(self, status=200):
        self.status = status
        self.content = BrokenContent()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    closed = False

    def __init__(self, response):
        self.response = response
        self.urls = []

    def get(self, url):
        self.urls.append(url)
        return self.response


async def test_interrupted_stream_removes_partial_file(tmp_path):
    session = FakeSession(FakeResponse())
    manager = DownloadManager(session=session)

    with pytest.raises(DownloadNetworkError) as exc_info:
        await manager.download_file(URL, "m.jar", str(tmp_path))

    assert "connection reset" in exc_info.value.message
    assert manager.stats.bytes_downloaded == len(b"partial")
    assert manager.stats.failed == 1
    assert not os.path.exists(tmp_path / "m.jar")


async def test_injected_session_is_not_closed(tmp_path):
    session = FakeSession(FakeResponse())
    async with DownloadManager(session=session) as manager:
        with pytest.raises(DownloadNetworkError):
            await manager.download_file(URL, "m.jar", str(tmp_path))
    assert session.closed is False
