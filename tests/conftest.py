import sys
from typing import Dict, List, Optional

import pytest
from loguru import logger

from modpackctl.exceptions import DownloadNetworkError
from modpackctl.models import PackConfig, ProjectInfo, VersionInfo


@pytest.fixture(autouse=True)
def _reset_logger():
    logger.remove()
    logger.add(sys.stderr, level="DEBUG")
    yield
    logger.remove()


@pytest.fixture
def config(tmp_path) -> PackConfig:
    mods_dir = tmp_path / "mods"
    mods_dir.mkdir()
    return PackConfig(
        game_version="1.21.1",
        loader_version="21.1.123",
        mods_dir=str(mods_dir),
        mod_list=str(mods_dir / "mods.json"),
        output=str(tmp_path / "pack.mrpack"),
        server_dir=str(tmp_path / "server_mods"),
    )


def make_version(
    version_id: str,
    version_number: str,
    date: str,
    files: Optional[List[dict]] = None,
) -> dict:
    """Modrinth /project/{id}/version 返回的单个版本"""
    return {
        "id": version_id,
        "name": version_number,
        "version_number": version_number,
        "date_published": date,
        "loaders": ["neoforge"],
        "game_versions": ["1.21.1"],
        "files": files if files is not None else [],
    }


def make_file(filename: str, primary: bool = False, sha1: str = "aa") -> dict:
    return {
        "url": f"https://cdn.modrinth.com/data/x/{filename}",
        "filename": filename,
        "size": 3,
        "primary": primary,
        "hashes": {"sha1": sha1, "sha512": sha1 * 4},
    }


class FakeClient:
    """内存中的 ModrinthClient 替身"""

    def __init__(
        self,
        projects: Optional[Dict[str, dict]] = None,
        hits: Optional[Dict[str, List[dict]]] = None,
        versions: Optional[Dict[str, List[dict]]] = None,
    ):
        self.projects = projects or {}
        self.hits = hits or {}
        self.versions = versions or {}
        self.calls: List[tuple] = []

    async def get_project(self, idx):
        self.calls.append(("project", idx))
        data = self.projects.get(idx)
        return ProjectInfo.from_project(data) if data else None

    async def search_projects(self, query, limit=5):
        self.calls.append(("search", query))
        return self.hits.get(query, [])

    async def get_versions(self, idx, mc_version, mod_loader):
        self.calls.append(("versions", idx, mc_version, mod_loader))
        return [VersionInfo.from_modrinth(v) for v in self.versions.get(idx, [])]


class FakeDownloadManager:
    """把文件内容直接写入目标目录的下载器替身"""

    def __init__(self, fail: Optional[Dict[str, str]] = None):
        self.fail = fail or {}
        self.downloaded: List[str] = []

    async def download_file(self, url, filename, download_dir):
        if filename in self.fail:
            raise DownloadNetworkError(self.fail[filename], context={"url": url})
        path = f"{download_dir}/{filename}"
        with open(path, "wb") as f:
            f.write(b"jar")
        self.downloaded.append(filename)
        return path
