"""
API 客户端

Modrinth REST API 的异步客户端。
"""

import json
from typing import List, Optional
from urllib.parse import quote

import aiohttp
from loguru import logger

from modpackctl.models import MODRINTH_BASE_URL, ProjectInfo, VersionInfo
from modpackctl.models.config import DEFAULT_USER_AGENT
from modpackctl.exceptions import APIError, APINotFoundError, APIServerError


class ModrinthClient:
    """Modrinth API 客户端"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        base_url: str = MODRINTH_BASE_URL,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self._session = session
        self._owned_session = session is None
        self.base_url = base_url.rstrip("/")
        self.user_agent = user_agent

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent}
            )
        return self._session

    async def _request(
        self,
        endpoint: str,
        params: Optional[dict] = None,
        allow_not_found: bool = False,
    ):
        """
        发送 API 请求

        allow_not_found 为真时 404 返回 None；其它非 2xx 状态码抛出 APIError。
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"GET {url} {params or ''}")
        async with self.session.get(url, params=params) as response:
            if 200 <= response.status < 300:
                return await response.json()
            if response.status == 404 and allow_not_found:
                return None
            if response.status == 404:
                error_cls = APINotFoundError
            elif response.status >= 500:
                error_cls = APIServerError
            else:
                error_cls = APIError
            raise error_cls(
                f"API 请求失败 (状态码: {response.status})",
                response=response,
            )

    async def get_project(self, idx: str) -> Optional[ProjectInfo]:
        """通过 slug 或 id 获取项目信息，不存在时返回 None"""
        response = await self._request(
            f"/project/{quote(idx, safe='')}", allow_not_found=True
        )
        if response is None:
            return None
        return ProjectInfo.from_project(response)

    async def search_projects(self, query: str, limit: int = 5) -> List[dict]:
        """按文本搜索模组类型的项目，返回原始命中列表"""
        params = {
            "query": query,
            "limit": str(limit),
            "facets": json.dumps([["project_type:mod"]]),
        }
        response = await self._request("/search", params)
        if not response:
            return []
        return list(response.get("hits") or [])

    async def get_versions(
        self,
        idx: str,
        mc_version: str,
        mod_loader: str,
    ) -> List[VersionInfo]:
        """
        获取与指定 Minecraft 版本和加载器兼容的全部版本

        Returns:
            按 API 返回顺序排列的版本列表
        """
        params = {
            "game_versions": json.dumps([mc_version]),
            "loaders": json.dumps([mod_loader]),
        }
        response = await self._request(
            f"/project/{quote(idx, safe='')}/version", params
        )
        if not response:
            return []
        return [VersionInfo.from_modrinth(version) for version in response]

    async def close(self):
        """关闭客户端"""
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()
