"""
模组解析服务

把用户给出的标识（slug、id 或自由文本）解析为 Modrinth 项目。
"""

from typing import Optional

from loguru import logger

from modpackctl.models import ProjectInfo
from modpackctl.services.api_client import ModrinthClient


class ModResolver:
    """模组解析器"""

    def __init__(self, client: ModrinthClient):
        self.client = client

    async def resolve(self, query: str) -> Optional[ProjectInfo]:
        """
        解析模组标识

        先按 slug/id 直接查询项目，404 时退回到搜索并取第一个命中。
        除 404 以外的 API 错误会直接抛出。

        Args:
            query: 模组 slug、id 或搜索关键字

        Returns:
            ProjectInfo 或 None（两种方式都找不到时）
        """
        project = await self.client.get_project(query)
        if project is not None:
            return project

        logger.debug(f"'{query}' 不是有效的 slug，尝试搜索")
        hits = await self.client.search_projects(query)
        if not hits:
            return None
        return ProjectInfo.from_search_hit(hits[0])
