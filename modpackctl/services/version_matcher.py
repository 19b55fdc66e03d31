"""
版本匹配服务

从兼容版本列表中挑选要下载的版本与文件。
"""

from datetime import datetime, timezone
from typing import List, Optional

from modpackctl.models import FileInfo, VersionInfo

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class VersionMatcher:
    """版本匹配器"""

    @staticmethod
    def _published(version: VersionInfo) -> datetime:
        published = version.date_published
        if published is None:
            return _EPOCH
        if published.tzinfo is None:
            return published.replace(tzinfo=timezone.utc)
        return published

    def select_latest(self, versions: List[VersionInfo]) -> Optional[VersionInfo]:
        """
        选择发布时间最新的版本

        使用稳定排序，发布时间相同时保留 API 返回的先后顺序。
        """
        if not versions:
            return None
        ordered = sorted(versions, key=self._published, reverse=True)
        return ordered[0]

    def select_pinned(
        self,
        versions: List[VersionInfo],
        pinned: str,
    ) -> Optional[VersionInfo]:
        """按 version_number 或版本 id 查找固定版本"""
        for version in versions:
            if pinned in (version.version, version.id):
                return version
        return None

    def select(
        self,
        versions: List[VersionInfo],
        pinned: Optional[str] = None,
    ) -> Optional[VersionInfo]:
        if pinned:
            return self.select_pinned(versions, pinned)
        return self.select_latest(versions)

    @staticmethod
    def primary_file(version: VersionInfo) -> Optional[FileInfo]:
        """获取主文件，没有标记 primary 的文件时返回第一个文件"""
        if not version.files:
            return None

        for file in version.files:
            if file.primary:
                return file

        return version.files[0]

    @staticmethod
    def find_file(versions: List[VersionInfo], filename: str) -> Optional[FileInfo]:
        """在版本列表中查找文件名完全一致的文件"""
        for version in versions:
            for file in version.files:
                if file.filename == filename:
                    return file
        return None
