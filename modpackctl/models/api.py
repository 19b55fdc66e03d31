"""
API 数据模型

定义 Modrinth API 相关的数据类，包括项目信息、版本信息等。
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional


class ResolvedBy(Enum):
    """项目的解析方式"""

    SLUG = "slug"
    SEARCH = "search"


@dataclass
class ProjectInfo:
    """
    模组项目信息。
    """

    id: str
    slug: str
    title: str
    resolved_by: ResolvedBy = ResolvedBy.SLUG

    @classmethod
    def from_project(cls, data: dict) -> "ProjectInfo":
        """由 /project/{id} 返回值构造"""
        return cls(
            id=data["id"],
            slug=data.get("slug", ""),
            title=data.get("title", ""),
            resolved_by=ResolvedBy.SLUG,
        )

    @classmethod
    def from_search_hit(cls, hit: dict) -> "ProjectInfo":
        """由 /search 命中结果构造"""
        return cls(
            id=hit["project_id"],
            slug=hit.get("slug", ""),
            title=hit.get("title", ""),
            resolved_by=ResolvedBy.SEARCH,
        )


@dataclass
class FileInfo:
    """文件信息"""

    url: str
    filename: str
    size: int = 0
    primary: bool = False
    hashes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_modrinth(cls, data: dict) -> "FileInfo":
        return cls(
            url=data["url"],
            filename=data["filename"],
            size=data.get("size", 0),
            primary=bool(data.get("primary", False)),
            hashes=dict(data.get("hashes") or {}),
        )


@dataclass
class VersionInfo:
    """
    模组版本信息。
    """

    id: str
    name: str
    version: str
    date_published: Optional[datetime]
    loaders: List[str]
    game_versions: List[str]
    files: List[FileInfo]

    @classmethod
    def from_modrinth(cls, data: dict) -> "VersionInfo":
        """
        将 Modrinth API 返回的版本信息转换为 VersionInfo 对象。
        """
        files = [FileInfo.from_modrinth(file) for file in data.get("files") or []]
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            version=data.get("version_number", ""),
            date_published=parse_timestamp(data.get("date_published")),
            loaders=list(data.get("loaders", [])),
            game_versions=list(data.get("game_versions", [])),
            files=files,
        )


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """解析 ISO 8601 时间戳，无法解析时返回 None"""
    if not value:
        return None
    try:
        # Python 3.10 的 fromisoformat 不接受 "Z" 后缀
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
