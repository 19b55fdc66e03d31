"""
报告与整合包数据模型

下载报告条目、外部模组条目、服务端支持状态以及 mrpack 清单文件条目。
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from modpackctl.models.api import ProjectInfo, ResolvedBy


class ReportStatus(Enum):
    """下载报告中的条目状态"""

    NOT_FOUND = "not_found"
    NO_VERSION = "no_version"
    NO_FILES = "no_files"
    DOWNLOAD_FAILED = "download_failed"
    DOWNLOADED = "downloaded"


class SideSupport(Enum):
    """模组在某一端的支持情况"""

    SUPPORTED = "supported"
    UNSUPPORTED = "unsupported"
    UNKNOWN = "unknown"

    @classmethod
    def from_side_value(cls, value: Optional[str]) -> "SideSupport":
        """
        将 Modrinth 风格的 side 字段（required/optional/unsupported）映射为支持状态

        没有任何信息时为 UNKNOWN，只有显式的 ``unsupported`` 才视为不支持。
        """
        if not value:
            return cls.UNKNOWN
        if str(value).strip().lower() == "unsupported":
            return cls.UNSUPPORTED
        return cls.SUPPORTED


_REPORT_KEYS = (
    "query",
    "status",
    "id",
    "slug",
    "title",
    "resolvedBy",
    "version",
    "file",
    "error",
)


@dataclass
class ReportEntry:
    """下载报告中的单个条目"""

    query: str
    status: Optional[ReportStatus] = None
    id: Optional[str] = None
    slug: Optional[str] = None
    title: Optional[str] = None
    resolved_by: Optional[ResolvedBy] = None
    version: Optional[str] = None
    file: Optional[str] = None
    error: Optional[str] = None
    client_side: Optional[str] = None
    server_side: Optional[str] = None
    # 手工或外部工具写入的其它字段，重新写出时原样保留
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def downloaded(self) -> bool:
        return self.status is ReportStatus.DOWNLOADED

    @property
    def display_name(self) -> str:
        return self.title or self.slug or self.query

    def apply_project(self, project: ProjectInfo) -> None:
        self.id = project.id
        self.slug = project.slug
        self.title = project.title
        self.resolved_by = project.resolved_by

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"query": self.query}
        if self.id is not None:
            data["id"] = self.id
            data["slug"] = self.slug
            data["title"] = self.title
        if self.resolved_by is not None:
            data["resolvedBy"] = self.resolved_by.value
        if self.status is not None:
            data["status"] = self.status.value
        if self.version is not None:
            data["version"] = self.version
        if self.file is not None:
            data["file"] = self.file
        if self.error is not None:
            data["error"] = self.error
        if self.client_side is not None:
            data["clientSide"] = self.client_side
        if self.server_side is not None:
            data["serverSide"] = self.server_side
        for key, value in self.extra.items():
            data.setdefault(key, value)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReportEntry":
        status = data.get("status")
        resolved_by = data.get("resolvedBy")
        extra = {
            key: value
            for key, value in data.items()
            if key not in _REPORT_KEYS
            and key not in ("clientSide", "client_side", "serverSide", "server_side")
        }
        return cls(
            query=str(data.get("query", "")),
            status=_parse_enum(ReportStatus, status),
            id=data.get("id"),
            slug=data.get("slug"),
            title=data.get("title"),
            resolved_by=_parse_enum(ResolvedBy, resolved_by),
            version=data.get("version"),
            file=data.get("file"),
            error=data.get("error"),
            client_side=data.get("clientSide") or data.get("client_side"),
            server_side=data.get("serverSide") or data.get("server_side"),
            extra=extra,
        )


@dataclass
class ExternalMod:
    """手工维护的外部模组条目"""

    file: str
    url: str = ""
    name: Optional[str] = None
    side: Optional[str] = None
    client_side: Optional[str] = None
    server_side: Optional[str] = None

    @property
    def filename(self) -> str:
        return os.path.basename(self.file)

    @property
    def display_name(self) -> str:
        return self.name or self.file

    def local_path(self, mods_dir: str) -> str:
        if os.path.isabs(self.file):
            return self.file
        return os.path.join(mods_dir, self.file)

    def resolve_sides(self) -> tuple[Optional[str], Optional[str]]:
        """
        返回 (client_side, server_side)

        ``side`` 简写优先于显式字段。
        """
        side = (self.side or "").strip().lower()
        if side == "client":
            return "required", "unsupported"
        if side == "server":
            return "unsupported", "required"
        if side == "both":
            return "required", "required"
        return self.client_side, self.server_side

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExternalMod":
        return cls(
            file=str(data.get("file") or "").strip(),
            url=str(data.get("url") or "").strip(),
            name=data.get("name"),
            side=data.get("side"),
            client_side=data.get("clientSide") or data.get("client_side"),
            server_side=data.get("serverSide") or data.get("server_side"),
        )


@dataclass
class ManifestFile:
    """modrinth.index.json 中的文件条目"""

    path: str
    hashes: Dict[str, str]
    downloads: List[str]
    file_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": self.path,
            "hashes": self.hashes,
            "downloads": self.downloads,
            "fileSize": self.file_size,
        }


def _parse_enum(enum_cls, value):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError:
        return None
