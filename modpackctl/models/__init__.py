"""
modpackctl 数据模型包

包含配置模型、API 模型和报告模型定义。
"""

from modpackctl.models.config import (
    ModLoader,
    PackConfig,
    parse_loader,
    MODRINTH_BASE_URL,
)
from modpackctl.models.api import (
    ResolvedBy,
    ProjectInfo,
    FileInfo,
    VersionInfo,
)
from modpackctl.models.report import (
    ReportStatus,
    SideSupport,
    ReportEntry,
    ExternalMod,
    ManifestFile,
)

__all__ = [
    # 配置模型
    "ModLoader",
    "PackConfig",
    "parse_loader",
    "MODRINTH_BASE_URL",
    # API 模型
    "ResolvedBy",
    "ProjectInfo",
    "FileInfo",
    "VersionInfo",
    # 报告模型
    "ReportStatus",
    "SideSupport",
    "ReportEntry",
    "ExternalMod",
    "ManifestFile",
]
