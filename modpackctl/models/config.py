"""
配置模型

整合包工具链共享的配置结构。优先级：命令行参数 > 配置文件 > 内置默认值。
"""

import os
from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Optional

from modpackctl.exceptions import ConfigValidationError


MODRINTH_BASE_URL = "https://api.modrinth.com/v2"
DEFAULT_USER_AGENT = "modpackctl/0.1.0 (local script)"
REPORT_FILENAME = "modrinth_report.json"
EXTERNAL_FILENAME = "external_mods.json"
PINS_FILENAME = "modrinth_pins.json"
# add / update 流程未指定加载器版本时使用
PIPELINE_LOADER_VERSION = "21.11.13-beta"


class ModLoader(Enum):
    """模组加载器"""

    FORGE = "forge"
    NEOFORGE = "neoforge"
    FABRIC = "fabric"
    QUILT = "quilt"


@dataclass
class PackConfig:
    """
    整合包配置

    report / external / pins 未显式指定时位于 mods_dir 下。
    """

    loader: ModLoader = ModLoader.NEOFORGE
    game_version: str = "1.21.11"
    loader_version: Optional[str] = None
    mods_dir: str = "mods"
    mod_list: str = os.path.join("mods", "mods.json")
    report: Optional[str] = None
    external: Optional[str] = None
    pins: Optional[str] = None
    output: str = "neoforge-1.21.11.mrpack"
    server_dir: str = "server_mods"
    name: str = "NeoForge 1.21.11 Mods"
    summary: str = "Auto-generated Modrinth pack for the server/client mod list."
    version_id: str = "1.0.0"
    api_base_url: str = MODRINTH_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def report_path(self) -> str:
        return self.report or os.path.join(self.mods_dir, REPORT_FILENAME)

    @property
    def external_path(self) -> str:
        return self.external or os.path.join(self.mods_dir, EXTERNAL_FILENAME)

    @property
    def pins_path(self) -> str:
        return self.pins or os.path.join(self.mods_dir, PINS_FILENAME)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PackConfig":
        """
        从配置文件内容创建配置

        键可以位于顶层，也可以位于 ``pack`` 表中；未知键会被忽略。
        """
        section = data.get("pack", data) if isinstance(data, dict) else {}
        if not isinstance(section, dict):
            raise ConfigValidationError("配置项 'pack' 必须是一个表")
        return cls().with_overrides(**section)

    def with_overrides(self, **overrides: Any) -> "PackConfig":
        """返回应用了覆盖值的新配置，值为 None 的键保持不变"""
        known = {f.name for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            key = key.replace("-", "_")
            if key not in known or value is None:
                continue
            if key == "loader":
                value = parse_loader(value)
            changes[key] = value
        return replace(self, **changes)


def parse_loader(value: Any) -> ModLoader:
    """将字符串解析为 ModLoader"""
    if isinstance(value, ModLoader):
        return value
    try:
        return ModLoader(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(loader.value for loader in ModLoader)
        raise ConfigValidationError(
            f"mod loader 必须为 {allowed} 之一",
            context={"loader": value},
        )
