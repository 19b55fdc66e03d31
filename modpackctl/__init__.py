"""
modpackctl - Modrinth 整合包维护工具

维护模组列表、从 Modrinth 下载模组、生成 .mrpack 整合包并提取服务端模组。
"""

__version__ = "0.1.0"

from modpackctl.models import PackConfig, ModLoader
from modpackctl.exceptions import ModpackError

__all__ = [
    "PackConfig",
    "ModLoader",
    "ModpackError",
    "__version__",
]
