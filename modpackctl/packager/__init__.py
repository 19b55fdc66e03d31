"""
modpackctl 打包层

包含 mrpack 生成器。
"""

from modpackctl.packager.mrpack import MrpackBuilder, build_pack

__all__ = [
    "MrpackBuilder",
    "build_pack",
]
