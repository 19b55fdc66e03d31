"""
modpackctl 下载层

包含下载管理和文件校验。
"""

from modpackctl.download.manager import DownloadManager, DownloadStats
from modpackctl.download.verifier import FileVerifier

__all__ = [
    "DownloadManager",
    "DownloadStats",
    "FileVerifier",
]
