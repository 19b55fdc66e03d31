"""
下载管理器

逐个下载文件并把响应体流式写入磁盘，不做并发、重试或断点续传。
"""

import asyncio
import os
from dataclasses import dataclass
from typing import Optional

import aiohttp
import aiofiles
from loguru import logger

from modpackctl.models.config import DEFAULT_USER_AGENT
from modpackctl.exceptions import (
    DownloadError,
    DownloadNetworkError,
    DownloadFileError,
)


@dataclass
class DownloadStats:
    """下载统计"""

    total: int = 0
    completed: int = 0
    failed: int = 0
    bytes_downloaded: int = 0


class DownloadManager:
    """下载管理器"""

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        chunk_size: int = 8192,
    ):
        self.stats = DownloadStats()
        self.user_agent = user_agent
        self.chunk_size = chunk_size
        self._session = session
        self._owned_session = session is None

    @property
    def session(self) -> aiohttp.ClientSession:
        """获取或创建 aiohttp session"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"User-Agent": self.user_agent},
                timeout=aiohttp.ClientTimeout(total=None),
            )
        return self._session

    async def download_file(self, url: str, filename: str, download_dir: str) -> str:
        """
        下载单个文件，已存在的同名文件会被覆盖

        Returns:
            写入的文件路径

        Raises:
            DownloadError: 网络错误、非 2xx 状态码或写文件失败，
                此时不完整的文件已被删除
        """
        file_path = os.path.join(download_dir, filename)
        os.makedirs(download_dir, exist_ok=True)
        self.stats.total += 1

        logger.debug(f"[开始] 下载: {filename}")
        try:
            async with self.session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise DownloadNetworkError(
                        f"HTTP {response.status} for {url}",
                        context={"url": url, "status": response.status},
                    )

                async with aiofiles.open(file_path, "wb") as f:
                    async for chunk in response.content.iter_chunked(self.chunk_size):
                        await f.write(chunk)
                        self.stats.bytes_downloaded += len(chunk)

        except DownloadError:
            self._fail(file_path)
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._fail(file_path)
            raise DownloadNetworkError(str(e) or repr(e), context={"url": url})
        except OSError as e:
            self._fail(file_path)
            raise DownloadFileError(
                f"写入文件失败: {e}", context={"url": url, "path": file_path}
            )

        self.stats.completed += 1
        logger.debug(f"[完成] '{filename}' 下载完成")
        return file_path

    def _fail(self, file_path: str) -> None:
        """记录失败并清理不完整的文件"""
        self.stats.failed += 1
        if os.path.exists(file_path):
            try:
                os.remove(file_path)
            except OSError:
                logger.warning(f"无法删除不完整的文件: {file_path}")

    async def close(self):
        if self._owned_session and self._session and not self._session.closed:
            await self._session.close()

    async def __aenter__(self):
        """异步上下文管理器入口"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """异步上下文管理器出口"""
        await self.close()
