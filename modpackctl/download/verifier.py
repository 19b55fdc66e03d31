"""
文件校验器

计算本地文件的 SHA1 / SHA512 摘要与文件大小。
"""

import hashlib
import os
from typing import Dict, Iterable

import aiofiles


class FileVerifier:
    """文件校验器"""

    CHUNK_SIZE = 65536

    @staticmethod
    async def calc_hashes(
        file_path: str,
        algorithms: Iterable[str] = ("sha1", "sha512"),
    ) -> Dict[str, str]:
        """
        一次读取文件，同时计算多个摘要

        Args:
            file_path: 文件路径
            algorithms: hashlib 支持的算法名

        Returns:
            算法名到十六进制摘要的映射
        """
        digests = {name: hashlib.new(name) for name in algorithms}
        async with aiofiles.open(file_path, "rb") as f:
            while True:
                data = await f.read(FileVerifier.CHUNK_SIZE)
                if not data:
                    break
                for digest in digests.values():
                    digest.update(data)
        return {name: digest.hexdigest() for name, digest in digests.items()}

    @staticmethod
    def get_size(file_path: str) -> int:
        """获取文件大小，文件不存在时抛出 OSError"""
        return os.path.getsize(file_path)
