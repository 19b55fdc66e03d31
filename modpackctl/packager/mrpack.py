"""
Mrpack 生成器

根据下载报告和外部模组列表生成 Modrinth 标准整合包 (.mrpack)。
"""

import json
import os
import shutil
import subprocess
import tempfile
from typing import Dict, List, Optional, Sequence

import aiofiles
from loguru import logger

from modpackctl.download import FileVerifier
from modpackctl.exceptions import (
    ArchiveError,
    DuplicatePathError,
    MrpackError,
    PreconditionError,
)
from modpackctl.models import ExternalMod, ManifestFile, PackConfig, ReportEntry
from modpackctl.report import load_external_mods, load_report
from modpackctl.services import ModrinthClient, VersionMatcher

INDEX_FILENAME = "modrinth.index.json"
DEFAULT_ARCHIVE_COMMAND = ("zip", "-r")


class MrpackBuilder:
    """Mrpack 构建器"""

    def __init__(
        self,
        config: PackConfig,
        client: ModrinthClient,
        archive_command: Sequence[str] = DEFAULT_ARCHIVE_COMMAND,
    ):
        self.config = config
        self.client = client
        self.matcher = VersionMatcher()
        self.verifier = FileVerifier()
        self.archive_command = list(archive_command)
        self._files: Dict[str, ManifestFile] = {}

    def _add(self, record: ManifestFile) -> None:
        if record.path in self._files:
            raise DuplicatePathError(
                f"整合包中存在重复的模组文件: {record.path}",
                context={"path": record.path},
            )
        self._files[record.path] = record

    async def add_report_entry(self, entry: ReportEntry) -> None:
        """
        从 Modrinth 重新获取已下载文件的哈希与下载地址

        Raises:
            MrpackError: Modrinth 上已找不到同名文件
        """
        versions = await self.client.get_versions(
            entry.id, self.config.game_version, self.config.loader.value
        )
        info = self.matcher.find_file(versions, entry.file)
        if info is None:
            raise MrpackError(
                f"Modrinth 上没有与 {entry.file} 匹配的文件",
                context={"project": entry.id, "file": entry.file},
            )

        local_path = os.path.join(self.config.mods_dir, entry.file)
        try:
            size = self.verifier.get_size(local_path)
        except OSError as e:
            raise MrpackError(
                f"无法读取本地文件 {local_path}: {e}", context={"path": local_path}
            )

        self._add(
            ManifestFile(
                path=f"mods/{entry.file}",
                hashes=info.hashes,
                downloads=[info.url],
                file_size=size,
            )
        )

    async def add_external(self, mod: ExternalMod) -> None:
        """外部模组不在 Modrinth 上，哈希直接由本地文件计算"""
        if not mod.file:
            raise MrpackError("外部模组条目缺少 'file'")
        if not mod.url:
            raise MrpackError(
                f"外部模组条目缺少 'url': {mod.file}", context={"file": mod.file}
            )

        local_path = mod.local_path(self.config.mods_dir)
        path = f"mods/{mod.filename}"
        if path in self._files:
            raise DuplicatePathError(
                f"整合包中存在重复的模组文件: {path}", context={"path": path}
            )

        try:
            size = self.verifier.get_size(local_path)
            hashes = await self.verifier.calc_hashes(local_path)
        except OSError as e:
            raise MrpackError(
                f"无法读取外部模组文件 {local_path}: {e}", context={"path": local_path}
            )

        self._add(
            ManifestFile(
                path=path,
                hashes=hashes,
                downloads=[mod.url],
                file_size=size,
            )
        )

    def create_manifest(self) -> dict:
        """创建 modrinth.index.json"""
        dependencies = {"minecraft": self.config.game_version}
        if self.config.loader_version:
            dependencies[self.config.loader.value] = self.config.loader_version

        return {
            "formatVersion": 1,
            "game": "minecraft",
            "versionId": self.config.version_id,
            "name": self.config.name,
            "summary": self.config.summary,
            "files": [record.to_dict() for record in self._files.values()],
            "dependencies": dependencies,
        }

    def archive(self, build_dir: str, output_path: str) -> None:
        """
        调用外部压缩工具把清单打包为 output_path

        Raises:
            ArchiveError: 找不到压缩工具或其返回非零退出码
        """
        if os.path.exists(output_path):
            # zip -r 会向已有压缩包追加内容
            os.remove(output_path)

        command = [*self.archive_command, output_path, INDEX_FILENAME]
        try:
            result = subprocess.run(command, cwd=build_dir)
        except FileNotFoundError:
            raise ArchiveError(
                f"找不到压缩工具 '{self.archive_command[0]}'，请确认已安装",
                context={"command": command},
            )
        if result.returncode != 0:
            raise ArchiveError(
                f"压缩命令执行失败 (退出码: {result.returncode})",
                context={"command": command, "returncode": result.returncode},
            )

    async def build(
        self,
        report: List[ReportEntry],
        external: List[ExternalMod],
        output_path: Optional[str] = None,
    ) -> str:
        """
        构建 mrpack 文件

        Returns:
            生成的文件路径
        """
        downloaded = [entry for entry in report if entry.downloaded]
        if not downloaded:
            raise PreconditionError("报告中没有已下载的模组")

        self._files = {}
        for entry in downloaded:
            if not entry.id or not entry.file:
                logger.debug(f"跳过缺少 id 或 file 的条目: {entry.query}")
                continue
            await self.add_report_entry(entry)

        for mod in external:
            await self.add_external(mod)

        manifest = self.create_manifest()
        output_path = os.path.abspath(output_path or self.config.output)
        os.makedirs(os.path.dirname(output_path), exist_ok=True)

        build_dir = tempfile.mkdtemp(prefix="mrpack-")
        try:
            index_path = os.path.join(build_dir, INDEX_FILENAME)
            async with aiofiles.open(index_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(manifest, indent=2))
            logger.debug(f"{INDEX_FILENAME} 已生成，共 {len(manifest['files'])} 个文件")

            self.archive(build_dir, output_path)
        finally:
            shutil.rmtree(build_dir, ignore_errors=True)

        logger.success(f"整合包已写入 {output_path}")
        return output_path


async def build_pack(
    config: PackConfig,
    archive_command: Sequence[str] = DEFAULT_ARCHIVE_COMMAND,
) -> str:
    """打包入口：读取报告与外部列表并生成 .mrpack"""
    report = load_report(config.report_path)
    if not report:
        raise PreconditionError(f"下载报告为空: {config.report_path}")
    external = load_external_mods(config.external_path)

    async with ModrinthClient(
        base_url=config.api_base_url, user_agent=config.user_agent
    ) as client:
        builder = MrpackBuilder(config, client, archive_command)
        return await builder.build(report, external)
