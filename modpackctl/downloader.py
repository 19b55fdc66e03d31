"""
模组下载器

逐个解析模组标识、挑选兼容版本并下载主文件，最后写出下载报告。
单个模组的失败只记录在报告中，不会中断整批处理。
"""

import os
from typing import Dict, List, Optional

from loguru import logger

from modpackctl.download import DownloadManager
from modpackctl.exceptions import DownloadError, PreconditionError
from modpackctl.modlist import load_list_file, load_mod_list
from modpackctl.models import (
    PackConfig,
    ProjectInfo,
    ReportEntry,
    ReportStatus,
    ResolvedBy,
)
from modpackctl.report import load_pins, save_report
from modpackctl.services import ModrinthClient, ModResolver, VersionMatcher


def collect_mods(
    config: PackConfig,
    mods: Optional[List[str]] = None,
    mods_file: Optional[str] = None,
) -> List[str]:
    """
    确定本次要处理的模组列表

    优先级：命令行内联列表 > --mods-file > 默认 mods.json。

    Raises:
        PreconditionError: 没有任何来源或列表为空
    """
    if mods:
        selected = [mod.strip() for mod in mods if mod.strip()]
    elif mods_file:
        selected = load_list_file(mods_file)
    elif os.path.exists(config.mod_list):
        selected = load_mod_list(config.mod_list, required=True)
    else:
        raise PreconditionError(
            f"缺少默认模组列表: {config.mod_list}，"
            "请使用 --mods、--mods-file 或创建 mods/mods.json",
            context={"path": config.mod_list},
        )

    if not selected:
        raise PreconditionError("没有找到任何模组标识")
    return selected


class ModDownloader:
    """模组下载器"""

    def __init__(
        self,
        config: PackConfig,
        client: ModrinthClient,
        download_manager: DownloadManager,
        pins: Optional[Dict[str, str]] = None,
    ):
        self.config = config
        self.client = client
        self.resolver = ModResolver(client)
        self.matcher = VersionMatcher()
        self.download_manager = download_manager
        self.pins = pins or {}

    def _pinned_version(self, query: str, project: ProjectInfo) -> Optional[str]:
        for key in (query, project.slug, project.id):
            if key and key in self.pins:
                return self.pins[key]
        return None

    async def process(self, query: str) -> ReportEntry:
        """
        处理单个模组标识并返回报告条目

        解析阶段除 404 以外的 API 错误会向上抛出并终止整批任务。
        """
        entry = ReportEntry(query=query)
        loader = self.config.loader.value
        game_version = self.config.game_version

        project = await self.resolver.resolve(query)
        if project is None:
            entry.status = ReportStatus.NOT_FOUND
            logger.warning(f"[MISS] {query}: 在 Modrinth 上找不到")
            return entry
        entry.apply_project(project)

        versions = await self.client.get_versions(project.id, game_version, loader)
        pinned = self._pinned_version(query, project)
        version = self.matcher.select(versions, pinned)
        if version is None:
            entry.status = ReportStatus.NO_VERSION
            if pinned:
                logger.warning(
                    f"[MISS] {query}: 固定版本 {pinned} 没有 {loader} {game_version} 构建"
                )
            else:
                logger.warning(f"[MISS] {query}: 没有 {loader} {game_version} 的构建")
            return entry
        if pinned:
            logger.info(f"{query}: 使用固定版本 {version.version}，不选择最新构建")

        file = self.matcher.primary_file(version)
        if file is None:
            entry.status = ReportStatus.NO_FILES
            logger.warning(f"[MISS] {query}: 最新版本中没有可下载的文件")
            return entry

        try:
            await self.download_manager.download_file(
                file.url, file.filename, self.config.mods_dir
            )
        except DownloadError as e:
            entry.status = ReportStatus.DOWNLOAD_FAILED
            entry.error = e.message
            logger.error(f"[FAIL] {query}: 下载失败 ({entry.error})")
            return entry

        entry.status = ReportStatus.DOWNLOADED
        entry.version = version.version
        entry.file = file.filename
        if project.resolved_by is ResolvedBy.SEARCH:
            logger.success(f"[OK] {query} -> {project.title} ({file.filename})")
        else:
            logger.success(f"[OK] {query} ({file.filename})")
        return entry

    async def run(self, mods: List[str]) -> List[ReportEntry]:
        """顺序处理所有模组并写出报告"""
        os.makedirs(self.config.mods_dir, exist_ok=True)

        results: List[ReportEntry] = []
        for query in mods:
            results.append(await self.process(query))

        save_report(self.config.report_path, results)
        logger.info(f"报告已写入 {self.config.report_path}")

        misses = [entry for entry in results if not entry.downloaded]
        if misses:
            logger.warning(f"{len(misses)} 个模组没有下载成功，详情请查看报告")
        return results


async def download_mods(
    config: PackConfig,
    mods: Optional[List[str]] = None,
    mods_file: Optional[str] = None,
) -> List[ReportEntry]:
    """
    下载入口：确定模组列表、建立客户端并运行下载器

    Returns:
        报告条目列表
    """
    selected = collect_mods(config, mods, mods_file)
    pins = load_pins(config.pins_path)
    if pins:
        logger.info(f"已读取版本固定文件 {config.pins_path} ({len(pins)} 项)")

    async with ModrinthClient(
        base_url=config.api_base_url, user_agent=config.user_agent
    ) as client, DownloadManager(user_agent=config.user_agent) as manager:
        downloader = ModDownloader(config, client, manager, pins)
        entries = await downloader.run(selected)
        stats = manager.stats
        logger.debug(
            f"下载统计: 成功 {stats.completed}/{stats.total}，"
            f"失败 {stats.failed}，共 {stats.bytes_downloaded} 字节"
        )
        return entries
