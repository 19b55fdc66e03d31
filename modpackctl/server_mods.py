"""
服务端模组提取

根据下载报告与外部模组列表中的 side 信息，把服务端可用的模组复制到单独目录。
"""

import os
import shutil
from dataclasses import dataclass, field
from typing import List, Optional

from loguru import logger

from modpackctl.exceptions import ServerModsError
from modpackctl.models import ExternalMod, PackConfig, ReportEntry, SideSupport
from modpackctl.report import load_external_mods, load_report


@dataclass
class ServerMod:
    """待复制的模组"""

    name: str
    file: str
    support: SideSupport


@dataclass
class ServerModsResult:
    """提取结果"""

    output_dir: str
    copied: List[ServerMod] = field(default_factory=list)
    unknown: List[ServerMod] = field(default_factory=list)
    excluded: List[ServerMod] = field(default_factory=list)


class ServerModExtractor:
    """服务端模组提取器"""

    def __init__(
        self,
        mods_dir: str,
        output_dir: str,
        include_unknown: bool = False,
        clean: bool = False,
    ):
        self.mods_dir = mods_dir
        self.output_dir = output_dir
        self.include_unknown = include_unknown
        self.clean = clean

    @staticmethod
    def classify_report_entry(entry: ReportEntry) -> Optional[ServerMod]:
        """只有已下载的条目才参与提取"""
        if not entry.downloaded or not entry.file:
            return None
        return ServerMod(
            name=entry.display_name,
            file=entry.file,
            support=SideSupport.from_side_value(entry.server_side),
        )

    @staticmethod
    def classify_external(mod: ExternalMod) -> Optional[ServerMod]:
        if not mod.file:
            return None
        _, server_side = mod.resolve_sides()
        return ServerMod(
            name=mod.display_name,
            file=mod.file,
            support=SideSupport.from_side_value(server_side),
        )

    def select(
        self,
        candidates: List[ServerMod],
        result: ServerModsResult,
    ) -> List[ServerMod]:
        """
        按支持状态筛选

        UNSUPPORTED 总是排除；UNKNOWN 会被记录，仅在 include_unknown 时复制。
        """
        selected = []
        for mod in candidates:
            if mod.support is SideSupport.UNSUPPORTED:
                result.excluded.append(mod)
                continue
            if mod.support is SideSupport.UNKNOWN:
                result.unknown.append(mod)
                if not self.include_unknown:
                    continue
            selected.append(mod)
        return selected

    def _prepare_output(self) -> None:
        if self.clean and os.path.exists(self.output_dir):
            shutil.rmtree(self.output_dir)
        os.makedirs(self.output_dir, exist_ok=True)

    def extract(
        self,
        report: List[ReportEntry],
        external: List[ExternalMod],
    ) -> ServerModsResult:
        result = ServerModsResult(output_dir=self.output_dir)

        candidates = [
            mod
            for mod in (
                *(self.classify_report_entry(entry) for entry in report),
                *(self.classify_external(mod) for mod in external),
            )
            if mod is not None
        ]
        selected = self.select(candidates, result)

        self._prepare_output()
        for mod in selected:
            source = (
                mod.file
                if os.path.isabs(mod.file)
                else os.path.join(self.mods_dir, mod.file)
            )
            dest = os.path.join(self.output_dir, os.path.basename(mod.file))
            try:
                shutil.copyfile(source, dest)
            except OSError as e:
                raise ServerModsError(
                    f"复制 {source} 失败: {e}",
                    context={"source": source, "dest": dest},
                )
            result.copied.append(mod)
            logger.debug(f"已复制 {mod.name} -> {dest}")

        logger.success(
            f"服务端模组已复制到 {self.output_dir} ({len(result.copied)} 个)"
        )
        if result.unknown:
            logger.warning("以下模组缺少 side 信息:")
            for mod in result.unknown:
                logger.warning(f"- {mod.name} ({mod.file or 'no file'})")
        return result


def extract_server_mods(
    config: PackConfig,
    include_unknown: bool = False,
    clean: bool = False,
) -> ServerModsResult:
    """提取入口：报告与外部列表都可以不存在"""
    report = load_report(config.report_path, required=False)
    external = load_external_mods(config.external_path)
    extractor = ServerModExtractor(
        mods_dir=config.mods_dir,
        output_dir=config.server_dir,
        include_unknown=include_unknown,
        clean=clean,
    )
    return extractor.extract(report, external)
