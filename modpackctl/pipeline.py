"""
流程编排

下载 → 打包 → 服务端模组提取，以进程内调用的方式串联。
每一步返回 StepResult，任一步退出码非零即停止后续步骤。
"""

from dataclasses import dataclass, replace
from typing import Awaitable, Callable, List, Optional, Sequence

from loguru import logger

from modpackctl.downloader import download_mods
from modpackctl.exceptions import ModpackError
from modpackctl.modlist import add_mods
from modpackctl.models import PackConfig
from modpackctl.models.config import PIPELINE_LOADER_VERSION
from modpackctl.packager.mrpack import DEFAULT_ARCHIVE_COMMAND, build_pack
from modpackctl.server_mods import extract_server_mods


@dataclass
class StepResult:
    """单个步骤的执行结果"""

    name: str
    exit_code: int = 0
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


Step = Callable[[], Awaitable[StepResult]]


async def _guard(name: str, func: Callable[[], Awaitable[StepResult]]) -> StepResult:
    """把 ModpackError 转换为失败的 StepResult，其它异常继续向上抛出"""
    try:
        return await func()
    except ModpackError as e:
        logger.error(f"[{name}] {e}")
        return StepResult(name=name, exit_code=e.exit_code, message=str(e))


async def download_step(
    config: PackConfig,
    mods: Optional[List[str]] = None,
    mods_file: Optional[str] = None,
) -> StepResult:
    async def run() -> StepResult:
        entries = await download_mods(config, mods, mods_file)
        misses = [entry for entry in entries if not entry.downloaded]
        if misses:
            return StepResult(
                name="download",
                exit_code=2,
                message=f"{len(misses)} 个模组没有下载成功",
            )
        return StepResult(name="download", message=f"已下载 {len(entries)} 个模组")

    return await _guard("download", run)


async def pack_step(
    config: PackConfig,
    archive_command: Sequence[str] = DEFAULT_ARCHIVE_COMMAND,
) -> StepResult:
    async def run() -> StepResult:
        path = await build_pack(config, archive_command)
        return StepResult(name="pack", message=path)

    return await _guard("pack", run)


async def server_mods_step(
    config: PackConfig,
    include_unknown: bool = False,
    clean: bool = False,
) -> StepResult:
    async def run() -> StepResult:
        result = extract_server_mods(config, include_unknown, clean)
        return StepResult(
            name="server-mods",
            message=f"已复制 {len(result.copied)} 个模组到 {result.output_dir}",
        )

    return await _guard("server-mods", run)


async def run_steps(steps: Sequence[Step]) -> List[StepResult]:
    """依次执行步骤，遇到第一个失败的步骤立即停止"""
    results: List[StepResult] = []
    for step in steps:
        result = await step()
        results.append(result)
        if not result.ok:
            logger.error(f"步骤 '{result.name}' 失败 (退出码 {result.exit_code})")
            break
    return results


def with_pipeline_loader_version(config: PackConfig) -> PackConfig:
    """单独的 pack 不写加载器依赖；add / update 流程默认使用固定的加载器版本"""
    if config.loader_version:
        return config
    return replace(config, loader_version=PIPELINE_LOADER_VERSION)


def final_exit_code(results: Sequence[StepResult]) -> int:
    for result in results:
        if not result.ok:
            return result.exit_code
    return 0


async def update_all(
    config: PackConfig,
    archive_command: Sequence[str] = DEFAULT_ARCHIVE_COMMAND,
    include_unknown: bool = False,
) -> List[StepResult]:
    """完整更新：下载、打包，然后重新生成服务端模组目录"""
    config = with_pipeline_loader_version(config)
    return await run_steps(
        [
            lambda: download_step(config),
            lambda: pack_step(config, archive_command),
            lambda: server_mods_step(config, include_unknown, clean=True),
        ]
    )


async def add_and_update(
    config: PackConfig,
    inputs: Sequence[str],
    update: bool = True,
    archive_command: Sequence[str] = DEFAULT_ARCHIVE_COMMAND,
) -> List[StepResult]:
    """
    把模组加入 mods.json，默认随后执行下载与打包

    mods.json 格式错误属于致命错误，直接抛出 ModListError。
    """
    updated, added = add_mods(config.mod_list, inputs)
    results = [
        StepResult(name="add", message=f"{added} 个模组，列表共 {len(updated)} 项")
    ]
    if not update:
        return results

    config = with_pipeline_loader_version(config)
    results.extend(
        await run_steps(
            [
                lambda: download_step(config),
                lambda: pack_step(config, archive_command),
            ]
        )
    )
    return results
