"""
CLI 模块

命令行接口实现。退出码：0 成功，2 用法错误或前置条件不满足，1 致命错误；
download 在有模组未成功下载时同样返回 2。
"""

import asyncio
import functools
import json
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional

import click
import toml
import yaml
from loguru import logger

from modpackctl.exceptions import ConfigParseError, ModpackError
from modpackctl.logger import setup_logger
from modpackctl.models import ModLoader, PackConfig
from modpackctl.pipeline import (
    StepResult,
    add_and_update,
    download_step,
    final_exit_code,
    pack_step,
    server_mods_step,
    update_all,
)

DEFAULT_CONFIG_FILE = "modpack.toml"


class ModpackClickException(click.ClickException):
    """携带 ModpackError 退出码的 ClickException"""

    def __init__(self, error: ModpackError):
        super().__init__(str(error))
        self.exit_code = error.exit_code


def load_config_file(config_path: str) -> dict:
    """加载配置文件（toml / json / yaml）"""
    path = Path(config_path)

    if not path.exists():
        raise ConfigParseError(f"配置文件不存在: {config_path}")

    suffix = path.suffix.lower()
    try:
        if suffix == ".toml":
            return toml.load(config_path)
        elif suffix == ".json":
            return json.loads(path.read_text(encoding="utf-8"))
        elif suffix in (".yaml", ".yml"):
            return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (toml.TomlDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigParseError(f"无法解析配置文件 {config_path}: {e}")
    raise ConfigParseError(f"不支持的配置文件格式: {suffix}")


def build_config(config_path: Optional[str], **overrides: Any) -> PackConfig:
    """
    构建配置

    命令行参数 > 配置文件 > 内置默认值。未指定 --config 时，
    当前目录下存在 modpack.toml 则自动读取。
    """
    if config_path is None and Path(DEFAULT_CONFIG_FILE).exists():
        config_path = DEFAULT_CONFIG_FILE

    if config_path:
        config = PackConfig.from_dict(load_config_file(config_path))
        logger.debug(f"已加载配置文件: {config_path}")
    else:
        config = PackConfig()
    return config.with_overrides(**overrides)


def run_async(coro: Awaitable):
    """运行协程，并把 ModpackError 转换为带退出码的 ClickException"""
    try:
        return asyncio.run(coro)
    except ModpackError as e:
        logger.error(str(e))
        raise ModpackClickException(e)


def exit_with(results: List[StepResult]) -> None:
    """失败步骤的信息写到 stderr，并以其退出码结束"""
    code = final_exit_code(results)
    if code:
        failed = next(result for result in results if not result.ok)
        click.echo(f"Error: [{failed.name}] {failed.message}", err=True)
        raise click.exceptions.Exit(code)


def common_options(func: Callable) -> Callable:
    """各命令共享的参数"""

    @click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False),
        help=f"配置文件路径（默认读取 {DEFAULT_CONFIG_FILE}）",
    )
    @click.option(
        "--loader",
        type=click.Choice([loader.value for loader in ModLoader]),
        help="模组加载器",
    )
    @click.option("--game-version", help="Minecraft 版本")
    @click.option("--mods-dir", type=click.Path(file_okay=False), help="模组目录")
    @click.option("--report", type=click.Path(dir_okay=False), help="下载报告路径")
    @click.option("--debug", is_flag=True, help="启用调试模式")
    @functools.wraps(func)
    def wrapper(*args, debug: bool, **kwargs):
        setup_logger(level="DEBUG" if debug else None)
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Exit):
            raise
        except ModpackError as e:
            logger.error(str(e))
            raise ModpackClickException(e)
        except Exception as e:
            logger.exception(f"运行时错误: {e}")
            raise click.ClickException(f"运行时错误: {e}")

    return wrapper


@click.command("add")
@click.argument("mods", nargs=-1)
@click.option("--no-update", is_flag=True, help="只更新 mods.json，不下载和打包")
@click.option("--loader-version", help="加载器版本")
@click.option("--output", type=click.Path(dir_okay=False), help="输出的 .mrpack 路径")
@common_options
def add_cmd(
    mods: tuple,
    no_update: bool,
    loader_version: Optional[str],
    output: Optional[str],
    config_path: Optional[str],
    loader: Optional[str],
    game_version: Optional[str],
    mods_dir: Optional[str],
    report: Optional[str],
):
    """把模组 slug 或 Modrinth 链接加入 mods/mods.json

    \b
    示例:
      modpack-add distant-horizons
      modpack-add https://modrinth.com/mod/xaeros-minimap
      modpack-add irons-spells-n-spellbooks --no-update
    """
    if not mods:
        raise click.UsageError("请至少提供一个模组 slug")

    config = build_config(
        config_path,
        loader=loader,
        game_version=game_version,
        loader_version=loader_version,
        mods_dir=mods_dir,
        report=report,
        output=output,
    )
    exit_with(run_async(add_and_update(config, list(mods), update=not no_update)))


@click.command("download")
@click.option("--mods", "mods", multiple=True, help="要下载的模组（可多次使用）")
@click.option(
    "--mods-file",
    type=click.Path(dir_okay=False),
    help="模组列表文件（.json 数组或每行一个）",
)
@click.option("--pins", type=click.Path(dir_okay=False), help="版本固定文件")
@click.argument("extra_mods", nargs=-1)
@common_options
def download_cmd(
    mods: tuple,
    mods_file: Optional[str],
    pins: Optional[str],
    extra_mods: tuple,
    config_path: Optional[str],
    loader: Optional[str],
    game_version: Optional[str],
    mods_dir: Optional[str],
    report: Optional[str],
):
    """解析并下载模组，写出 modrinth_report.json

    \b
    示例:
      modpack-download --loader neoforge --game-version 1.21.1
      modpack-download --mods better-combat --mods another-furniture
      modpack-download --mods-file mods.txt
    """
    config = build_config(
        config_path,
        loader=loader,
        game_version=game_version,
        mods_dir=mods_dir,
        report=report,
        pins=pins,
    )
    inline = [*mods, *extra_mods]
    result = run_async(download_step(config, inline or None, mods_file))
    exit_with([result])


@click.command("pack")
@click.option("--loader-version", help="加载器版本")
@click.option("--external", type=click.Path(dir_okay=False), help="外部模组列表")
@click.option("--output", type=click.Path(dir_okay=False), help="输出的 .mrpack 路径")
@click.option("--name", help="整合包名称")
@click.option("--summary", help="整合包简介")
@click.option("--version-id", help="整合包版本号")
@common_options
def pack_cmd(
    loader_version: Optional[str],
    external: Optional[str],
    output: Optional[str],
    name: Optional[str],
    summary: Optional[str],
    version_id: Optional[str],
    config_path: Optional[str],
    loader: Optional[str],
    game_version: Optional[str],
    mods_dir: Optional[str],
    report: Optional[str],
):
    """根据下载报告和外部模组列表生成 .mrpack 整合包"""
    config = build_config(
        config_path,
        loader=loader,
        game_version=game_version,
        loader_version=loader_version,
        mods_dir=mods_dir,
        report=report,
        external=external,
        output=output,
        name=name,
        summary=summary,
        version_id=version_id,
    )
    exit_with([run_async(pack_step(config))])


@click.command("server-mods")
@click.option("--external", type=click.Path(dir_okay=False), help="外部模组列表")
@click.option(
    "--output-dir", type=click.Path(file_okay=False), help="服务端模组输出目录"
)
@click.option("--clean", is_flag=True, help="复制前删除输出目录")
@click.option("--include-unknown", is_flag=True, help="同时复制缺少 side 信息的模组")
@common_options
def server_mods_cmd(
    external: Optional[str],
    output_dir: Optional[str],
    clean: bool,
    include_unknown: bool,
    config_path: Optional[str],
    loader: Optional[str],
    game_version: Optional[str],
    mods_dir: Optional[str],
    report: Optional[str],
):
    """把服务端可用的模组复制到单独的目录"""
    config = build_config(
        config_path,
        loader=loader,
        game_version=game_version,
        mods_dir=mods_dir,
        report=report,
        external=external,
        server_dir=output_dir,
    )
    exit_with([run_async(server_mods_step(config, include_unknown, clean))])


@click.command("update")
@click.option("--loader-version", help="加载器版本")
@click.option("--output", type=click.Path(dir_okay=False), help="输出的 .mrpack 路径")
@click.option("--include-unknown", is_flag=True, help="同时复制缺少 side 信息的模组")
@common_options
def update_cmd(
    loader_version: Optional[str],
    output: Optional[str],
    include_unknown: bool,
    config_path: Optional[str],
    loader: Optional[str],
    game_version: Optional[str],
    mods_dir: Optional[str],
    report: Optional[str],
):
    """依次执行下载、打包和服务端模组提取，任一步失败即停止"""
    config = build_config(
        config_path,
        loader=loader,
        game_version=game_version,
        loader_version=loader_version,
        mods_dir=mods_dir,
        report=report,
        output=output,
    )
    results = run_async(update_all(config, include_unknown=include_unknown))
    for result in results:
        logger.info(f"[{result.name}] {result.message}")
    exit_with(results)


@click.group()
@click.version_option(version="0.1.0")
def main():
    """modpackctl - Modrinth 整合包维护工具"""


main.add_command(add_cmd)
main.add_command(download_cmd)
main.add_command(pack_cmd)
main.add_command(server_mods_cmd)
main.add_command(update_cmd)


if __name__ == "__main__":
    main()
