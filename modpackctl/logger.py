"""
日志模块

使用 loguru 提供统一的日志记录功能。
"""

import os
import sys
from typing import Optional

from loguru import logger


def setup_logger(
    level: Optional[str] = None,
    sink=None,
    enqueue: bool = False,
    colorize: Optional[bool] = None,
) -> None:
    """
    设置日志记录器

    Args:
        level: 日志级别 (DEBUG, INFO, WARNING, ERROR)
        sink: 输出目标，默认为调用时的 sys.stdout
        enqueue: 是否启用队列（线程安全）
        colorize: 是否启用颜色，None 时由 loguru 根据终端自动判断
    """
    # 从环境变量获取日志级别
    if level is None:
        level = "DEBUG" if os.environ.get("MODPACKCTL_DEBUG", "0") == "1" else "INFO"

    # 移除默认处理器
    logger.remove()

    # 添加控制台处理器
    logger.add(
        sink=sink if sink is not None else sys.stdout,
        format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
        enqueue=enqueue,
        level=level,
        colorize=colorize,
        backtrace=(level == "DEBUG"),
        diagnose=(level == "DEBUG"),
    )

    if level == "DEBUG":
        logger.debug("DEBUG 模式已启用")


# 导出 logger
__all__ = ["logger", "setup_logger"]
