"""
报告文件读写

下载报告、外部模组列表与版本固定文件都是人类可编辑的 JSON。
"""

import json
from pathlib import Path
from typing import Any, Dict, List

from modpackctl.exceptions import ModListError, PreconditionError
from modpackctl.models import ExternalMod, ReportEntry


def _read_json(path: str) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ModListError(f"无法解析 {path}: {e}", context={"path": path})


def load_report(path: str, required: bool = True) -> List[ReportEntry]:
    """
    读取下载报告

    Raises:
        PreconditionError: required 为真且报告不存在
        ModListError: 顶层不是 JSON 数组
    """
    if not Path(path).exists():
        if required:
            raise PreconditionError(f"下载报告不存在: {path}", context={"path": path})
        return []
    data = _read_json(path)
    if not isinstance(data, list):
        raise ModListError(f"{path} 的内容必须是 JSON 数组", context={"path": path})
    return [ReportEntry.from_dict(item) for item in data if isinstance(item, dict)]


def save_report(path: str, entries: List[ReportEntry]) -> None:
    """整体覆盖写入下载报告"""
    file = Path(path)
    file.parent.mkdir(parents=True, exist_ok=True)
    data = [entry.to_dict() for entry in entries]
    file.write_text(json.dumps(data, indent=2), encoding="utf-8")


def load_external_mods(path: str) -> List[ExternalMod]:
    """读取外部模组列表，文件不存在时视为空列表"""
    if not Path(path).exists():
        return []
    data = _read_json(path)
    if not isinstance(data, list):
        raise ModListError(f"{path} 的内容必须是 JSON 数组", context={"path": path})
    return [ExternalMod.from_dict(item) for item in data if isinstance(item, dict)]


def load_pins(path: str) -> Dict[str, str]:
    """读取版本固定文件 {模组标识: 版本号}，文件不存在时为空"""
    if not Path(path).exists():
        return {}
    data = _read_json(path)
    if not isinstance(data, dict):
        raise ModListError(f"{path} 的内容必须是 JSON 对象", context={"path": path})
    return {str(key): str(value) for key, value in data.items() if value}
