"""
模组列表

维护 mods.json（slug 组成的 JSON 数组），并解析用户输入的模组标识。
"""

import json
from pathlib import Path
from typing import Iterable, List, Optional, Tuple
from urllib.parse import urlparse

from loguru import logger

from modpackctl.exceptions import ModListError


def normalize_mod_input(value: str) -> Optional[str]:
    """
    把 slug 或 Modrinth 链接规范化为 slug

    - 非链接输入去掉首尾空白后原样返回
    - ``.../mod/<slug>`` 或 ``.../project/<slug>`` 返回 ``<slug>``
    - 其它链接返回路径的最后一段

    Returns:
        规范化后的标识，输入为空时返回 None
    """
    trimmed = str(value).strip()
    if not trimmed:
        return None
    if not trimmed.startswith("http"):
        return trimmed

    try:
        parsed = urlparse(trimmed)
    except ValueError:
        return trimmed

    parts = [part for part in parsed.path.split("/") if part]
    for idx, part in enumerate(parts):
        if part in ("mod", "project") and idx + 1 < len(parts):
            return parts[idx + 1]
    return parts[-1] if parts else None


def _clean(items: Iterable) -> List[str]:
    return [text for text in (str(item).strip() for item in items) if text]


def load_mod_list(path: str, required: bool = False) -> List[str]:
    """
    读取 mods.json

    Args:
        path: 文件路径
        required: 为 False 时文件不存在返回空列表

    Raises:
        ModListError: 顶层不是 JSON 数组或内容无法解析
    """
    file = Path(path)
    if not file.exists():
        if required:
            raise ModListError(f"模组列表不存在: {path}", context={"path": path})
        return []

    try:
        data = json.loads(file.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ModListError(f"无法解析 {path}: {e}", context={"path": path})

    if not isinstance(data, list):
        raise ModListError(f"{path} 的内容必须是 JSON 数组", context={"path": path})
    return _clean(data)


def save_mod_list(path: str, mods: Iterable[str]) -> None:
    """写入 mods.json（两空格缩进，末尾换行）"""
    file = Path(path)
    file.parent.mkdir(parents=True, exist_ok=True)
    file.write_text(json.dumps(list(mods), indent=2) + "\n", encoding="utf-8")


def merge_mods(current: Iterable[str], new: Iterable[str]) -> List[str]:
    """并集：保留已有顺序，新条目追加在末尾，重复项只保留一个"""
    # dict 保持插入顺序，同时起到集合去重的作用
    merged = dict.fromkeys(current)
    merged.update(dict.fromkeys(new))
    return list(merged)


def add_mods(path: str, inputs: Iterable[str]) -> Tuple[List[str], int]:
    """
    把规范化后的模组标识并入 mods.json

    Returns:
        (更新后的列表, 本次规范化得到的标识数量)
    """
    normalized = [mod for mod in map(normalize_mod_input, inputs) if mod]
    current = load_mod_list(path)
    updated = merge_mods(current, normalized)
    save_mod_list(path, updated)
    logger.info(f"已更新 {path}，本次添加 {len(normalized)} 个模组")
    return updated, len(normalized)


def load_list_file(path: str) -> List[str]:
    """
    读取 --mods-file 指定的列表

    ``.json`` 结尾按 JSON 数组读取，其它按行读取并忽略 ``#`` 开头的注释行。
    """
    if path.endswith(".json"):
        return load_mod_list(path, required=True)

    file = Path(path)
    if not file.exists():
        raise ModListError(f"模组列表不存在: {path}", context={"path": path})
    lines = (line.strip() for line in file.read_text(encoding="utf-8").splitlines())
    return [line for line in lines if line and not line.startswith("#")]
