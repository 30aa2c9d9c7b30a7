# locale_hub/utils.py
"""
本模块包含项目范围内的通用工具函数。
语言代码校验使用 langcodes 库。
"""

import hashlib
import os
import re
import tempfile
from collections.abc import Sequence
from pathlib import Path
from typing import TypeVar

from langcodes import Language
from langcodes.tag_parser import LanguageTagError

_T = TypeVar("_T")

# 语言子标签应该由 2-3 个字母组成 (BCP 47)
LANGUAGE_SUBTAG_PATTERN = re.compile(r"^[a-zA-Z]{2,3}$")


def validate_lang_codes(lang_codes: list[str]) -> None:
    """使用 `langcodes` 库校验语言代码列表中的每个代码是否符合 BCP 47 规范。"""
    for code in lang_codes:
        try:
            lang = Language.get(code)
            if not lang.language or not LANGUAGE_SUBTAG_PATTERN.match(lang.language):
                raise LanguageTagError(
                    f"Tag '{code}' lacks a valid 2-3 letter language subtag."
                )
        except LanguageTagError as e:
            raise ValueError(f"提供的语言代码 '{code}' 格式无效。原因: {e}") from e


def language_display_name(code: str) -> str:
    """返回语言代码的英文显示名称，例如 'fr' -> 'French'。"""
    try:
        return str(Language.get(code).display_name("en"))
    except LanguageTagError:
        return code


def compute_source_hash(text: str) -> str:
    """计算源文本的 SHA-256 摘要，截断为 128 位并以十六进制表示。"""
    return hashlib.sha256(text.encode("utf-8")).digest()[:16].hex()


def chunked(items: Sequence[_T], size: int) -> list[list[_T]]:
    """将序列切分为长度不超过 `size` 的块；`size` 非正时返回单个块。"""
    if size <= 0:
        return [list(items)] if items else []
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """先写入同目录下的临时文件，再用 `os.replace` 原子地替换目标文件。"""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
    )
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def parse_retry_after(value: str | None) -> float | None:
    """解析 HTTP `Retry-After` 头（仅支持秒数形式），无法解析时返回 None。"""
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    return seconds if seconds >= 0 else None
