"""文本处理工具"""

import re
from typing import Iterable, List

# 中文逗号、英文逗号、顿号
_TERM_SEPARATORS = re.compile(r"[，,、]")

# 搜索参数：逗号或空白
_QUERY_SEPARATORS = re.compile(r"[,\s]+")


def clean(value) -> str:
    """非字符串返回空串，字符串去首尾空白"""
    return value.strip() if isinstance(value, str) else ""


def split_terms(text: str) -> List[str]:
    """拆分关键字列，去空白、去空项"""
    if not text:
        return []
    return [t.strip() for t in _TERM_SEPARATORS.split(text) if t.strip()]


def split_query(text: str) -> List[str]:
    """拆分搜索参数"""
    if not text:
        return []
    return [t for t in _QUERY_SEPARATORS.split(text.strip()) if t]


def unique_terms(terms: Iterable[str]) -> List[str]:
    """去空白后按首次出现顺序去重（区分大小写）"""
    return list(dict.fromkeys(t.strip() for t in terms if t and t.strip()))


def truncate_text(text: str, max_length: int = 500) -> str:
    """截断文本"""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."
