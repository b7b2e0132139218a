"""文档过滤表达式

路径用点号分隔，途经数组时展开（与 MongoDB 的 "historyRecords.symptoms"
语义一致）：只要任一展开值满足条件即视为匹配。
"""

import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Tuple

from common.utils.datetime import parse_visit_date
from common.utils.text import split_query


def resolve_path(doc: Any, path: str) -> List[Any]:
    """取出路径上的所有值，数组逐层展开"""
    values = [doc]
    for part in path.split("."):
        next_values = []
        for value in values:
            if isinstance(value, list):
                candidates = value
            else:
                candidates = [value]
            for item in candidates:
                if isinstance(item, dict) and part in item:
                    next_values.append(item[part])
        values = next_values
    flat: List[Any] = []
    for value in values:
        if isinstance(value, list):
            flat.extend(value)
        else:
            flat.append(value)
    return flat


class Filter:
    """过滤表达式基类"""

    def matches(self, doc: dict) -> bool:
        raise NotImplementedError

    def __and__(self, other: "Filter") -> "Filter":
        return And((self, other))

    def __or__(self, other: "Filter") -> "Filter":
        return Or((self, other))


@dataclass(frozen=True)
class MatchAll(Filter):
    def matches(self, doc: dict) -> bool:
        return True


@dataclass(frozen=True)
class Eq(Filter):
    path: str
    value: Any

    def matches(self, doc: dict) -> bool:
        return self.value in resolve_path(doc, self.path)


@dataclass(frozen=True)
class Exists(Filter):
    path: str
    present: bool = True

    def matches(self, doc: dict) -> bool:
        found = any(v is not None for v in resolve_path(doc, self.path))
        return found == self.present


@dataclass(frozen=True)
class Regex(Filter):
    """子串匹配（调用方传入的是字面量，会被转义）"""

    path: str
    text: str
    ignore_case: bool = True

    def matches(self, doc: dict) -> bool:
        flags = re.IGNORECASE if self.ignore_case else 0
        pattern = re.compile(re.escape(self.text), flags)
        return any(
            isinstance(v, str) and pattern.search(v)
            for v in resolve_path(doc, self.path)
        )


@dataclass(frozen=True)
class DateRange(Filter):
    path: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None

    def contains(self, value: Any) -> bool:
        dt = parse_visit_date(value)
        if dt is None:
            return False
        if self.start is not None and dt < self.start:
            return False
        if self.end is not None and dt > self.end:
            return False
        return True

    def matches(self, doc: dict) -> bool:
        return any(self.contains(v) for v in resolve_path(doc, self.path))


@dataclass(frozen=True)
class ElemMatch(Filter):
    """数组中至少一个元素满足子表达式"""

    path: str
    condition: Filter

    def matches(self, doc: dict) -> bool:
        return any(
            isinstance(item, dict) and self.condition.matches(item)
            for item in resolve_path(doc, self.path)
        )


@dataclass(frozen=True)
class And(Filter):
    clauses: Tuple[Filter, ...]

    def matches(self, doc: dict) -> bool:
        return all(c.matches(doc) for c in self.clauses)


@dataclass(frozen=True)
class Or(Filter):
    clauses: Tuple[Filter, ...]

    def matches(self, doc: dict) -> bool:
        return any(c.matches(doc) for c in self.clauses)


class PatientQueryBuilder:
    """患者搜索条件：keyword / symptoms / syndromes，各自可选，AND 组合"""

    def __init__(self):
        self._clauses: List[Filter] = []

    def keyword(self, text: Optional[str]) -> "PatientQueryBuilder":
        """空白分隔的多个关键字须全部命中 name 或 lineUserId"""
        for kw in (text or "").split():
            self._clauses.append(Or((Regex("name", kw), Regex("lineUserId", kw))))
        return self

    def symptoms(self, text: Optional[str]) -> "PatientQueryBuilder":
        return self._any_term("historyRecords.symptoms", text)

    def syndromes(self, text: Optional[str]) -> "PatientQueryBuilder":
        return self._any_term("historyRecords.syndromes", text)

    def _any_term(self, path: str, text: Optional[str]) -> "PatientQueryBuilder":
        terms = split_query(text or "")
        if terms:
            self._clauses.append(Or(tuple(Regex(path, t) for t in terms)))
        return self

    def build(self) -> Filter:
        if not self._clauses:
            return MatchAll()
        if len(self._clauses) == 1:
            return self._clauses[0]
        return And(tuple(self._clauses))
