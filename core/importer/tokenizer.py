"""CSV 切分：处理 BOM、换行、引号内的逗号与换行、"" 转义"""

from typing import Dict, Iterator, List

from common.exceptions import ParseError

_BOM = "\ufeff"


def _normalize(text: str) -> str:
    if text.startswith(_BOM):
        text = text[1:]
    return text.replace("\r\n", "\n").replace("\r", "\n")


def _iter_lines(text: str) -> Iterator[str]:
    """按换行切分，引号内的换行保留为字面量，空行丢弃"""
    current: List[str] = []
    in_quotes = False
    for ch in text:
        if ch == '"':
            in_quotes = not in_quotes
        if ch == "\n" and not in_quotes:
            if current:
                yield "".join(current)
            current = []
            continue
        current.append(ch)
    if current:
        yield "".join(current)


def split_line(line: str) -> List[str]:
    """切分单行字段"""
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False
    i = 0
    while i < len(line):
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < len(line) and line[i + 1] == '"':
                current.append('"')
                i += 1
            else:
                in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current))
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current))
    return fields


def tokenize(text: str) -> List[List[str]]:
    """原始 CSV 文本 -> 行列表，每行为字段列表"""
    rows = [split_line(line) for line in _iter_lines(_normalize(text or ""))]
    if not rows:
        raise ParseError("CSV is empty", "no non-empty lines after normalization")
    return rows


def parse_records(text: str) -> List[Dict[str, str]]:
    """首行为表头，其余行按表头映射为 dict（缺失字段补空串，多余字段忽略）"""
    rows = tokenize(text)
    header = [cell.strip().lstrip(_BOM) for cell in rows[0]]
    records = []
    for row in rows[1:]:
        records.append(
            {
                key: (row[j] if j < len(row) else "").strip()
                for j, key in enumerate(header)
            }
        )
    return records
