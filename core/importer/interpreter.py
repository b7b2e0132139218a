"""行解析：表头映射后的记录 -> ChatMessageEvent

逐行处理以显式 fold 表达：InterpretState 携带 last_date / events /
ignored / patient_names，interpret_row(state, record) 返回新的状态。
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from functools import reduce
from typing import Dict, Iterable, Optional, Tuple

from common.utils.text import clean, split_terms

_DATE_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})$")
_TIME_RE = re.compile(
    r"^(?:(上午|下午)\s*)?(\d{1,2}):(\d{2})(?::(\d{2}))?(?:\s*([AaPp][Mm]))?$"
)


@dataclass(frozen=True)
class ColumnMap:
    """LINE 聊天记录导出的列名"""

    user_name: str = "用戶名"
    content: str = "Content"
    time: str = "時間"
    date: str = "日期"
    sender_type: str = "發送者類型"
    sender_name: str = "發送者姓名"
    speaker: str = "Speaker"
    keywords: str = "Keywords"
    tcm_assist: str = "中醫診斷輔助"


DEFAULT_COLUMNS = ColumnMap()

PATIENT_ROLE = "user"


@dataclass(frozen=True)
class ChatMessageEvent:
    timestamp: Optional[datetime]
    is_patient_speaker: bool
    keywords: Tuple[str, ...] = ()
    syndrome_hints: Tuple[str, ...] = ()
    source_row: Dict[str, str] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class InterpretState:
    last_date: Optional[str] = None
    events: Tuple[ChatMessageEvent, ...] = ()
    ignored: int = 0
    patient_names: Tuple[str, ...] = ()


def normalize_date(date_str: str) -> str:
    """统一日期分隔符为 /"""
    return date_str.replace(".", "/").replace("-", "/")


def combine_timestamp(date_str: str, time_str: str) -> Optional[datetime]:
    """合并日期与时间，无法解析返回 None"""
    date_match = _DATE_RE.match(normalize_date(date_str.strip()))
    time_match = _TIME_RE.match(time_str.strip())
    if not date_match or not time_match:
        return None

    year, month, day = (int(g) for g in date_match.groups())
    cn_period, hour, minute, second, en_period = time_match.groups()
    hour = int(hour)
    period = (en_period or "").lower() or {"上午": "am", "下午": "pm"}.get(cn_period or "")
    if period:
        if hour > 12:
            return None
        if period == "pm" and hour < 12:
            hour += 12
        elif period == "am" and hour == 12:
            hour = 0

    try:
        return datetime(year, month, day, hour, int(minute), int(second or 0))
    except ValueError:
        return None


def interpret_row(
    state: InterpretState,
    record: Dict[str, str],
    columns: ColumnMap = DEFAULT_COLUMNS,
) -> InterpretState:
    """处理一行，返回新的状态"""
    name = clean(record.get(columns.user_name))
    names = state.patient_names
    if name and name not in names:
        names = names + (name,)

    date_str = clean(record.get(columns.date))
    last_date = date_str or state.last_date
    time_str = clean(record.get(columns.time))
    state = replace(state, last_date=last_date, patient_names=names)

    if not last_date or not time_str:
        return replace(state, ignored=state.ignored + 1)

    timestamp = combine_timestamp(last_date, time_str)
    if timestamp is None:
        return replace(state, ignored=state.ignored + 1)

    keywords = tuple(split_terms(clean(record.get(columns.keywords))))
    hints = tuple(split_terms(clean(record.get(columns.tcm_assist))))
    if not keywords and not hints:
        # 有效但没有信息量的行，不计入 ignored
        return state

    is_patient = clean(record.get(columns.sender_type)).lower() == PATIENT_ROLE or (
        bool(name) and clean(record.get(columns.speaker)) == name
    )
    event = ChatMessageEvent(
        timestamp=timestamp,
        is_patient_speaker=is_patient,
        keywords=keywords,
        syndrome_hints=hints,
        source_row=dict(record),
    )
    return replace(state, events=state.events + (event,))


def interpret_records(
    records: Iterable[Dict[str, str]],
    columns: ColumnMap = DEFAULT_COLUMNS,
    initial: Optional[InterpretState] = None,
) -> InterpretState:
    """按顺序 fold 全部记录"""
    return reduce(
        lambda state, record: interpret_row(state, record, columns),
        records,
        initial or InterpretState(),
    )
