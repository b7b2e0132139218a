"""按自然周（周一开始）聚合消息"""

from dataclasses import dataclass, field
from datetime import datetime, time, timedelta
from typing import Dict, Iterable, List

from common.utils.text import unique_terms
from core.importer.interpreter import ChatMessageEvent


def week_start(dt: datetime) -> datetime:
    """所在周的周一 00:00:00"""
    monday = dt.date() - timedelta(days=dt.weekday())
    return datetime.combine(monday, time.min)


def week_end(dt: datetime) -> datetime:
    """所在周的周日 23:59:59.999999"""
    sunday = week_start(dt).date() + timedelta(days=6)
    return datetime.combine(sunday, time.max)


@dataclass
class WeeklyBucket:
    week_start_date: datetime
    week_end_date: datetime
    keywords: List[str] = field(default_factory=list)
    syndromes: List[str] = field(default_factory=list)

    @property
    def key(self) -> str:
        return self.week_start_date.date().isoformat()


def aggregate_weekly(events: Iterable[ChatMessageEvent]) -> List[WeeklyBucket]:
    """每个周一对应一个 bucket，关键字/证型去重，按周一升序输出"""
    buckets: Dict[str, WeeklyBucket] = {}
    for event in events:
        if event.timestamp is None:
            continue
        start = week_start(event.timestamp)
        key = start.date().isoformat()
        bucket = buckets.get(key)
        if bucket is None:
            bucket = WeeklyBucket(week_start_date=start, week_end_date=week_end(start))
            buckets[key] = bucket
        bucket.keywords.extend(event.keywords)
        bucket.syndromes.extend(event.syndrome_hints)

    result = []
    for bucket in sorted(buckets.values(), key=lambda b: b.week_start_date):
        bucket.keywords = unique_terms(bucket.keywords)
        bucket.syndromes = unique_terms(bucket.syndromes)
        result.append(bucket)
    return result
