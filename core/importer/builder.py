"""WeeklyBucket -> HistoryRecord"""

from datetime import datetime
from typing import Iterable, List, Optional

from common.utils.datetime import now
from core.importer.aggregator import WeeklyBucket
from storage.models.patient import HistoryRecord


def build_history_records(
    buckets: Iterable[WeeklyBucket], imported_at: Optional[datetime] = None
) -> List[HistoryRecord]:
    """纯映射，同一次导入共用一个时间戳"""
    stamp = imported_at or now()
    return [
        HistoryRecord(
            visit_date=bucket.week_start_date,
            symptoms=list(bucket.keywords),
            syndromes=list(bucket.syndromes),
            created_at=stamp,
            updated_at=stamp,
        )
        for bucket in buckets
    ]
