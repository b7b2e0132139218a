from core.importer.aggregator import WeeklyBucket, aggregate_weekly, week_end, week_start
from core.importer.builder import build_history_records
from core.importer.interpreter import (
    ChatMessageEvent,
    ColumnMap,
    InterpretState,
    interpret_records,
    interpret_row,
)
from core.importer.merge import PatientMergeResolver, UpsertResult
from core.importer.orchestrator import ImportRequest, ImportResult, ImportService
from core.importer.tokenizer import parse_records, tokenize

__all__ = [
    "WeeklyBucket",
    "aggregate_weekly",
    "week_end",
    "week_start",
    "build_history_records",
    "ChatMessageEvent",
    "ColumnMap",
    "InterpretState",
    "interpret_records",
    "interpret_row",
    "PatientMergeResolver",
    "UpsertResult",
    "ImportRequest",
    "ImportResult",
    "ImportService",
    "parse_records",
    "tokenize",
]
