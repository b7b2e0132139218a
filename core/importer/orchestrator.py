"""导入入口：CSV 模式 / overrides 模式，预览或提交"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from common.exceptions import PersistenceError, ValidationError
from common.logger import get_logger
from common.utils.datetime import now, parse_visit_date
from common.utils.text import clean, unique_terms
from core.importer.aggregator import aggregate_weekly
from core.importer.builder import build_history_records
from core.importer.interpreter import DEFAULT_COLUMNS, ColumnMap, interpret_records
from core.importer.merge import PatientMergeResolver, UpsertResult
from core.importer.tokenizer import parse_records
from storage.models.patient import HistoryRecord, Patient

logger = get_logger(__name__)

DEFAULT_PATIENT_NAME = "Unknown"


@dataclass
class ImportRequest:
    csv_text: Optional[str] = None
    overrides: Any = None
    commit: bool = False
    line_user_id: Optional[str] = None
    name: Optional[str] = None


@dataclass
class ImportMeta:
    weeks: int = 0
    messages: int = 0
    ignored: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {"weeks": self.weeks, "messages": self.messages, "ignored": self.ignored}


@dataclass
class ImportResult:
    meta: ImportMeta
    patient: Patient
    patient_names: List[str] = field(default_factory=list)
    upsert: Optional[UpsertResult] = None

    @property
    def preview(self) -> bool:
        return self.upsert is None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "ok": True,
            "meta": self.meta.to_dict(),
            "patient": self.patient.to_document(),
            "patientNames": self.patient_names,
            "preview": self.preview,
        }
        if self.upsert is not None:
            data["upsert"] = self.upsert.to_dict()
        return data


def _override_terms(value: Any) -> List[str]:
    """非数组视为空；去空白、去重，保持首次出现顺序"""
    if not isinstance(value, list):
        return []
    return unique_terms(s for s in value if isinstance(s, str))


def override_records(overrides: Any, stamp: datetime) -> Optional[List[HistoryRecord]]:
    """解析人工编辑后的 historyRecords；未提供返回 None，格式错误抛 ValidationError"""
    if overrides is None:
        return None
    if isinstance(overrides, list):
        raw = overrides
    elif isinstance(overrides, dict):
        if "historyRecords" not in overrides:
            return None
        raw = overrides["historyRecords"]
    else:
        raise ValidationError("overrides must be an object")

    if not isinstance(raw, list):
        raise ValidationError("overrides.historyRecords must be an array")

    records = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict):
            raise ValidationError(f"overrides.historyRecords[{i}] must be an object")
        visit_date = parse_visit_date(item.get("visitDate"))
        if visit_date is None:
            raise ValidationError(
                f"overrides.historyRecords[{i}].visitDate is invalid",
                str(item.get("visitDate")),
            )
        records.append(
            HistoryRecord(
                visit_date=visit_date,
                symptoms=_override_terms(item.get("symptoms")),
                syndromes=_override_terms(item.get("syndromes")),
                created_at=stamp,
                updated_at=stamp,
            )
        )
    return records


def resolve_patient_name(
    overrides: Any,
    name_param: Optional[str],
    inferred: List[str],
    default: str = DEFAULT_PATIENT_NAME,
) -> str:
    """override 名 > 参数名 > 唯一推断名 > 多个推断名逗号拼接 > Unknown"""
    if isinstance(overrides, dict) and clean(overrides.get("name")):
        return clean(overrides.get("name"))
    if clean(name_param):
        return clean(name_param)
    if len(inferred) == 1:
        return inferred[0]
    if len(inferred) > 1:
        return ",".join(inferred)
    return default


class ImportService:
    """CSV -> 周记录 -> (预览 | 合并入库)"""

    def __init__(
        self,
        resolver: Optional[PatientMergeResolver] = None,
        columns: ColumnMap = DEFAULT_COLUMNS,
        default_name: str = DEFAULT_PATIENT_NAME,
    ):
        self._resolver = resolver
        self._columns = columns
        self._default_name = default_name

    async def run(self, request: ImportRequest) -> ImportResult:
        stamp = now()
        patient_names: List[str] = []

        records = override_records(request.overrides, stamp)
        if records is not None:
            meta = ImportMeta(weeks=len(records), messages=len(records), ignored=0)
        elif request.csv_text:
            state = interpret_records(parse_records(request.csv_text), self._columns)
            weekly = aggregate_weekly(state.events)
            records = build_history_records(weekly, imported_at=stamp)
            meta = ImportMeta(
                weeks=len(weekly), messages=len(state.events), ignored=state.ignored
            )
            patient_names = list(state.patient_names)
        else:
            raise ValidationError("No CSV text or overrides to process")

        patient = Patient(
            name=resolve_patient_name(
                request.overrides, request.name, patient_names, self._default_name
            ),
            line_user_id=clean(request.line_user_id) or None,
            history_records=records,
            created_at=stamp,
            updated_at=stamp,
        )
        logger.info(
            "Import parsed: weeks=%d messages=%d ignored=%d commit=%s",
            meta.weeks,
            meta.messages,
            meta.ignored,
            request.commit,
        )

        result = ImportResult(meta=meta, patient=patient, patient_names=patient_names)
        if request.commit:
            if self._resolver is None:
                raise PersistenceError("Commit requested but no storage is configured")
            result.upsert = await self._resolver.upsert(patient)
        return result
