"""患者数据读写"""

from datetime import datetime
from typing import Dict, List, Optional

from common.exceptions import PatientNotFoundError, ValidationError
from common.logger import get_logger
from common.utils.datetime import now, parse_visit_date
from storage.document_store import ID_FIELD, Collection, is_valid_object_id
from storage.models.patient import HistoryRecord, Patient
from storage.query import DateRange, ElemMatch, Eq, Exists, Filter, Regex

logger = get_logger(__name__)

SEARCH_LIMIT = 50


def _visit_key(doc: Dict) -> datetime:
    return parse_visit_date(doc.get("visitDate")) or datetime.min


class PatientRepository:
    """患者数据仓库"""

    def __init__(self, collection: Collection):
        self._col = collection

    @staticmethod
    def by_id(patient_id: str) -> Filter:
        if not is_valid_object_id(patient_id):
            raise ValidationError("Invalid patient ID", patient_id)
        return Eq(ID_FIELD, patient_id)

    async def find_one(self, query: Filter) -> Optional[Patient]:
        doc = await self._col.find_one(query)
        return Patient.model_validate(doc) if doc else None

    async def get(self, patient_id: str) -> Patient:
        """获取患者，不存在则抛异常"""
        patient = await self.find_one(self.by_id(patient_id))
        if not patient:
            raise PatientNotFoundError("Patient not found", patient_id)
        return patient

    async def insert(self, patient: Patient) -> str:
        doc = patient.to_document()
        doc.pop(ID_FIELD, None)
        patient_id = await self._col.insert_one(doc)
        logger.info("Created patient: %s (%s)", patient_id, patient.name)
        return patient_id

    async def append_records(
        self, patient_id: str, records: List[HistoryRecord], updated_at: Optional[datetime] = None
    ) -> int:
        """追加历史记录并刷新 updatedAt"""
        return await self._col.update_one(
            self.by_id(patient_id),
            set_fields={"updatedAt": (updated_at or now()).isoformat()},
            push={"historyRecords": [r.to_document() for r in records]},
        )

    async def search(self, query: Filter, limit: int = SEARCH_LIMIT) -> List[Patient]:
        docs = await self._col.find(query, limit=limit)
        return [Patient.model_validate(d) for d in docs]

    async def find_with_records_between(
        self, start: datetime, end: datetime
    ) -> List[Patient]:
        """区间内有记录的患者，只保留区间内的记录，按最近就诊倒序"""
        in_range = DateRange("visitDate", start, end)
        docs = await self._col.find(ElemMatch("historyRecords", in_range))
        patients = []
        for doc in docs:
            doc["historyRecords"] = sorted(
                (r for r in doc.get("historyRecords", []) if in_range.matches(r)),
                key=_visit_key,
                reverse=True,
            )
            patients.append(Patient.model_validate(doc))
        patients.sort(
            key=lambda p: p.history_records[0].visit_date if p.history_records else datetime.min,
            reverse=True,
        )
        return patients

    async def update_latest_record(
        self,
        patient_id: str,
        symptoms: List[str],
        syndromes: List[str],
        notes: Optional[str],
    ) -> int:
        """更新 visitDate 最新的一条记录"""
        doc = await self._col.find_one(self.by_id(patient_id))
        if not doc:
            raise PatientNotFoundError("Patient not found", patient_id)
        records = doc.get("historyRecords") or []
        if not records:
            raise PatientNotFoundError("No history records found", patient_id)

        index = max(range(len(records)), key=lambda i: _visit_key(records[i]))
        stamp = now().isoformat()
        prefix = f"historyRecords.{index}"
        return await self._col.update_one(
            self.by_id(patient_id),
            set_fields={
                f"{prefix}.symptoms": symptoms,
                f"{prefix}.syndromes": syndromes,
                f"{prefix}.notes": notes,
                f"{prefix}.updatedAt": stamp,
                "updatedAt": stamp,
            },
        )

    async def find_by_display_name(
        self, display_name: str, linked: bool
    ) -> Optional[Patient]:
        """按 LINE 显示名模糊匹配（linked 表示是否已有 lineUserId）"""
        return await self.find_one(
            Regex("name", display_name) & Exists("lineUserId", present=linked)
        )

    async def set_line_user_id(self, patient_id: str, line_user_id: str) -> int:
        return await self._col.update_one(
            self.by_id(patient_id),
            set_fields={
                "lineUserId": line_user_id,
                "lastSyncedAt": now().isoformat(),
            },
        )
