"""导入患者的新建 / 合并

按 lineUserId（若提供）或姓名精确匹配已有患者：
- 无匹配：插入新患者，upserted=True
- 有匹配：只追加 visitDate 尚不存在的周记录，upserted=False
已存在的周不会被覆盖。
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional

from common.exceptions import PersistenceError
from common.logger import get_logger
from common.utils.datetime import now, parse_visit_date
from storage.models.patient import HistoryRecord, Patient
from storage.query import Eq, Filter
from storage.repositories.patient_repository import PatientRepository

logger = get_logger(__name__)


@dataclass
class UpsertResult:
    upserted: bool
    patient_id: str
    appended: int = 0

    def to_dict(self) -> Dict:
        return {"upserted": self.upserted, "patientId": self.patient_id}


def identity_filter(patient: Patient) -> Filter:
    if patient.line_user_id:
        return Eq("lineUserId", patient.line_user_id)
    return Eq("name", patient.name)


def identity_key(patient: Patient) -> str:
    if patient.line_user_id:
        return f"ext:{patient.line_user_id}"
    return f"name:{patient.name}"


def new_records_only(
    existing: List[HistoryRecord], candidates: List[HistoryRecord]
) -> List[HistoryRecord]:
    """过滤掉 visitDate 已存在的记录"""
    seen = {parse_visit_date(r.visit_date) for r in existing}
    result = []
    for record in candidates:
        key = parse_visit_date(record.visit_date)
        if key in seen:
            continue
        seen.add(key)
        result.append(record)
    return result


class PatientMergeResolver:
    """同一身份的合并在进程内串行执行"""

    def __init__(self, repo: PatientRepository):
        self._repo = repo
        self._locks: Dict[str, asyncio.Lock] = {}

    def _lock_for(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def upsert(self, candidate: Patient) -> UpsertResult:
        async with self._lock_for(identity_key(candidate)):
            try:
                return await self._upsert(candidate)
            except PersistenceError:
                raise
            except OSError as e:
                raise PersistenceError("Storage unavailable during import", str(e))

    async def _upsert(self, candidate: Patient) -> UpsertResult:
        existing: Optional[Patient] = await self._repo.find_one(identity_filter(candidate))
        if existing is None:
            # 同一患者内 visitDate 唯一
            records = new_records_only([], candidate.history_records)
            patient_id = await self._repo.insert(
                candidate.model_copy(update={"history_records": records})
            )
            logger.info(
                "Import created patient with %d records",
                len(records),
                extra={"patient_id": patient_id},
            )
            return UpsertResult(upserted=True, patient_id=patient_id, appended=len(records))

        to_append = new_records_only(existing.history_records, candidate.history_records)
        await self._repo.append_records(existing.id, to_append, updated_at=now())
        logger.info(
            "Import merged %d new of %d records",
            len(to_append),
            len(candidate.history_records),
            extra={"patient_id": existing.id},
        )
        return UpsertResult(upserted=False, patient_id=existing.id, appended=len(to_append))
