"""患者管理器"""

from datetime import date, datetime
from typing import Any, Dict, List, Optional, Tuple

from common.exceptions import ValidationError
from common.logger import get_logger
from common.utils.datetime import current_week_range, day_range, now
from storage.models.patient import HistoryRecord, Patient
from storage.query import PatientQueryBuilder
from storage.repositories.patient_repository import PatientRepository

logger = get_logger(__name__)


class PatientManager:
    """患者 CRUD"""

    def __init__(self, repo: PatientRepository):
        self._repo = repo

    async def search(
        self,
        keyword: Optional[str] = None,
        symptoms: Optional[str] = None,
        syndromes: Optional[str] = None,
    ) -> List[Patient]:
        """按关键字 / 症状 / 证型搜索，最多 50 条"""
        query = (
            PatientQueryBuilder()
            .keyword(keyword)
            .symptoms(symptoms)
            .syndromes(syndromes)
            .build()
        )
        return await self._repo.search(query)

    async def get_patient(self, patient_id: str) -> Patient:
        return await self._repo.get(patient_id)

    async def create_patient(self, data: Dict[str, Any]) -> str:
        """创建患者，createdAt / updatedAt 由服务端写入"""
        stamp = now()
        payload = {k: v for k, v in data.items() if k not in ("_id", "id")}
        payload["createdAt"] = stamp
        payload["updatedAt"] = stamp
        try:
            patient = Patient.model_validate(payload)
        except ValueError as e:
            raise ValidationError("Invalid patient data", str(e))
        if not patient.name.strip():
            raise ValidationError("Patient name is required")
        return await self._repo.insert(patient)

    async def update_latest_record(
        self, patient_id: str, record: Dict[str, Any]
    ) -> int:
        """更新最近一次就诊记录的症状 / 证型 / 备注"""
        symptoms = record.get("symptoms", [])
        syndromes = record.get("syndromes", [])
        if not isinstance(symptoms, list) or not isinstance(syndromes, list):
            raise ValidationError("symptoms and syndromes must be arrays")
        notes = record.get("notes")
        if notes is not None and not isinstance(notes, str):
            raise ValidationError("notes must be a string")
        modified = await self._repo.update_latest_record(
            patient_id,
            [str(s) for s in symptoms],
            [str(s) for s in syndromes],
            notes,
        )
        logger.info("Updated latest record", extra={"patient_id": patient_id})
        return modified

    async def weekly_records(
        self, start: Optional[date] = None, end: Optional[date] = None
    ) -> Tuple[List[Patient], datetime, datetime]:
        """区间内有就诊记录的患者；未指定区间时取本周一至周日"""
        if start and end:
            if start > end:
                raise ValidationError("start must not be after end")
            range_start, range_end = day_range(start, end)
        else:
            range_start, range_end = current_week_range()
        patients = await self._repo.find_with_records_between(range_start, range_end)
        return patients, range_start, range_end
