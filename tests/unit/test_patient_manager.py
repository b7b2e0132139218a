"""患者管理单元测试（真实文档库 + 临时目录）"""

from datetime import date, datetime

import pytest

from common.exceptions import PatientNotFoundError, ValidationError
from managers.patient_manager import PatientManager
from storage.models.patient import HistoryRecord, Patient


async def _seed(repo, name, days, line_user_id=None, symptoms=("頭痛",)):
    return await repo.insert(
        Patient(
            name=name,
            line_user_id=line_user_id,
            history_records=[
                HistoryRecord(visit_date=datetime(2025, 1, d), symptoms=list(symptoms))
                for d in days
            ],
        )
    )


class TestSearch:
    @pytest.mark.asyncio
    async def test_keyword_and_symptoms(self, patient_repo):
        await _seed(patient_repo, "王小明", [6], symptoms=("頭痛", "失眠"))
        await _seed(patient_repo, "李大華", [6], line_user_id="Uabc", symptoms=("咳嗽",))
        manager = PatientManager(patient_repo)

        assert [p.name for p in await manager.search(keyword="uab")] == ["李大華"]
        assert [p.name for p in await manager.search(symptoms="失眠")] == ["王小明"]
        assert len(await manager.search()) == 2
        assert await manager.search(keyword="王", symptoms="咳嗽") == []


class TestCreateAndGet:
    @pytest.mark.asyncio
    async def test_create_sets_timestamps(self, patient_repo):
        manager = PatientManager(patient_repo)
        patient_id = await manager.create_patient(
            {"name": "王小明", "_id": "ignored", "createdAt": "1999-01-01T00:00:00"}
        )
        patient = await manager.get_patient(patient_id)
        assert patient.name == "王小明"
        assert patient.created_at.year != 1999

    @pytest.mark.asyncio
    async def test_create_requires_name(self, patient_repo):
        manager = PatientManager(patient_repo)
        with pytest.raises(ValidationError):
            await manager.create_patient({})
        with pytest.raises(ValidationError):
            await manager.create_patient({"name": "  "})

    @pytest.mark.asyncio
    async def test_get_invalid_and_missing(self, patient_repo):
        manager = PatientManager(patient_repo)
        with pytest.raises(ValidationError):
            await manager.get_patient("not-an-id")
        with pytest.raises(PatientNotFoundError):
            await manager.get_patient("c" * 24)


class TestUpdateLatestRecord:
    @pytest.mark.asyncio
    async def test_updates_most_recent_visit(self, patient_repo):
        patient_id = await _seed(patient_repo, "王小明", [13, 6])
        manager = PatientManager(patient_repo)

        modified = await manager.update_latest_record(
            patient_id, {"symptoms": ["眩暈"], "syndromes": ["痰濕"], "notes": "改善中"}
        )
        assert modified == 1

        records = (await manager.get_patient(patient_id)).sorted_records()
        assert records[0].symptoms == ["頭痛"]
        assert records[1].symptoms == ["眩暈"]
        assert records[1].notes == "改善中"

    @pytest.mark.asyncio
    async def test_no_records(self, patient_repo):
        patient_id = await _seed(patient_repo, "王小明", [])
        with pytest.raises(PatientNotFoundError):
            await PatientManager(patient_repo).update_latest_record(patient_id, {})


class TestWeeklyRecords:
    @pytest.mark.asyncio
    async def test_only_in_range_records_returned(self, patient_repo):
        await _seed(patient_repo, "王小明", [6, 13])
        await _seed(patient_repo, "李大華", [20])
        manager = PatientManager(patient_repo)

        patients, start, end = await manager.weekly_records(date(2025, 1, 13), date(2025, 1, 19))
        assert [p.name for p in patients] == ["王小明"]
        assert [r.visit_date.day for r in patients[0].history_records] == [13]
        assert start == datetime(2025, 1, 13)
        assert end.date() == date(2025, 1, 19)

    @pytest.mark.asyncio
    async def test_start_after_end(self, patient_repo):
        with pytest.raises(ValidationError):
            await PatientManager(patient_repo).weekly_records(date(2025, 1, 19), date(2025, 1, 13))
