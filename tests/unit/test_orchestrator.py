"""导入流程单元测试"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from common.exceptions import ParseError, PersistenceError, ValidationError
from core.importer.merge import UpsertResult
from core.importer.orchestrator import (
    ImportRequest,
    ImportService,
    override_records,
    resolve_patient_name,
)


class TestCsvMode:
    @pytest.mark.asyncio
    async def test_single_week_preview(self, sample_csv):
        """同一周两条消息合并为一条周记录"""
        result = await ImportService().run(ImportRequest(csv_text=sample_csv))

        assert result.preview is True
        assert result.meta.to_dict() == {"weeks": 1, "messages": 2, "ignored": 0}
        assert result.patient.name == "王小明"
        assert result.patient_names == ["王小明"]

        record = result.patient.history_records[0]
        assert record.visit_date == datetime(2025, 1, 6)
        assert record.symptoms == ["頭痛", "失眠", "眩暈"]
        assert record.syndromes == ["肝陽上亢", "心脾兩虛"]

    @pytest.mark.asyncio
    async def test_envelope_shape(self, sample_csv):
        data = (await ImportService().run(ImportRequest(csv_text=sample_csv))).to_dict()
        assert data["ok"] is True
        assert data["preview"] is True
        assert "upsert" not in data
        assert data["patient"]["historyRecords"][0]["symptoms"] == ["頭痛", "失眠", "眩暈"]
        assert "_id" not in data["patient"]

    @pytest.mark.asyncio
    async def test_empty_csv_raises_parse_error(self):
        with pytest.raises(ParseError):
            await ImportService().run(ImportRequest(csv_text="\n\n\n"))

    @pytest.mark.asyncio
    async def test_nothing_to_process(self):
        with pytest.raises(ValidationError):
            await ImportService().run(ImportRequest())


class TestOverrideMode:
    @pytest.mark.asyncio
    async def test_overrides_skip_csv_pipeline(self):
        """overrides 存在时不走 CSV 解析"""
        overrides = {
            "historyRecords": [{"visitDate": "2025-01-06", "symptoms": ["頭痛"], "syndromes": []}]
        }
        with patch("core.importer.orchestrator.parse_records") as mock_parse:
            result = await ImportService().run(
                ImportRequest(csv_text="ignored,csv\n1,2", overrides=overrides)
            )
        mock_parse.assert_not_called()
        assert result.meta.to_dict() == {"weeks": 1, "messages": 1, "ignored": 0}
        assert result.patient.history_records[0].symptoms == ["頭痛"]
        assert result.patient.name == "Unknown"

    def test_invalid_visit_date(self):
        with pytest.raises(ValidationError):
            override_records({"historyRecords": [{"visitDate": "not-a-date"}]}, datetime.now())

    def test_history_records_must_be_list(self):
        with pytest.raises(ValidationError):
            override_records({"historyRecords": "nope"}, datetime.now())

    def test_object_without_history_records_is_ignored(self):
        assert override_records({"name": "王小明"}, datetime.now()) is None

    def test_non_list_terms_become_empty(self):
        records = override_records(
            [{"visitDate": "2025-01-06T00:00:00Z", "symptoms": "頭痛", "syndromes": None}],
            datetime.now(),
        )
        assert records[0].symptoms == []
        assert records[0].syndromes == []

    def test_terms_trimmed_and_deduplicated(self):
        records = override_records(
            [{"visitDate": "2025-01-06", "symptoms": ["頭痛", "頭痛", " 失眠 ", 3, ""]}],
            datetime.now(),
        )
        assert records[0].symptoms == ["頭痛", "失眠"]


class TestResolvePatientName:
    def test_override_name_wins(self):
        assert resolve_patient_name({"name": " 陳醫師指定 "}, "參數", ["推斷"]) == "陳醫師指定"

    def test_param_over_inferred(self):
        assert resolve_patient_name(None, "參數", ["推斷"]) == "參數"

    def test_multiple_inferred_joined(self):
        assert resolve_patient_name(None, None, ["王小明", "李大華"]) == "王小明,李大華"

    def test_default(self):
        assert resolve_patient_name(None, "  ", []) == "Unknown"


class TestCommit:
    @pytest.mark.asyncio
    async def test_commit_calls_resolver(self, sample_csv):
        resolver = MagicMock()
        resolver.upsert = AsyncMock(
            return_value=UpsertResult(upserted=True, patient_id="a" * 24, appended=1)
        )
        result = await ImportService(resolver).run(
            ImportRequest(csv_text=sample_csv, commit=True, line_user_id=" U123 ")
        )
        candidate = resolver.upsert.call_args.args[0]
        assert candidate.line_user_id == "U123"
        assert result.preview is False
        assert result.to_dict()["upsert"] == {"upserted": True, "patientId": "a" * 24}

    @pytest.mark.asyncio
    async def test_preview_never_touches_resolver(self, sample_csv):
        resolver = MagicMock()
        resolver.upsert = AsyncMock()
        await ImportService(resolver).run(ImportRequest(csv_text=sample_csv))
        resolver.upsert.assert_not_called()

    @pytest.mark.asyncio
    async def test_commit_without_storage(self, sample_csv):
        with pytest.raises(PersistenceError):
            await ImportService().run(ImportRequest(csv_text=sample_csv, commit=True))
