"""Patient Schema"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class RecordUpdateRequest(BaseModel):
    """更新最近一次就诊记录"""

    symptoms: List[str] = []
    syndromes: List[str] = []
    notes: Optional[str] = None


class PatientListResponse(BaseModel):
    users: List[Dict[str, Any]] = []
    count: int = 0


class WeekRange(BaseModel):
    start: str
    end: str


class WeeklyRecordsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    records: List[Dict[str, Any]] = []
    count: int = 0
    week_range: WeekRange = Field(alias="weekRange")
