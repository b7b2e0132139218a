"""患者数据模型"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from common.utils.datetime import now


class CamelModel(BaseModel):
    """存储与接口均使用 camelCase 字段名"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class HistoryRecord(CamelModel):
    """一周的症状 / 证型记录"""

    visit_date: datetime
    symptoms: List[str] = []
    syndromes: List[str] = []
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)


class Patient(CamelModel):
    """患者档案，独占其 history_records"""

    id: Optional[str] = Field(default=None, alias="_id")
    name: str
    line_user_id: Optional[str] = None
    history_records: List[HistoryRecord] = []
    created_at: datetime = Field(default_factory=now)
    updated_at: datetime = Field(default_factory=now)
    last_synced_at: Optional[datetime] = None

    def sorted_records(self) -> List[HistoryRecord]:
        return sorted(self.history_records, key=lambda r: r.visit_date)
