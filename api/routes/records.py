"""周记录接口"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Query, Request

from api.schemas.patient import WeeklyRecordsResponse, WeekRange

router = APIRouter(prefix="/records")


@router.get("/weekly", response_model_by_alias=True)
async def weekly_records(
    request: Request,
    start: Optional[date] = Query(None, description="ISO 日期"),
    end: Optional[date] = Query(None, description="ISO 日期"),
) -> WeeklyRecordsResponse:
    """区间内有就诊记录的患者（默认本周一至周日）"""
    manager = request.app.state.engine.patient_manager
    patients, range_start, range_end = await manager.weekly_records(start, end)
    return WeeklyRecordsResponse(
        records=[p.to_document() for p in patients],
        count=len(patients),
        week_range=WeekRange(start=range_start.isoformat(), end=range_end.isoformat()),
    )
