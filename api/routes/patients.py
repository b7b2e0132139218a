"""患者接口"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Query, Request
from fastapi.responses import JSONResponse

from api.schemas.patient import PatientListResponse, RecordUpdateRequest

router = APIRouter(prefix="/users")


@router.get("")
async def search_patients(
    request: Request,
    keyword: Optional[str] = Query(None, description="空白分隔，匹配姓名或 LINE ID"),
    symptoms: Optional[str] = Query(None, description="逗号或空白分隔"),
    conditions: Optional[str] = Query(None, description="证型，逗号或空白分隔"),
) -> PatientListResponse:
    """患者搜索"""
    manager = request.app.state.engine.patient_manager
    patients = await manager.search(keyword=keyword, symptoms=symptoms, syndromes=conditions)
    return PatientListResponse(
        users=[p.to_document() for p in patients], count=len(patients)
    )


@router.post("")
async def create_patient(request: Request, body: Dict[str, Any] = Body(...)) -> JSONResponse:
    """创建患者"""
    manager = request.app.state.engine.patient_manager
    patient_id = await manager.create_patient(body)
    return JSONResponse(
        status_code=201,
        content={"message": "Patient created successfully", "patientId": patient_id},
    )


@router.get("/{patient_id}")
async def get_patient(patient_id: str, request: Request) -> Dict[str, Any]:
    """患者详情"""
    manager = request.app.state.engine.patient_manager
    patient = await manager.get_patient(patient_id)
    return {"patient": patient.to_document()}


@router.put("/{patient_id}/record")
async def update_latest_record(
    patient_id: str, body: RecordUpdateRequest, request: Request
) -> Dict[str, Any]:
    """更新最近一次就诊记录"""
    manager = request.app.state.engine.patient_manager
    modified = await manager.update_latest_record(patient_id, body.model_dump())
    return {"message": "Record updated successfully", "modifiedCount": modified}
