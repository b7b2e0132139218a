"""系统接口"""

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from common.exceptions import PersistenceError
from common.logger import get_logger
from common.utils.datetime import now

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health(request: Request) -> JSONResponse:
    """健康检查：确认患者库可用"""
    engine = request.app.state.engine
    config = engine.config
    try:
        await engine.patient_store.ping()
    except PersistenceError as e:
        logger.error(f"Health check failed: {e.message}")
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "timestamp": now().isoformat(),
                "database": "disconnected",
                "error": e.message,
                "environment": config.environment,
            },
        )
    return JSONResponse(
        content={
            "status": "healthy",
            "timestamp": now().isoformat(),
            "database": "connected",
            "version": config.version,
            "environment": config.environment,
        }
    )
