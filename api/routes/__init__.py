from fastapi import APIRouter

from api.routes.auth import router as auth_router
from api.routes.imports import router as imports_router
from api.routes.link_preview import router as link_preview_router
from api.routes.notifications import router as notifications_router
from api.routes.patients import router as patients_router
from api.routes.records import router as records_router
from api.routes.sync import router as sync_router
from api.routes.system import router as system_router

api_router = APIRouter(prefix="/api")

api_router.include_router(system_router, tags=["system"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(patients_router, tags=["patients"])
api_router.include_router(records_router, tags=["records"])
api_router.include_router(imports_router, tags=["import"])
api_router.include_router(notifications_router, tags=["notifications"])
api_router.include_router(sync_router, tags=["sync"])
api_router.include_router(link_preview_router, tags=["link-preview"])
