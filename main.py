"""FastAPI 入口"""

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# 添加项目根目录到 sys.path
sys.path.insert(0, str(Path(__file__).resolve().parent))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware.auth import AuthGateMiddleware
from api.middleware.error_handler import register_error_handlers
from api.middleware.logging import RequestLoggingMiddleware
from api.routes import api_router
from common.config import Settings, settings, validate_settings
from common.logger import setup_logging, get_logger
from core.engine import ClinicEngine

logger = get_logger(__name__)


def create_app(config: Optional[Settings] = None) -> FastAPI:
    config = config or settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """应用生命周期管理"""
        # 启动
        setup_logging(config.logging)
        validate_settings(config)
        logger.info("Starting TCM Clinic Records...")

        engine = ClinicEngine(config)
        await engine.start()
        app.state.engine = engine

        logger.info(f"Server running on {config.host}:{config.port}")
        yield

        # 关闭
        logger.info("Shutting down...")
        await engine.stop()

    app = FastAPI(
        title="TCM Clinic Records",
        description="中医诊所患者记录 - LINE 聊天记录导入与每周症状追踪",
        version=config.version,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 会话校验（在请求日志之内执行）
    app.add_middleware(AuthGateMiddleware)

    # 请求日志
    app.add_middleware(RequestLoggingMiddleware)

    # 异常处理
    register_error_handlers(app)

    # 路由
    app.include_router(api_router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
