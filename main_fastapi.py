#!/usr/bin/env python3
"""
FastAPI应用启动脚本
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

# 导入配置
from fastapi_app.config import settings
from fastapi_app.utils.errors import APIError, SystemError


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    from fastapi_app.config.logging_config import setup_logging

    setup_logging(level=settings.LOG_LEVEL)

    logger.info("🚀 FastAPI应用启动中...")
    for key, value in settings.get_config_summary().items():
        logger.info(f"   {key}: {value}")
    logger.info("✅ FastAPI应用启动完成")

    yield

    logger.info("👋 FastAPI应用已停止")


def _error_response(error: APIError, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(content=error.to_response().to_content(), status_code=error.status_code, headers=headers)


def register_exception_handlers(app: FastAPI) -> None:
    """所有错误统一渲染为 {code, message, details?}"""

    @app.exception_handler(APIError)
    async def api_error_handler(request: Request, exc: APIError):
        return _error_response(exc)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            error = SystemError.not_found()
        elif exc.status_code == 405:
            error = SystemError.method_not_allowed()
        else:
            error = APIError(exc.status_code, f"HTTP_{exc.status_code}", str(exc.detail))
        return _error_response(error, headers=getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(f"未处理的异常: {exc}")
        return _error_response(SystemError.internal_error())


def create_fastapi_app() -> FastAPI:
    """创建FastAPI应用"""

    app = FastAPI(
        title=settings.APP_NAME,
        description="认证、套餐与订阅 API",
        version=settings.APP_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
        debug=settings.DEBUG,
    )

    register_exception_handlers(app)

    # 请求日志 + CORS
    from fastapi_app.middleware import setup_middleware

    app = setup_middleware(app, settings)

    # 注册路由
    from fastapi_app.routers import auth, plans, subscription

    root = settings.API_ROOT_PATH
    app.include_router(auth.router, prefix=f"{root}/auth", tags=["认证"])
    app.include_router(plans.router, prefix=f"{root}/plans", tags=["套餐"])
    app.include_router(subscription.router, prefix=f"{root}/subscriptions", tags=["订阅"])

    # 健康检查
    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "framework": "FastAPI"}

    return app


# 创建应用实例
app = create_fastapi_app()


if __name__ == "__main__":
    import uvicorn

    host = os.environ.get('SERVER_HOST', '0.0.0.0')
    port = int(os.environ.get('SERVER_PORT', 54321))

    logger.info(f"🚀 启动FastAPI服务器于 http://{host}:{port}")
    logger.info(f"📚 API文档: http://localhost:{port}/docs")

    uvicorn.run(
        "main_fastapi:app",
        host=host,
        port=port,
        reload=settings.DEBUG,
        log_level="debug" if settings.DEBUG else "info",
        reload_dirs=["./fastapi_app"] if settings.DEBUG else None,
    )
