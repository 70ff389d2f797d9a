"""
CORS 配置

CORS_ENABLED=false 时不安装中间件，由代理/负载均衡处理跨域。
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from fastapi_app.config.settings import CORS_ALLOW_HEADERS, CORS_ALLOW_METHODS, CORS_MAX_AGE, Settings


def setup_cors(app: FastAPI, settings: Settings) -> FastAPI:
    if not settings.CORS_ENABLED:
        logger.info("CORS 中间件已禁用，跨域由代理处理")
        return app

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
        expose_headers=["Location"],
        max_age=CORS_MAX_AGE,
    )
    logger.info(f"CORS 已启用: {', '.join(settings.CORS_ORIGINS)}")
    return app
