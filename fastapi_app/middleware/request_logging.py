"""
请求日志中间件
"""

import time

from fastapi import FastAPI, Request
from loguru import logger


def setup_request_logging(app: FastAPI) -> FastAPI:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        logger.info(f"<-- {request.method} {request.url.path}")
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(f"--> {request.method} {request.url.path} {response.status_code} {elapsed_ms:.0f}ms")
        return response

    return app
