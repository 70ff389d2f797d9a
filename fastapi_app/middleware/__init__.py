"""
中间件
"""

from fastapi import FastAPI

from fastapi_app.config.settings import Settings

from .cors import setup_cors
from .request_logging import setup_request_logging


def setup_middleware(app: FastAPI, settings: Settings) -> FastAPI:
    # 后添加的在外层：CORS 在最外层
    app = setup_request_logging(app)
    app = setup_cors(app, settings)
    return app


__all__ = ['setup_middleware', 'setup_cors', 'setup_request_logging']
