"""
路由基类：端点边界的统一异常兜底

任何未被处理的异常都转换为 INTERNAL_ERROR，客户端永远不会看到原始异常。
"""

from typing import Any, Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from fastapi_app.utils.errors import APIError, SystemError


class ErrorHandlingRoute(APIRoute):
    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except (APIError, StarletteHTTPException, RequestValidationError):
                raise
            except Exception as e:
                logger.exception(f"{request.method} {request.url.path} 未处理的异常: {e}")
                raise SystemError.internal_error() from e

        return route_handler


async def read_json_object(request: Request) -> dict[str, Any]:
    """读取 JSON 请求体；不是对象（数组、字符串等）时按空对象处理，由必填字段校验返回 400"""
    body = await request.json()
    return body if isinstance(body, dict) else {}
