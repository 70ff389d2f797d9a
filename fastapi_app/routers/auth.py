"""
基于 Supabase Auth 的认证路由

所有端点都是同一条流水线：校验输入 -> 解析配置 -> 调用 Supabase -> 转换响应。
缺少必填字段时在任何下游调用之前返回 400。
"""

import re
from typing import Optional
from urllib.parse import urlparse

import httpx
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response
from loguru import logger

from fastapi_app.dependencies.auth import require_authorization
from fastapi_app.models.auth import ExchangeTokenRequest, RefreshTokenRequest
from fastapi_app.routers.base import ErrorHandlingRoute, read_json_object
from fastapi_app.services.supabase_auth_service import SupabaseAuthService, get_supabase_auth_service
from fastapi_app.utils.errors import SupabaseErrorMapper, UpstreamError, ValidationError

router = APIRouter(route_class=ErrorHandlingRoute)

URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*$")


def is_absolute_url(value: str) -> bool:
    """scheme:rest 形式即可，不要求 authority（原生应用的 com.example.app:/cb 等）"""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    if not URL_SCHEME.match(parsed.scheme):
        return False
    return bool(parsed.netloc or parsed.path or parsed.query or parsed.fragment)


def forward_json(handler: str, response: httpx.Response) -> JSONResponse:
    """成功时原样透传 Supabase 的 JSON 与状态码，失败时映射为本服务的错误结构"""
    data = response.json()
    if not response.is_success:
        error = SupabaseErrorMapper.to_api_error(data, response.status_code)
        logger.warning(f"[{handler}] Supabase 返回错误: {response.status_code} {error.code}")
        raise error
    logger.info(f"[{handler}] 成功: {response.status_code}")
    return JSONResponse(content=data, status_code=response.status_code)


@router.get("/authorize")
async def authorize(
    request: Request,
    redirect_to: Optional[str] = Query(None),
    code_challenge: Optional[str] = Query(None),
    auth_service: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    if not redirect_to:
        raise ValidationError.missing_redirect_to()
    if not code_challenge:
        raise ValidationError.missing_code_challenge()
    if not is_absolute_url(redirect_to):
        raise ValidationError.invalid_redirect_to()

    response = await auth_service.authorize(str(request.url), redirect_to, code_challenge)
    if response.status_code == status.HTTP_302_FOUND:
        location = response.headers.get("location")
        if not location:
            logger.error("[authorize] Supabase 302 响应缺少 Location")
            raise UpstreamError.no_redirect_location()
        logger.info("[authorize] 重定向到 OAuth 提供方")
        return RedirectResponse(location, status_code=status.HTTP_302_FOUND)

    logger.warning(f"[authorize] Supabase OAuth 错误: {response.status_code}")
    raise UpstreamError.oauth_error(response.status_code)


@router.post("/exchange-token")
async def exchange_token(
    request: Request,
    auth_service: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    payload = ExchangeTokenRequest.model_validate(await read_json_object(request))
    if not payload.auth_code:
        raise ValidationError.missing_auth_code()
    if not payload.code_verifier:
        raise ValidationError.missing_code_verifier()

    response = await auth_service.exchange_token(str(request.url), payload.auth_code, payload.code_verifier)
    return forward_json("exchange-token", response)


@router.post("/refresh-token")
async def refresh_token(
    request: Request,
    auth_service: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    payload = RefreshTokenRequest.model_validate(await read_json_object(request))
    if not payload.refresh_token:
        raise ValidationError.missing_refresh_token()

    response = await auth_service.refresh_token(str(request.url), payload.refresh_token)
    return forward_json("refresh-token", response)


@router.post("/logout")
async def logout(
    request: Request,
    authorization: str = Depends(require_authorization),
    auth_service: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    response = await auth_service.logout(str(request.url), authorization)
    if not response.is_success:
        error = SupabaseErrorMapper.to_api_error(response.json(), response.status_code)
        logger.warning(f"[logout] Supabase 返回错误: {response.status_code} {error.code}")
        raise error

    logger.info("[logout] 用户登出成功")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me")
async def me(
    request: Request,
    authorization: str = Depends(require_authorization),
    auth_service: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    response = await auth_service.get_user(str(request.url), authorization)
    return forward_json("me", response)
