"""
认证依赖：通过 Supabase Auth /auth/v1/user 校验 Authorization 并返回用户

作为 FastAPI 依赖显式注入到需要登录的路由中。
"""

from typing import Optional

from fastapi import Depends, Header, Request
from loguru import logger

from fastapi_app.models.auth import AuthenticatedUser
from fastapi_app.services.supabase_auth_service import SupabaseAuthService, get_supabase_auth_service
from fastapi_app.utils.errors import AuthError


def require_authorization(authorization: Optional[str] = Header(None)) -> str:
    if not authorization:
        logger.warning("缺少 Authorization 请求头")
        raise AuthError.missing_authorization()
    return authorization


async def get_current_user(
    request: Request,
    authorization: str = Depends(require_authorization),
    auth_service: SupabaseAuthService = Depends(get_supabase_auth_service),
) -> AuthenticatedUser:
    # 缺少 API key、网络错误、响应解析失败都按令牌无效处理
    try:
        response = await auth_service.get_user(str(request.url), authorization)
        data = response.json() if response.is_success else None
    except Exception as e:
        logger.error(f"获取认证用户异常: {e}")
        raise AuthError.unauthorized() from e

    if data is None:
        logger.warning(f"Supabase 拒绝令牌: {response.status_code}")
        raise AuthError.unauthorized()
    if not isinstance(data, dict) or not data.get("id") or not data.get("email"):
        logger.warning("用户记录缺少 id 或 email")
        raise AuthError.unauthorized()

    user = AuthenticatedUser.model_validate(data)
    logger.info(f"用户认证成功: {user.id}")
    return user
