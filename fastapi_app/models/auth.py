"""
认证相关的Pydantic模型
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from fastapi_app.models.common import OptionalText


class ExchangeTokenRequest(BaseModel):
    """授权码换取令牌请求（PKCE）"""
    auth_code: OptionalText = Field(None, description="OAuth 授权码")
    code_verifier: OptionalText = Field(None, description="PKCE code_verifier")

    class Config:
        json_schema_extra = {
            "example": {
                "auth_code": "8f2c6a1e-7c1d-4d0e-9a57-2f0c7f1c8b11",
                "code_verifier": "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
            }
        }


class RefreshTokenRequest(BaseModel):
    """刷新令牌请求"""
    refresh_token: OptionalText = Field(None, description="刷新令牌")

    class Config:
        json_schema_extra = {
            "example": {
                "refresh_token": "v1.MTY4Mzk4..."
            }
        }


class AuthenticatedUser(BaseModel):
    """Supabase Auth 返回的用户记录（只读，每次请求从身份提供方获取）"""
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., description="用户ID (UUID)")
    aud: Optional[str] = None
    role: Optional[str] = None
    email: Optional[str] = Field(None, description="邮箱地址")
    email_confirmed_at: Optional[str] = None
    phone: Optional[str] = None
    confirmed_at: Optional[str] = None
    last_sign_in_at: Optional[str] = None
    app_metadata: Optional[dict[str, Any]] = None
    user_metadata: Optional[dict[str, Any]] = None
    identities: Optional[list[dict[str, Any]]] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    is_anonymous: Optional[bool] = None
