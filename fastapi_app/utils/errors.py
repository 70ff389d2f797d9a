#!/usr/bin/env python3
"""
标准化错误处理模块

所有非 2xx 响应体都遵循 ErrorResponse: {code, message, details?}
"""

from enum import Enum
from typing import Any

from fastapi import status
from pydantic import BaseModel


class ErrorCode(Enum):
    """标准错误代码枚举"""

    # 参数校验错误
    MISSING_REDIRECT_TO = "MISSING_REDIRECT_TO"
    MISSING_CODE_CHALLENGE = "MISSING_CODE_CHALLENGE"
    INVALID_REDIRECT_TO = "INVALID_REDIRECT_TO"
    MISSING_AUTH_CODE = "MISSING_AUTH_CODE"
    MISSING_CODE_VERIFIER = "MISSING_CODE_VERIFIER"
    MISSING_REFRESH_TOKEN = "MISSING_REFRESH_TOKEN"
    MISSING_PLAN_ID = "MISSING_PLAN_ID"
    INVALID_INTERVAL = "INVALID_INTERVAL"

    # 认证相关错误
    MISSING_AUTHORIZATION = "MISSING_AUTHORIZATION"
    UNAUTHORIZED = "UNAUTHORIZED"

    # 配置错误
    MISSING_API_KEY = "MISSING_API_KEY"

    # 上游服务错误
    NO_REDIRECT_LOCATION = "NO_REDIRECT_LOCATION"
    SUPABASE_OAUTH_ERROR = "SUPABASE_OAUTH_ERROR"
    SUPABASE_ERROR = "SUPABASE_ERROR"
    KILLBILL_UNAVAILABLE = "KILLBILL_UNAVAILABLE"

    # 业务错误
    NO_PLANS_AVAILABLE = "NO_PLANS_AVAILABLE"
    ALREADY_SUBSCRIBED = "ALREADY_SUBSCRIBED"
    SUBSCRIPTION_CREATION_FAILED = "SUBSCRIPTION_CREATION_FAILED"

    # 系统相关错误
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorResponse(BaseModel):
    """标准错误响应模型"""

    code: str
    message: str
    details: str | None = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class APIError(Exception):
    """由处理函数抛出、在应用层统一渲染为 ErrorResponse 的异常"""

    def __init__(self, status_code: int, code: ErrorCode | str, message: str, details: str | None = None):
        self.status_code = status_code
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message
        self.details = details
        super().__init__(f"{self.code}: {message}")

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(code=self.code, message=self.message, details=self.details)


class ValidationError:
    """参数校验错误工具类"""

    @staticmethod
    def missing_redirect_to() -> APIError:
        return APIError(status.HTTP_400_BAD_REQUEST, ErrorCode.MISSING_REDIRECT_TO, "redirect_to parameter is required")

    @staticmethod
    def missing_code_challenge() -> APIError:
        return APIError(
            status.HTTP_400_BAD_REQUEST, ErrorCode.MISSING_CODE_CHALLENGE, "code_challenge parameter is required"
        )

    @staticmethod
    def invalid_redirect_to() -> APIError:
        return APIError(status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_REDIRECT_TO, "redirect_to must be a valid URL")

    @staticmethod
    def missing_auth_code() -> APIError:
        return APIError(status.HTTP_400_BAD_REQUEST, ErrorCode.MISSING_AUTH_CODE, "auth_code is required")

    @staticmethod
    def missing_code_verifier() -> APIError:
        return APIError(status.HTTP_400_BAD_REQUEST, ErrorCode.MISSING_CODE_VERIFIER, "code_verifier is required")

    @staticmethod
    def missing_refresh_token() -> APIError:
        return APIError(status.HTTP_400_BAD_REQUEST, ErrorCode.MISSING_REFRESH_TOKEN, "refresh_token is required")

    @staticmethod
    def missing_plan_id() -> APIError:
        return APIError(status.HTTP_400_BAD_REQUEST, ErrorCode.MISSING_PLAN_ID, "planId is required")

    @staticmethod
    def invalid_interval() -> APIError:
        return APIError(
            status.HTTP_400_BAD_REQUEST, ErrorCode.INVALID_INTERVAL, "Interval must be 'month' or 'year'"
        )


class AuthError:
    """认证相关错误工具类"""

    @staticmethod
    def missing_authorization() -> APIError:
        return APIError(
            status.HTTP_401_UNAUTHORIZED, ErrorCode.MISSING_AUTHORIZATION, "Authorization header is required"
        )

    @staticmethod
    def unauthorized() -> APIError:
        return APIError(status.HTTP_401_UNAUTHORIZED, ErrorCode.UNAUTHORIZED, "Invalid or expired token")


class ConfigError:
    """配置错误工具类"""

    @staticmethod
    def missing_api_key() -> APIError:
        return APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.MISSING_API_KEY, "Supabase API key not configured"
        )


class UpstreamError:
    """上游服务（Supabase / Kill Bill）错误工具类"""

    @staticmethod
    def no_redirect_location() -> APIError:
        return APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.NO_REDIRECT_LOCATION, "No redirect location found"
        )

    @staticmethod
    def oauth_error(status_code: int) -> APIError:
        # 上游状态码透传；非错误状态码（如 200）不能作为错误响应返回
        if status_code < 400:
            status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
        return APIError(
            status_code,
            ErrorCode.SUPABASE_OAUTH_ERROR,
            "Sorry, we encountered an error with the OAuth provider",
        )

    @staticmethod
    def killbill_unavailable() -> APIError:
        return APIError(
            status.HTTP_503_SERVICE_UNAVAILABLE,
            ErrorCode.KILLBILL_UNAVAILABLE,
            "Kill Bill service is currently unavailable",
        )


class SubscriptionError:
    """套餐与订阅业务错误工具类"""

    @staticmethod
    def no_plans_available() -> APIError:
        return APIError(
            status.HTTP_404_NOT_FOUND,
            ErrorCode.NO_PLANS_AVAILABLE,
            "No plans available for the specified interval",
        )

    @staticmethod
    def already_subscribed() -> APIError:
        return APIError(
            status.HTTP_409_CONFLICT, ErrorCode.ALREADY_SUBSCRIBED, "Already subscribed to a non-cancellable plan"
        )

    @staticmethod
    def creation_failed() -> APIError:
        return APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            ErrorCode.SUBSCRIPTION_CREATION_FAILED,
            "Failed to create subscription",
        )


class SystemError:
    """系统错误工具类"""

    @staticmethod
    def internal_error(message: str = "Internal server error") -> APIError:
        return APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR, message)

    @staticmethod
    def not_found() -> APIError:
        return APIError(status.HTTP_404_NOT_FOUND, ErrorCode.NOT_FOUND, "Not Found")

    @staticmethod
    def method_not_allowed() -> APIError:
        return APIError(status.HTTP_405_METHOD_NOT_ALLOWED, ErrorCode.METHOD_NOT_ALLOWED, "Method Not Allowed")


class SupabaseErrorMapper:
    """把 Supabase Auth 的错误响应体映射为本服务的错误结构"""

    @staticmethod
    def status_code(data: dict[str, Any], upstream_status: int) -> int:
        body_code = data.get("code")
        if isinstance(body_code, int) and not isinstance(body_code, bool) and 400 <= body_code <= 599:
            return body_code
        if 400 <= upstream_status <= 599:
            return upstream_status
        return status.HTTP_500_INTERNAL_SERVER_ERROR

    @classmethod
    def to_api_error(cls, data: Any, upstream_status: int) -> APIError:
        if not isinstance(data, dict):
            data = {}
        code = data.get("error_code") or ErrorCode.SUPABASE_ERROR.value
        message = data.get("error_description") or data.get("msg") or "Error from Supabase"
        return APIError(cls.status_code(data, upstream_status), code, message)
