#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Supabase 认证服务
通过 Supabase Auth (GoTrue) 的 REST 接口完成 PKCE 授权跳转、换取令牌、刷新令牌、登出与获取当前用户。

本服务只负责构造请求并返回原始响应，响应/错误的转换由路由层完成。
"""

from typing import Optional
from urllib.parse import urljoin

import httpx
from fastapi import Depends
from loguru import logger

from fastapi_app.config.settings import Settings, get_settings
from fastapi_app.utils.errors import ConfigError


class SupabaseAuthService:
    """Supabase 认证服务"""

    AUTHORIZE_PATH = "/auth/v1/authorize"
    TOKEN_PATH = "/auth/v1/token"
    LOGOUT_PATH = "/auth/v1/logout"
    USER_PATH = "/auth/v1/user"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            follow_redirects=False,
            **self.settings.http_client_options(),
        )

    def resolve_url(self, path: str, request_url: str) -> str:
        """
        构造 Supabase Auth 地址

        未配置 AUTH_BASE_URL 时回退到当前请求自身的地址（本地代理环境下同源部署）。
        """
        base_url = self.settings.AUTH_BASE_URL or request_url
        return urljoin(base_url, path)

    def require_api_key(self) -> str:
        apikey = self.settings.AUTH_SUPABASE_ANON_KEY
        if not apikey:
            logger.error("Supabase API key 未配置")
            raise ConfigError.missing_api_key()
        return apikey

    def _headers(self, apikey: Optional[str], authorization: Optional[str] = None, json_body: bool = False) -> dict:
        headers = {}
        if apikey:
            headers["apikey"] = apikey
        if authorization:
            headers["Authorization"] = authorization
        if json_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def authorize(self, request_url: str, redirect_to: str, code_challenge: str) -> httpx.Response:
        """
        请求 Supabase 授权端点，不跟随重定向，由调用方读取 Location
        """
        url = self.resolve_url(self.AUTHORIZE_PATH, request_url)
        params = {
            "provider": self.settings.AUTH_OAUTH_PROVIDER,
            "scopes": self.settings.AUTH_OAUTH_SCOPES,
            "redirect_to": redirect_to,
            "flow_type": "pkce",
            "code_challenge": code_challenge,
            "code_challenge_method": "s256",
        }
        logger.debug(f"[authorize] 请求 Supabase 授权地址: {url}")
        async with self._client() as client:
            return await client.get(url, params=params, headers=self._headers(self.settings.AUTH_SUPABASE_ANON_KEY))

    async def exchange_token(self, request_url: str, auth_code: str, code_verifier: str) -> httpx.Response:
        """使用授权码 + code_verifier 换取令牌（grant_type=pkce）"""
        apikey = self.require_api_key()
        url = self.resolve_url(self.TOKEN_PATH, request_url)
        logger.debug(f"[exchange-token] 请求 Supabase: {url}")
        async with self._client() as client:
            return await client.post(
                url,
                params={"grant_type": "pkce"},
                json={"auth_code": auth_code, "code_verifier": code_verifier},
                headers=self._headers(apikey, json_body=True),
            )

    async def refresh_token(self, request_url: str, refresh_token: str) -> httpx.Response:
        """使用刷新令牌获取新的访问令牌（grant_type=refresh_token）"""
        apikey = self.require_api_key()
        url = self.resolve_url(self.TOKEN_PATH, request_url)
        logger.debug(f"[refresh-token] 请求 Supabase: {url}")
        async with self._client() as client:
            return await client.post(
                url,
                params={"grant_type": "refresh_token"},
                json={"refresh_token": refresh_token},
                headers=self._headers(apikey, json_body=True),
            )

    async def logout(self, request_url: str, authorization: str) -> httpx.Response:
        """吊销当前会话的刷新令牌"""
        apikey = self.require_api_key()
        url = self.resolve_url(self.LOGOUT_PATH, request_url)
        logger.debug(f"[logout] 请求 Supabase: {url}")
        async with self._client() as client:
            return await client.post(url, headers=self._headers(apikey, authorization))

    async def get_user(self, request_url: str, authorization: str) -> httpx.Response:
        """获取 Authorization 对应的用户记录"""
        apikey = self.require_api_key()
        url = self.resolve_url(self.USER_PATH, request_url)
        logger.debug(f"[me] 请求 Supabase: {url}")
        async with self._client() as client:
            return await client.get(url, headers=self._headers(apikey, authorization))


def get_supabase_auth_service(settings: Settings = Depends(get_settings)) -> SupabaseAuthService:
    """获取 Supabase 认证服务实例（每个请求独立）"""
    return SupabaseAuthService(settings)
