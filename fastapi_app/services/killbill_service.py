#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Kill Bill 计费引擎服务

职责：
- 获取商品目录（catalog）
- 按 externalKey 查询 / 创建账户
- 查询账户下的订阅包（bundles）、创建订阅

认证方式：Basic Auth（管理员账号）+ 租户 X-Killbill-ApiKey / X-Killbill-ApiSecret。
非 2xx 响应一律抛出 KillBillError，网络错误以 httpx.HTTPError 抛出，由调用方决定是否吸收。
"""

import base64
from typing import Any, Optional

import httpx
from fastapi import Depends
from loguru import logger

from fastapi_app.config.settings import Settings, get_settings


class KillBillError(Exception):
    """Kill Bill 返回非 2xx 响应"""

    def __init__(self, operation: str, status_code: int, body: str = ""):
        self.operation = operation
        self.status_code = status_code
        self.body = body
        super().__init__(f"Kill Bill API error during {operation}: {status_code}")


class KillBillService:
    API_PREFIX = "/1.0/kb"

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport
        self.base_url = settings.KILLBILL_BASE_URL.rstrip("/")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport, **self.settings.http_client_options())

    def _url(self, path: str) -> str:
        return f"{self.base_url}{self.API_PREFIX}{path}"

    def _headers(self, write: bool = False) -> dict[str, str]:
        credentials = f"{self.settings.KILLBILL_USERNAME}:{self.settings.KILLBILL_PASSWORD}"
        headers = {
            "Authorization": "Basic " + base64.b64encode(credentials.encode("utf-8")).decode("ascii"),
            "X-Killbill-ApiKey": self.settings.KILLBILL_API_KEY,
            "X-Killbill-ApiSecret": self.settings.KILLBILL_API_SECRET,
            "Accept": "application/json",
        }
        if write:
            headers["Content-Type"] = "application/json"
            headers["X-Killbill-CreatedBy"] = self.settings.KILLBILL_CREATED_BY
        return headers

    @staticmethod
    def _ensure_ok(operation: str, response: httpx.Response) -> httpx.Response:
        if not response.is_success:
            logger.warning(f"Kill Bill {operation} 失败: {response.status_code}")
            raise KillBillError(operation, response.status_code, response.text)
        return response

    # -------- Catalog --------
    async def get_catalog(self) -> list[dict[str, Any]]:
        url = self._url("/catalog")
        logger.info(f"从 Kill Bill 获取商品目录: {url}")
        async with self._client() as client:
            response = await client.get(url, headers=self._headers())
        catalogs = self._ensure_ok("get_catalog", response).json()
        logger.info(f"商品目录版本数: {len(catalogs) if isinstance(catalogs, list) else 0}")
        return catalogs

    # -------- Accounts --------
    async def get_account_by_external_key(self, external_key: str) -> dict[str, Any]:
        url = self._url("/accounts")
        params = {
            "externalKey": external_key,
            "accountWithBalance": "false",
            "accountWithBalanceAndCBA": "false",
        }
        logger.info(f"按 externalKey 查询 Kill Bill 账户: {external_key}")
        async with self._client() as client:
            response = await client.get(url, params=params, headers=self._headers())
        return self._ensure_ok("get_account", response).json()

    async def create_account(self, name: str, email: str, external_key: str, currency: str) -> Optional[str]:
        """创建账户，返回 Location 头（可能为空）"""
        url = self._url("/accounts")
        payload = {
            "name": name,
            "email": email,
            "externalKey": external_key,
            "currency": currency,
        }
        logger.info(f"创建 Kill Bill 账户: externalKey={external_key}")
        async with self._client() as client:
            response = await client.post(url, json=payload, headers=self._headers(write=True))
        return self._ensure_ok("create_account", response).headers.get("Location")

    async def get_account_by_location(self, location: str) -> dict[str, Any]:
        async with self._client() as client:
            response = await client.get(location, headers=self._headers())
        return self._ensure_ok("get_account_by_location", response).json()

    # -------- Bundles / Subscriptions --------
    async def get_account_bundles(self, account_id: str) -> Any:
        url = self._url(f"/accounts/{account_id}/bundles")
        logger.info(f"查询账户订阅包: accountId={account_id}")
        async with self._client() as client:
            response = await client.get(
                url, params={"externalKey": "", "bundlesFilter": ""}, headers=self._headers()
            )
        return self._ensure_ok("get_bundles", response).json()

    async def create_subscription(self, account_id: str, external_key: str, plan_name: str) -> Optional[str]:
        """创建订阅，返回 Location 头（可能为空）"""
        url = self._url("/subscriptions")
        payload = {
            "accountId": account_id,
            "externalKey": external_key,
            "planName": plan_name,
        }
        logger.info(f"创建 Kill Bill 订阅: accountId={account_id}, planName={plan_name}")
        async with self._client() as client:
            response = await client.post(url, json=payload, headers=self._headers(write=True))
        return self._ensure_ok("create_subscription", response).headers.get("Location")


def get_killbill_service(settings: Settings = Depends(get_settings)) -> KillBillService:
    """获取 Kill Bill 服务实例（每个请求独立）"""
    return KillBillService(settings)
