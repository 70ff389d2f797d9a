"""
测试公共夹具

所有下游 HTTP（Supabase Auth、Kill Bill）都通过 httpx.MockTransport 注入，测试不会访问网络。
"""
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from fastapi_app.config.settings import get_settings
from fastapi_app.services.killbill_service import KillBillService, get_killbill_service
from fastapi_app.services.supabase_auth_service import SupabaseAuthService, get_supabase_auth_service
from main_fastapi import app

KILLBILL_URL = "http://killbill.test"

TEST_ENV = {
    "AUTH_BASE_URL": "https://auth.test",
    "AUTH_SUPABASE_ANON_KEY": "anon-key",
    "AUTH_OAUTH_PROVIDER": "",
    "AUTH_OAUTH_SCOPES": "",
    "KILLBILL_BASE_URL": KILLBILL_URL + "/",
    "KILLBILL_API_KEY": "kb-key",
    "KILLBILL_API_SECRET": "kb-secret",
    "KILLBILL_USERNAME": "admin",
    "KILLBILL_PASSWORD": "password",
    "KILLBILL_DEFAULT_CURRENCY": "USD",
    "KILLBILL_CREATED_BY": "",
    "ENTERPRISE_CONTACT_EMAIL": "sales@kuala.test",
    "ENTERPRISE_CONTACT_PHONE": "+1-555-0100",
    "ENTERPRISE_CONTACT_MESSAGE": "Talk to our sales team",
    "API_ROOT_PATH": "",
}


class FakeUpstream:
    """按 (method, path) 返回预置响应，并记录收到的请求"""

    def __init__(self):
        self.routes = {}
        self.requests: list[httpx.Request] = []

    def on(self, method: str, path: str, responder):
        """responder 可以是 httpx.Response，也可以是 request -> Response 的函数（可抛出网络异常）"""
        self.routes[(method.upper(), path)] = responder
        return self

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responder = self.routes.get((request.method, request.url.path))
        if responder is None:
            return httpx.Response(599, json={"msg": f"unexpected {request.method} {request.url.path}"})
        if callable(responder):
            return responder(request)
        # 每次返回新的响应对象，同一路由可被多次调用
        return httpx.Response(responder.status_code, headers=responder.headers, content=responder.content)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]


def request_json(request: httpx.Request):
    return json.loads(request.content)


def connect_error(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def env(monkeypatch):
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    return monkeypatch


@pytest.fixture
def supabase():
    return FakeUpstream()


@pytest.fixture
def killbill():
    return FakeUpstream()


@pytest.fixture
def client(env, supabase, killbill):
    app.dependency_overrides[get_supabase_auth_service] = lambda: SupabaseAuthService(
        get_settings(), transport=supabase.transport
    )
    app.dependency_overrides[get_killbill_service] = lambda: KillBillService(
        get_settings(), transport=killbill.transport
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_catalog():
    """两个目录版本，只有最后一个生效"""
    return [
        {
            "name": "kuala-legacy",
            "effectiveDate": "2024-01-01T00:00:00Z",
            "products": [
                {
                    "name": "Legacy",
                    "plans": [{"name": "legacy-monthly", "phases": [{"type": "EVERGREEN", "prices": []}]}],
                }
            ],
            "priceLists": [{"name": "DEFAULT", "plans": ["legacy-monthly"]}],
        },
        {
            "name": "kuala",
            "effectiveDate": "2025-01-01T00:00:00Z",
            "currencies": ["USD", "IDR"],
            "products": [
                {
                    "type": "BASE",
                    "name": "Basic",
                    "prettyName": "Basic",
                    "included": ["priority-support", "api-access"],
                    "plans": [
                        {
                            "name": "basic-monthly",
                            "billingPeriod": "MONTHLY",
                            "phases": [
                                {"type": "TRIAL", "prices": []},
                                {
                                    "type": "EVERGREEN",
                                    "prices": [
                                        {"currency": "USD", "value": 10.0},
                                        {"currency": "IDR", "value": 150000},
                                    ],
                                },
                            ],
                        },
                        {
                            "name": "basic-monthly-promo",
                            "phases": [{"type": "EVERGREEN", "prices": [{"currency": "USD", "value": 5.0}]}],
                        },
                    ],
                },
                {
                    "type": "BASE",
                    "name": "Premium",
                    "prettyName": "Premium",
                    "included": ["everything"],
                    "plans": [
                        {
                            "name": "premium-trial-monthly",
                            "phases": [{"type": "TRIAL", "prices": [{"currency": "USD", "value": 0}]}],
                        }
                    ],
                },
                {
                    "type": "BASE",
                    "name": "Enterprise",
                    "prettyName": "Enterprise Plan",
                    "included": [],
                    "plans": [
                        {
                            "name": "enterprise-annual",
                            "billingPeriod": "ANNUAL",
                            "phases": [{"type": "EVERGREEN", "prices": [{"currency": "USD", "value": 1000}]}],
                        }
                    ],
                },
            ],
            "priceLists": [
                {"name": "DEFAULT", "plans": ["basic-monthly", "premium-trial-monthly", "enterprise-annual"]},
                {"name": "PROMO", "plans": ["basic-monthly-promo"]},
            ],
        },
    ]
