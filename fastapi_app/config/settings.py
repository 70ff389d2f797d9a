#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
FastAPI 应用配置设置 - Supabase Auth + Kill Bill 方案

配置在每个请求中重新读取（见 get_settings），缺失的必需密钥在首次使用时报错，
而不是在启动时报错。
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# 加载环境变量文件
backend_root = Path(__file__).parent.parent.parent
env_path = backend_root / ".env"
load_dotenv(env_path)

# 应用信息
APP_NAME = "Kuala API"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "认证、套餐与订阅的前端后端（BFF）服务"

# CORS 允许的请求头与方法
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]
CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE"]
CORS_MAX_AGE = 86400


def _env(key: str, default: str = "") -> str:
    return os.getenv(key) or default


class Settings:
    """配置设置类"""

    def __init__(self):
        # 基本配置
        self.DEBUG = _env("DEBUG", "False").lower() == "true"
        self.LOG_LEVEL = _env("LOG_LEVEL", "INFO")
        self.APP_NAME = APP_NAME
        self.APP_VERSION = APP_VERSION
        self.API_ROOT_PATH = _env("API_ROOT_PATH").rstrip("/")
        # 未设置时使用 httpx 默认超时
        timeout = _env("HTTP_TIMEOUT_SECONDS")
        self.HTTP_TIMEOUT_SECONDS = float(timeout) if timeout else None

        # Supabase Auth（身份提供方）
        self.AUTH_BASE_URL = _env("AUTH_BASE_URL")
        self.AUTH_SUPABASE_ANON_KEY = _env("AUTH_SUPABASE_ANON_KEY")
        self.AUTH_OAUTH_PROVIDER = _env("AUTH_OAUTH_PROVIDER", "keycloak")
        self.AUTH_OAUTH_SCOPES = _env("AUTH_OAUTH_SCOPES", "openid")

        # Kill Bill（计费引擎）
        self.KILLBILL_BASE_URL = _env("KILLBILL_BASE_URL")
        self.KILLBILL_API_KEY = _env("KILLBILL_API_KEY")
        self.KILLBILL_API_SECRET = _env("KILLBILL_API_SECRET")
        self.KILLBILL_USERNAME = _env("KILLBILL_USERNAME")
        self.KILLBILL_PASSWORD = _env("KILLBILL_PASSWORD")
        self.KILLBILL_DEFAULT_CURRENCY = _env("KILLBILL_DEFAULT_CURRENCY")
        self.KILLBILL_CREATED_BY = _env("KILLBILL_CREATED_BY", "kuala-api")

        # 企业版联系方式
        self.ENTERPRISE_CONTACT_EMAIL = _env("ENTERPRISE_CONTACT_EMAIL")
        self.ENTERPRISE_CONTACT_PHONE = _env("ENTERPRISE_CONTACT_PHONE")
        self.ENTERPRISE_CONTACT_MESSAGE = _env("ENTERPRISE_CONTACT_MESSAGE")

        # CORS配置：只有显式的 "false" 才会关闭
        self.CORS_ENABLED = _env("CORS_ENABLED", "true").lower() != "false"
        self.CORS_ORIGIN = _env("CORS_ORIGIN", "*")

    def http_client_options(self) -> dict:
        """下游 httpx 客户端参数；未配置超时则不传，沿用 httpx 默认值"""
        if self.HTTP_TIMEOUT_SECONDS:
            return {"timeout": self.HTTP_TIMEOUT_SECONDS}
        return {}

    @property
    def CORS_ORIGINS(self) -> list[str]:
        if self.CORS_ORIGIN.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGIN.split(",") if origin.strip()]

    def get_config_summary(self):
        """获取配置摘要（不包含任何密钥）"""
        return {
            "app_name": self.APP_NAME,
            "app_version": self.APP_VERSION,
            "debug": self.DEBUG,
            "root_path": self.API_ROOT_PATH or "/",
            "auth_base_url": self.AUTH_BASE_URL or "(request url)",
            "auth_api_key_configured": bool(self.AUTH_SUPABASE_ANON_KEY),
            "killbill_base_url": self.KILLBILL_BASE_URL or "(unset)",
            "killbill_credentials_configured": bool(self.KILLBILL_USERNAME and self.KILLBILL_API_KEY),
            "cors": ",".join(self.CORS_ORIGINS) if self.CORS_ENABLED else "disabled",
        }


def get_settings() -> Settings:
    """每次调用都从环境变量重新构建配置（FastAPI 依赖）"""
    return Settings()


# 创建全局settings实例（仅用于应用组装阶段：CORS、日志、根路径）
settings = Settings()
