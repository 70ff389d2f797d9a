#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
订阅服务（基于 Kill Bill）

职责：
- 按用户 id（externalKey）获取或创建 Kill Bill 账户
- 检查账户是否已有未取消的 ACTIVE 订阅
- 创建订阅并返回订阅 id

每个下游步骤都有明确的失败策略（StepPolicy）：
- 查询账户、检查已有订阅：尽力而为，失败视为“未找到”继续执行
- 创建账户、获取账户详情、创建订阅：失败即终止请求

注意：“检查已有订阅 -> 创建订阅”不是原子操作，同一用户的并发请求可能都通过检查。
"""
from __future__ import annotations

import time
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from fastapi import Depends
from loguru import logger

from fastapi_app.config.settings import Settings, get_settings
from fastapi_app.models.auth import AuthenticatedUser
from fastapi_app.models.subscription import (
    CreateSubscriptionRequest,
    KillBillAccount,
    KillBillBundle,
    KillBillSubscription,
)
from fastapi_app.services.killbill_service import KillBillService, get_killbill_service
from fastapi_app.utils.errors import APIError, SubscriptionError, SystemError, ValidationError

UNKNOWN_SUBSCRIPTION_ID = "unknown"


class StepPolicy(str, Enum):
    BEST_EFFORT = "best_effort"
    FATAL = "fatal"


class SubscriptionService:
    ACCOUNT_LOOKUP_POLICY = StepPolicy.BEST_EFFORT
    ACCOUNT_CREATE_POLICY = StepPolicy.FATAL
    ACCOUNT_FETCH_POLICY = StepPolicy.FATAL
    EXISTING_SUBSCRIPTION_POLICY = StepPolicy.BEST_EFFORT
    SUBSCRIPTION_CREATE_POLICY = StepPolicy.FATAL

    def __init__(self, killbill: KillBillService, settings: Settings):
        self.killbill = killbill
        self.settings = settings

    @staticmethod
    def _provisioning_failed() -> APIError:
        return SystemError.internal_error("Failed to create subscription")

    async def _run_step(
        self,
        step: str,
        policy: StepPolicy,
        func: Callable[..., Awaitable[Any]],
        *args: Any,
        default: Any = None,
        on_fatal: Optional[Callable[[], APIError]] = None,
    ) -> Any:
        try:
            return await func(*args)
        except APIError:
            raise
        except Exception as e:
            if policy is StepPolicy.BEST_EFFORT:
                logger.warning(f"{step} 失败，按未找到处理: {e}")
                return default
            logger.error(f"{step} 失败: {e}")
            if on_fatal is not None:
                raise on_fatal() from e
            raise

    # -------- Accounts --------
    async def _find_account(self, user_id: str) -> KillBillAccount:
        data = await self.killbill.get_account_by_external_key(user_id)
        return KillBillAccount.model_validate(data)

    async def _fetch_account(self, location: str) -> KillBillAccount:
        data = await self.killbill.get_account_by_location(location)
        return KillBillAccount.model_validate(data)

    async def get_or_create_account(self, user_id: str, email: str) -> KillBillAccount:
        account = await self._run_step("查询 Kill Bill 账户", self.ACCOUNT_LOOKUP_POLICY, self._find_account, user_id)
        if account is not None:
            logger.info(f"找到已有 Kill Bill 账户: {account.account_id}")
            return account

        location = await self._run_step(
            "创建 Kill Bill 账户",
            self.ACCOUNT_CREATE_POLICY,
            self.killbill.create_account,
            email,
            email,
            user_id,
            self.settings.KILLBILL_DEFAULT_CURRENCY,
            on_fatal=self._provisioning_failed,
        )
        if not location:
            logger.error("创建账户响应缺少 Location 头")
            raise self._provisioning_failed()

        account = await self._run_step(
            "获取 Kill Bill 账户详情",
            self.ACCOUNT_FETCH_POLICY,
            self._fetch_account,
            location,
            on_fatal=self._provisioning_failed,
        )
        logger.info(f"已创建 Kill Bill 账户: {account.account_id}")
        return account

    # -------- Subscriptions --------
    async def _find_active_subscription(self, account_id: str) -> Optional[KillBillSubscription]:
        bundles = KillBillBundle.parse_list(await self.killbill.get_account_bundles(account_id))
        for bundle in bundles:
            for sub in bundle.subscriptions or []:
                if sub.is_active:
                    return sub
        return None

    async def get_active_subscription(self, account_id: str) -> Optional[KillBillSubscription]:
        sub = await self._run_step(
            "检查已有订阅",
            self.EXISTING_SUBSCRIPTION_POLICY,
            self._find_active_subscription,
            account_id,
        )
        if sub:
            logger.info(f"找到有效订阅: {sub.subscription_id} ({sub.plan_name})")
        else:
            logger.info("未找到有效订阅")
        return sub

    @staticmethod
    def subscription_id_from_location(location: Optional[str]) -> str:
        if not location:
            return UNKNOWN_SUBSCRIPTION_ID
        return location.split("/")[-1] or UNKNOWN_SUBSCRIPTION_ID

    async def create_subscription(
        self,
        user: Optional[AuthenticatedUser],
        payload: CreateSubscriptionRequest,
    ) -> str:
        """为已认证用户创建订阅，返回订阅 id"""
        if user is None:
            logger.error("缺少已认证用户，认证依赖未执行")
            raise self._provisioning_failed()

        plan_id = payload.plan_id
        if not plan_id:
            raise ValidationError.missing_plan_id()

        logger.info(f"创建订阅: userId={user.id}, planId={plan_id}")
        account = await self.get_or_create_account(user.id, user.email or "")

        existing = await self.get_active_subscription(account.account_id)
        if existing is not None:
            raise SubscriptionError.already_subscribed()

        external_key = f"sub-{account.account_id}-{int(time.time() * 1000)}"
        location = await self._run_step(
            "创建 Kill Bill 订阅",
            self.SUBSCRIPTION_CREATE_POLICY,
            self.killbill.create_subscription,
            account.account_id,
            external_key,
            plan_id,
            on_fatal=SubscriptionError.creation_failed,
        )
        subscription_id = self.subscription_id_from_location(location)
        logger.info(f"订阅创建成功: {subscription_id}")
        return subscription_id


def get_subscription_service(
    killbill: KillBillService = Depends(get_killbill_service),
    settings: Settings = Depends(get_settings),
) -> SubscriptionService:
    return SubscriptionService(killbill, settings)
