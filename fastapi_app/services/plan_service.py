#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
套餐服务：从 Kill Bill 目录生成可展示的套餐列表
"""
from __future__ import annotations

from fastapi import Depends
from loguru import logger

from fastapi_app.config.settings import Settings, get_settings
from fastapi_app.models.plans import BillingInterval, ContactUs, Plan
from fastapi_app.services.killbill_service import KillBillService, get_killbill_service
from fastapi_app.utils.catalog_filter import CatalogFilter, filter_by_interval
from fastapi_app.utils.errors import SubscriptionError, UpstreamError


class PlanService:
    def __init__(self, killbill: KillBillService, settings: Settings):
        self.killbill = killbill
        self.settings = settings

    def _enterprise_contact(self) -> ContactUs:
        return ContactUs(
            email=self.settings.ENTERPRISE_CONTACT_EMAIL,
            phone=self.settings.ENTERPRISE_CONTACT_PHONE,
            body=self.settings.ENTERPRISE_CONTACT_MESSAGE,
        )

    async def fetch_plans(self) -> list[Plan]:
        """获取并转换目录；任何失败（网络、非 2xx、空目录、结构异常）统一视为 Kill Bill 不可用"""
        try:
            catalogs = await self.killbill.get_catalog()
            return CatalogFilter(self._enterprise_contact()).transform(catalogs)
        except Exception as e:
            logger.warning(f"Kill Bill 不可用: {e}")
            raise UpstreamError.killbill_unavailable() from e

    async def list_plans(self, interval: BillingInterval | None = None) -> list[Plan]:
        plans = filter_by_interval(await self.fetch_plans(), interval)
        if not plans:
            raise SubscriptionError.no_plans_available()
        logger.info(f"返回套餐: interval={interval.value if interval else 'all'}, 数量={len(plans)}")
        return plans


def get_plan_service(
    killbill: KillBillService = Depends(get_killbill_service),
    settings: Settings = Depends(get_settings),
) -> PlanService:
    return PlanService(killbill, settings)
