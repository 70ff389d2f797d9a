"""
订阅与 Kill Bill 账户的 Pydantic 模型
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from fastapi_app.models.common import OptionalText


class CreateSubscriptionRequest(BaseModel):
    """创建订阅请求。interval 等字段接受但不使用：计费周期已编码在套餐名中"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    plan_id: OptionalText = Field(default=None, alias="planId")
    interval: OptionalText = None
    promo_code: OptionalText = Field(default=None, alias="promoCode")
    payment_method_token: OptionalText = Field(default=None, alias="paymentMethodToken")


class KillBillAccount(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    account_id: str = Field(alias="accountId")
    name: str | None = None
    email: str | None = None
    external_key: str | None = Field(default=None, alias="externalKey")
    currency: str | None = None


class KillBillSubscription(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    subscription_id: str | None = Field(default=None, alias="subscriptionId")
    account_id: str | None = Field(default=None, alias="accountId")
    bundle_id: str | None = Field(default=None, alias="bundleId")
    plan_name: str | None = Field(default=None, alias="planName")
    state: str | None = None
    cancelled_date: str | None = Field(default=None, alias="cancelledDate")

    @property
    def is_active(self) -> bool:
        return self.state == "ACTIVE" and not self.cancelled_date


class KillBillBundle(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    bundle_id: str | None = Field(default=None, alias="bundleId")
    subscriptions: list[KillBillSubscription] | None = None

    @classmethod
    def parse_list(cls, data: Any) -> list["KillBillBundle"]:
        if not isinstance(data, list):
            return []
        return [cls.model_validate(item) for item in data if isinstance(item, dict)]
