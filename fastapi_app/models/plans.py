"""
套餐相关的 Pydantic 模型
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class PlanTier(str, Enum):
    free = "free"
    basic = "basic"
    premium = "premium"
    enterprise = "enterprise"


class BillingInterval(str, Enum):
    month = "month"
    year = "year"


class Price(BaseModel):
    currency: str
    amount: int | float | None = None


class ContactUs(BaseModel):
    email: str
    phone: str | None = None
    body: str


class Plan(BaseModel):
    id: str
    name: str
    tier: PlanTier
    features: list[str] = Field(default_factory=list)
    prices: list[Price] = Field(default_factory=list)
    selectable: bool = True
    contact_us: ContactUs | None = Field(default=None, alias="contactUs")

    class Config:
        populate_by_name = True

    def to_content(self) -> dict:
        """序列化为接口输出；只有企业版套餐带 contactUs 字段"""
        data = self.model_dump(mode="json", by_alias=True)
        if self.contact_us is None:
            data.pop("contactUs", None)
        return data
