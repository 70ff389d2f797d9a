"""
Kill Bill 商品目录过滤器

把 Kill Bill 的嵌套目录（catalog 版本 -> products -> plans -> phases）转换为前端使用的扁平套餐列表。

规则：
1. 只使用最新的目录版本（数组最后一个元素）
2. 套餐必须有 EVERGREEN 阶段，且出现在名为 DEFAULT 的价格表中，否则跳过（试用阶段、非默认价格表不可选）
3. 商品名映射到套餐等级，未知商品名默认 basic
4. included 特性名：连字符替换为空格，每个单词首字母大写
5. 价格原样复制 EVERGREEN 阶段的 {currency, value}
6. 企业版不可自助选择，并附带联系方式

纯函数：同一目录输入总是得到相同的输出。
"""

import re
from typing import Any, Iterable, Optional

from loguru import logger

from fastapi_app.models.plans import BillingInterval, ContactUs, Plan, PlanTier, Price

PRODUCT_TIER_MAPPING = {
    "Free": PlanTier.free,
    "Basic": PlanTier.basic,
    "Premium": PlanTier.premium,
    "Enterprise": PlanTier.enterprise,
}

EVERGREEN_PHASE = "EVERGREEN"
DEFAULT_PRICE_LIST = "DEFAULT"

# 套餐 id 中表示计费周期的命名约定
INTERVAL_ID_MARKERS = {
    BillingInterval.year: "annual",
    BillingInterval.month: "monthly",
}

_WORD_START = re.compile(r"\b\w")


class CatalogUnavailableError(Exception):
    """Kill Bill 未返回任何目录版本"""


def humanize_feature(feature: str) -> str:
    return _WORD_START.sub(lambda m: m.group(0).upper(), feature.replace("-", " "))


class CatalogFilter:
    """Kill Bill 目录 -> 套餐列表"""

    def __init__(self, contact_us: Optional[ContactUs] = None):
        self.contact_us = contact_us

    @staticmethod
    def latest_catalog(catalogs: Any) -> dict[str, Any]:
        if not isinstance(catalogs, list) or not catalogs:
            raise CatalogUnavailableError("No catalog available from Kill Bill")
        return catalogs[-1]

    @staticmethod
    def _default_price_list_plans(catalog: dict[str, Any]) -> set[str]:
        for price_list in catalog.get("priceLists") or []:
            if price_list.get("name") == DEFAULT_PRICE_LIST:
                return set(price_list.get("plans") or [])
        return set()

    @staticmethod
    def _evergreen_phase(plan: dict[str, Any]) -> Optional[dict[str, Any]]:
        for phase in plan.get("phases") or []:
            if phase.get("type") == EVERGREEN_PHASE:
                return phase
        return None

    def _build_plan(self, product: dict[str, Any], plan: dict[str, Any], phase: dict[str, Any]) -> Plan:
        tier = PRODUCT_TIER_MAPPING.get(product.get("name"), PlanTier.basic)
        features = [humanize_feature(str(item)) for item in (product.get("included") or [])]
        prices = [
            Price(currency=price.get("currency"), amount=price.get("value"))
            for price in (phase.get("prices") or [])
        ]
        is_enterprise = tier == PlanTier.enterprise
        return Plan(
            id=plan["name"],
            name=product.get("prettyName") or product.get("name"),
            tier=tier,
            features=features,
            prices=prices,
            selectable=not is_enterprise,
            contact_us=self.contact_us if is_enterprise else None,
        )

    def transform(self, catalogs: Any) -> list[Plan]:
        catalog = self.latest_catalog(catalogs)
        default_plans = self._default_price_list_plans(catalog)

        plans: list[Plan] = []
        for product in catalog.get("products") or []:
            for plan in product.get("plans") or []:
                phase = self._evergreen_phase(plan)
                if phase is None:
                    continue
                if plan.get("name") not in default_plans:
                    continue
                plans.append(self._build_plan(product, plan, phase))

        logger.info(f"目录转换完成: {len(plans)} 个套餐")
        return plans


def filter_by_interval(plans: Iterable[Plan], interval: Optional[BillingInterval]) -> list[Plan]:
    """按套餐 id 中的命名约定（annual / monthly）过滤计费周期"""
    if interval is None:
        return list(plans)
    marker = INTERVAL_ID_MARKERS[interval]
    return [plan for plan in plans if marker in plan.id.lower()]
