"""
套餐路由：从 Kill Bill 目录列出可订阅的套餐
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from loguru import logger

from fastapi_app.models.plans import BillingInterval
from fastapi_app.routers.base import ErrorHandlingRoute
from fastapi_app.services.plan_service import PlanService, get_plan_service
from fastapi_app.utils.errors import APIError, SystemError, ValidationError

router = APIRouter(route_class=ErrorHandlingRoute)


def parse_interval(interval: Optional[str]) -> Optional[BillingInterval]:
    if not interval:
        return None
    try:
        return BillingInterval(interval)
    except ValueError:
        raise ValidationError.invalid_interval() from None


@router.get("")
async def list_plans(
    interval: Optional[str] = Query(None, description="month | year"),
    plan_service: PlanService = Depends(get_plan_service),
):
    billing_interval = parse_interval(interval)
    try:
        plans = await plan_service.list_plans(billing_interval)
    except APIError:
        raise
    except Exception as e:
        logger.error(f"获取套餐异常: {e}")
        raise SystemError.internal_error("Failed to fetch plans") from e
    return JSONResponse(content=[plan.to_content() for plan in plans])
