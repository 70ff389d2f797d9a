"""
订阅路由：为已认证用户创建 Kill Bill 订阅
"""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response
from loguru import logger

from fastapi_app.dependencies.auth import get_current_user
from fastapi_app.models.auth import AuthenticatedUser
from fastapi_app.models.subscription import CreateSubscriptionRequest
from fastapi_app.routers.base import ErrorHandlingRoute, read_json_object
from fastapi_app.services.subscription_service import SubscriptionService, get_subscription_service
from fastapi_app.utils.errors import APIError, SystemError

router = APIRouter(route_class=ErrorHandlingRoute)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_subscription(
    request: Request,
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: SubscriptionService = Depends(get_subscription_service),
):
    try:
        payload = CreateSubscriptionRequest.model_validate(await read_json_object(request))
        subscription_id = await service.create_subscription(current_user, payload)
    except APIError:
        raise
    except Exception as e:
        logger.error(f"创建订阅异常: {e}")
        raise SystemError.internal_error("Failed to create subscription") from e

    origin = f"{request.url.scheme}://{request.url.netloc}"
    return Response(
        status_code=status.HTTP_201_CREATED,
        headers={"Location": f"{origin}/subscriptions/{subscription_id}"},
    )
