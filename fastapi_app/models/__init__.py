"""
FastAPI数据模型
"""

from .auth import AuthenticatedUser, ExchangeTokenRequest, RefreshTokenRequest
from .common import ErrorResponse
from .plans import BillingInterval, ContactUs, Plan, PlanTier, Price
from .subscription import CreateSubscriptionRequest, KillBillAccount, KillBillBundle, KillBillSubscription

__all__ = [
    'AuthenticatedUser',
    'ExchangeTokenRequest',
    'RefreshTokenRequest',
    'ErrorResponse',
    'BillingInterval',
    'ContactUs',
    'Plan',
    'PlanTier',
    'Price',
    'CreateSubscriptionRequest',
    'KillBillAccount',
    'KillBillBundle',
    'KillBillSubscription',
]
