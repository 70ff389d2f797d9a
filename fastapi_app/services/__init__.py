"""
FastAPI服务层模块
"""

from .killbill_service import KillBillError, KillBillService, get_killbill_service
from .plan_service import PlanService, get_plan_service
from .subscription_service import StepPolicy, SubscriptionService, get_subscription_service
from .supabase_auth_service import SupabaseAuthService, get_supabase_auth_service

__all__ = [
    'KillBillError', 'KillBillService', 'get_killbill_service',
    'PlanService', 'get_plan_service',
    'StepPolicy', 'SubscriptionService', 'get_subscription_service',
    'SupabaseAuthService', 'get_supabase_auth_service',
]
