"""Constants package for TaskHub."""

from .plans import DEFAULT_PLAN, PLAN_LIMITS, PlanLimits, SubscriptionPlan, get_plan_limits
from .roles import DEFAULT_ROLE, TENANT_ASSIGNABLE_ROLES, RoleName

__all__ = [
    # Role constants
    "RoleName",
    "DEFAULT_ROLE",
    "TENANT_ASSIGNABLE_ROLES",
    # Plan constants
    "SubscriptionPlan",
    "PlanLimits",
    "PLAN_LIMITS",
    "DEFAULT_PLAN",
    "get_plan_limits",
]
