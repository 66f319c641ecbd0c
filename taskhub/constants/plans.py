"""Subscription plans and the quotas attached to them."""

from dataclasses import dataclass
from enum import Enum


class SubscriptionPlan(str, Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


@dataclass(frozen=True)
class PlanLimits:
    max_users: int
    max_projects: int


PLAN_LIMITS = {
    SubscriptionPlan.FREE: PlanLimits(max_users=5, max_projects=3),
    SubscriptionPlan.PRO: PlanLimits(max_users=25, max_projects=15),
    SubscriptionPlan.ENTERPRISE: PlanLimits(max_users=100, max_projects=50),
}

DEFAULT_PLAN = SubscriptionPlan.FREE


def get_plan_limits(plan: str) -> PlanLimits:
    """Return the limits for *plan*; raises ValueError for unknown plans."""
    return PLAN_LIMITS[SubscriptionPlan(plan)]
