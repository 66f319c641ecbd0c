"""Authorization, quota and audit core shared by every resource service."""

from .audit import AuditRecorder
from .permissions import Action, ResourceKind, can, require
from .principal import UNRESTRICTED, Principal, Scoped, TenantScope, Unrestricted
from .quota import QuotaGuard
from .scope import apply_scope, authorize_tenant_match, ensure_visible, in_scope, resolve_scope

__all__ = [
    "Action",
    "AuditRecorder",
    "Principal",
    "QuotaGuard",
    "ResourceKind",
    "Scoped",
    "TenantScope",
    "UNRESTRICTED",
    "Unrestricted",
    "apply_scope",
    "authorize_tenant_match",
    "can",
    "ensure_visible",
    "in_scope",
    "require",
    "resolve_scope",
]
