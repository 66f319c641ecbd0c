"""
Role Constants for TaskHub

The three roles of the tenant hierarchy. Only super_admin lives outside any
tenant.
"""

from enum import Enum


class RoleName(str, Enum):
    """Enumeration of role names in the system."""

    SUPER_ADMIN = "super_admin"
    TENANT_ADMIN = "tenant_admin"
    USER = "user"


# Default role for users created inside a tenant
DEFAULT_ROLE = RoleName.USER

# Roles a tenant_admin may hand out
TENANT_ASSIGNABLE_ROLES = frozenset({RoleName.TENANT_ADMIN, RoleName.USER})
