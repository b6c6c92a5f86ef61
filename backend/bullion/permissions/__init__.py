# Overview: Capability catalogue and role grants.
# Re-exports all public APIs.

from .categories import PermissionCategory
from .definitions import (
    PERMISSION_DEFINITIONS,
    LOT_PERMISSIONS,
    ACCOUNTS_PERMISSIONS,
    HUB_PERMISSIONS,
    MASTER_PERMISSIONS,
    SALES_PERMISSIONS,
    SYSTEM_PERMISSIONS,
)
from .roles import DEFAULT_ROLE_PERMISSIONS
from .helpers import describe_permissions, get_all_permission_codes

__all__ = [
    "PermissionCategory",
    "PERMISSION_DEFINITIONS",
    "LOT_PERMISSIONS",
    "ACCOUNTS_PERMISSIONS",
    "HUB_PERMISSIONS",
    "MASTER_PERMISSIONS",
    "SALES_PERMISSIONS",
    "SYSTEM_PERMISSIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "describe_permissions",
    "get_all_permission_codes",
]
