# Overview: Default capability grants per role.

"""
Roles are fixed (ADMIN, MANAGER, STAFF); grants are not editable at runtime.

- STAFF: branch executive. Intake, KYC, hub logistics and melting.
- MANAGER: Regional Head. Everything STAFF can do plus approvals,
  accounts, masters, sales and market rates.
- ADMIN: every capability, including the audit trail.
"""

from .helpers import get_all_permission_codes


STAFF_PERMISSIONS = [
    "VIEW_STATE",
    "SUBMIT_LOTS",
    "VERIFY_KYC",
    "MANAGE_LOGISTICS",
    "RECORD_MELTING",
    "SYNC_CLIENT",
]

MANAGER_PERMISSIONS = STAFF_PERMISSIONS + [
    "APPROVE_LOTS",
    "ISSUE_INVOICES",
    "VERIFY_ACCOUNTS",
    "DISBURSE_PAYMENTS",
    "MANAGE_MASTERS",
    "MANAGE_SALES",
    "MANAGE_SETTINGS",
]

DEFAULT_ROLE_PERMISSIONS = {
    "ADMIN": get_all_permission_codes(),
    "MANAGER": MANAGER_PERMISSIONS,
    "STAFF": STAFF_PERMISSIONS,
}
