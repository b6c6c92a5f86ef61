# Overview: All permission definitions organized by category.
# Each permission is defined as: (code, name, description, category)

from .categories import PermissionCategory


# -- LOTS --

LOT_PERMISSIONS = [
    (
        "VIEW_STATE",
        "View State",
        "Read the tenant snapshot, lots and work queues",
        PermissionCategory.LOTS,
    ),
    (
        "SUBMIT_LOTS",
        "Submit Lots",
        "Create and re-submit Pending lots (material inward, quotation)",
        PermissionCategory.LOTS,
    ),
    (
        "APPROVE_LOTS",
        "Approve Lots",
        "Approve or reject Pending lots (Regional Head)",
        PermissionCategory.LOTS,
    ),
    (
        "SYNC_CLIENT",
        "Sync Client",
        "Replay queued client mutations through the sync gateway",
        PermissionCategory.LOTS,
    ),
]


# -- ACCOUNTS --

ACCOUNTS_PERMISSIONS = [
    (
        "ISSUE_INVOICES",
        "Issue Invoices",
        "Issue purchase invoices for Approved lots",
        PermissionCategory.ACCOUNTS,
    ),
    (
        "VERIFY_ACCOUNTS",
        "Verify Accounts",
        "Mark invoiced lots as verified by accounts",
        PermissionCategory.ACCOUNTS,
    ),
    (
        "DISBURSE_PAYMENTS",
        "Disburse Payments",
        "Record customer payments for verified lots",
        PermissionCategory.ACCOUNTS,
    ),
]


# -- HUB --

HUB_PERMISSIONS = [
    (
        "MANAGE_LOGISTICS",
        "Manage Logistics",
        "Dispatch paid lots to the hub and confirm receipt",
        PermissionCategory.HUB,
    ),
    (
        "RECORD_MELTING",
        "Record Melting",
        "Record melting output and loss for received lots",
        PermissionCategory.HUB,
    ),
]


# -- MASTERS --

MASTER_PERMISSIONS = [
    (
        "MANAGE_MASTERS",
        "Manage Masters",
        "Create and edit franchises, hubs, buyers, staff and customers",
        PermissionCategory.MASTERS,
    ),
    (
        "VERIFY_KYC",
        "Verify KYC",
        "Run identity verification and read KYC records",
        PermissionCategory.MASTERS,
    ),
]


# -- SALES --

SALES_PERMISSIONS = [
    (
        "MANAGE_SALES",
        "Manage Sales",
        "Create and edit institutional sales orders",
        PermissionCategory.SALES,
    ),
]


# -- SYSTEM --

SYSTEM_PERMISSIONS = [
    (
        "MANAGE_SETTINGS",
        "Manage Settings",
        "Set market rates and tenant settings",
        PermissionCategory.SYSTEM,
    ),
    (
        "VIEW_AUDIT_LOG",
        "View Audit Log",
        "Read the tenant audit trail",
        PermissionCategory.SYSTEM,
    ),
]


PERMISSION_DEFINITIONS = (
    LOT_PERMISSIONS
    + ACCOUNTS_PERMISSIONS
    + HUB_PERMISSIONS
    + MASTER_PERMISSIONS
    + SALES_PERMISSIONS
    + SYSTEM_PERMISSIONS
)
