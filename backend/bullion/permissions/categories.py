# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    LOTS = "LOTS"
    HUB = "HUB"
    ACCOUNTS = "ACCOUNTS"
    MASTERS = "MASTERS"
    SALES = "SALES"
    SYSTEM = "SYSTEM"
