# Overview: Lookups over the permission catalogue.

from .definitions import PERMISSION_DEFINITIONS


def get_all_permission_codes():
    """Every capability code, in catalogue order."""
    return [perm[0] for perm in PERMISSION_DEFINITIONS]


def describe_permissions(codes):
    """
    Catalogue entries for the given codes, grouped by category.

    Unknown codes are skipped. Used by /auth/me so clients can label the
    capabilities of the current role.
    """
    wanted = set(codes)
    grouped = {}
    for code, name, description, category in PERMISSION_DEFINITIONS:
        if code in wanted:
            grouped.setdefault(category, []).append({
                "code": code,
                "name": name,
                "description": description,
            })
    return grouped
