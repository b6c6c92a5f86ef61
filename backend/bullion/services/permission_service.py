# Overview: Service-layer operations for permission; encapsulates business logic and database work.

"""
Capability Checks and Security Event Logging with Multi-Tenant Support

WHY: Enforce role-based access control and keep a record of denied attempts.

DESIGN PRINCIPLES:
- Fail closed: deny by default, require an explicit role grant
- Log denials only: grants are not logged
- Tenant isolation: security events carry the caller's tenant_id
"""

from __future__ import annotations

from flask import has_request_context, request

from ..errors import PermissionDeniedError
from ..extensions import db
from ..models import SecurityEvent
from ..permissions import DEFAULT_ROLE_PERMISSIONS
from bullion.time_utils import utcnow


def log_security_event(
    user_id: int | None,
    event_type: str,
    success: bool,
    resource: str | None = None,
    action: str | None = None,
    reason: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    tenant_id: int | None = None,
) -> SecurityEvent:
    """
    Append a security event with tenant context.

    event_type examples:
    - PERMISSION_DENIED
    - LOGIN_FAILED
    - LOGOUT
    - USER_CREATED
    - CROSS_TENANT_ACCESS_DENIED
    """
    event = SecurityEvent(
        user_id=user_id,
        tenant_id=tenant_id,
        event_type=event_type,
        resource=resource,
        action=action,
        success=success,
        reason=reason,
        ip_address=ip_address,
        user_agent=user_agent,
        occurred_at=utcnow()
    )

    db.session.add(event)
    db.session.commit()

    return event


def get_role_permissions(role: str) -> set[str]:
    """Permission codes granted to a role. Unknown roles get nothing."""
    return set(DEFAULT_ROLE_PERMISSIONS.get(role, ()))


def role_has_permission(role: str, permission_code: str) -> bool:
    return permission_code in get_role_permissions(role)


def require_permission(identity, permission_code: str, resource: str | None = None) -> None:
    """
    Require the caller's role to grant `permission_code`.

    Logs the denial to security_events and raises PermissionDeniedError.

    Usage:
        require_permission(identity, "APPROVE_LOTS", resource="lot:LOT-001")
    """
    if role_has_permission(identity.role, permission_code):
        return

    ip_address = request.remote_addr if has_request_context() else None
    user_agent = request.headers.get("User-Agent") if has_request_context() else None
    if resource is None and has_request_context():
        resource = request.path

    log_security_event(
        user_id=identity.user_id,
        event_type="PERMISSION_DENIED",
        success=False,
        resource=resource,
        action=permission_code,
        reason=f"Missing permission: {permission_code}",
        ip_address=ip_address,
        user_agent=user_agent,
        tenant_id=identity.tenant_id,
    )
    raise PermissionDeniedError(f"Permission denied: {permission_code}", required_permission=permission_code)
