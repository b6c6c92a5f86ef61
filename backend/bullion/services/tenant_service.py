# Overview: Caller identity and tenant scoping helpers.

"""
Multi-Tenant Service: Identity Context

WHY: Every service operation runs on behalf of exactly one (tenant, user,
role). Routes resolve it from the session via @require_auth and pass it
down explicitly, so no service ever reads a tenant id from client input.

SECURITY INVARIANTS:
1. Every authenticated request has g.tenant_id set
2. Every query touching tenant-owned rows filters by identity.tenant_id
3. Rows owned by another tenant are reported as NotFound, never Forbidden
"""

from __future__ import annotations

from dataclasses import dataclass

from flask import g

from ..extensions import db
from ..models import Tenant
from .permission_service import role_has_permission


class TenantAccessError(Exception):
    """Raised when tenant context is missing."""
    pass


@dataclass(frozen=True)
class Identity:
    tenant_id: int
    user_id: int | None
    role: str

    def can(self, permission_code: str) -> bool:
        return role_has_permission(self.role, permission_code)


def current_identity() -> Identity:
    """
    Identity established by @require_auth for this request.

    SECURITY: Raises TenantAccessError if tenant context is not set.
    """
    if getattr(g, "tenant_id", None) is None or getattr(g, "current_user", None) is None:
        raise TenantAccessError("Tenant context not established")
    return Identity(tenant_id=g.tenant_id, user_id=g.current_user.id, role=g.role)


def system_identity(tenant_id: int, role: str = "ADMIN") -> Identity:
    """Identity for operator tooling (CLI seeding); no acting user."""
    return Identity(tenant_id=tenant_id, user_id=None, role=role)


def create_tenant(name: str, code: str | None = None) -> Tenant:
    name = (name or "").strip()
    if not name:
        raise ValueError("Tenant name is required")
    code = (code or "").strip().upper() or None
    if code and db.session.query(Tenant).filter_by(code=code).first():
        raise ValueError(f"Tenant code {code} already exists")

    tenant = Tenant(name=name, code=code, is_active=True)
    db.session.add(tenant)
    db.session.commit()
    return tenant


def get_tenant_by_code(code: str) -> Tenant | None:
    return db.session.query(Tenant).filter_by(code=(code or "").strip().upper()).first()
