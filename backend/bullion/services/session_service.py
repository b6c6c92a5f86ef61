# Overview: Bearer tokens that resolve every request to (tenant, user, role).

"""
Session Tokens

A token is issued at login and names exactly one identity: the user, the
tenant the user belongs to and the role the user held at login. Requests
never carry a tenant id of their own; everything downstream reads it from
the session.

- 32 random bytes, returned once in hex; only its SHA-256 digest is stored
- valid for SESSION_ABSOLUTE_TIMEOUT_HOURS (one working shift), no sliding
- revoked on logout, or as soon as the user or tenant is found deactivated
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta

from flask import current_app

from ..extensions import db
from ..models import SessionToken, Tenant, User
from bullion.time_utils import utcnow


@dataclass
class SessionContext:
    user: User
    session: SessionToken
    tenant_id: int
    role: str


def generate_token() -> str:
    return secrets.token_hex(32)


def hash_token(token: str) -> str:
    """Tokens are high-entropy already; a fast digest is enough for lookup."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _lifetime() -> timedelta:
    return timedelta(hours=current_app.config.get("SESSION_ABSOLUTE_TIMEOUT_HOURS", 8))


def _live_session(token: str) -> SessionToken | None:
    return (
        db.session.query(SessionToken)
        .filter_by(token_hash=hash_token(token), is_revoked=False)
        .first()
    )


def create_session(user_id: int) -> tuple[SessionToken, str]:
    """
    Issue a token for `user_id`. Returns (row, plaintext token).

    Raises ValueError when the user is unknown or its tenant is inactive.
    """
    user = db.session.get(User, user_id)
    if user is None:
        raise ValueError("User not found")
    tenant = db.session.get(Tenant, user.tenant_id)
    if tenant is None or not tenant.is_active:
        raise ValueError("Tenant is not active")

    token = generate_token()
    issued = utcnow()
    row = SessionToken(
        user_id=user.id,
        tenant_id=user.tenant_id,
        role=user.role,
        token_hash=hash_token(token),
        created_at=issued,
        last_used_at=issued,
        expires_at=issued + _lifetime(),
        is_revoked=False,
    )
    db.session.add(row)
    db.session.commit()
    current_app.logger.info("Session issued for user %s (tenant %s)", user.id, user.tenant_id)
    return row, token


def _revoke(row: SessionToken, reason: str) -> None:
    row.is_revoked = True
    row.revoked_at = utcnow()
    row.revoked_reason = reason
    db.session.commit()


def validate_session(token: str) -> SessionContext | None:
    """
    Resolve a bearer token, or None when it is unknown, expired or revoked.

    A token whose user or tenant has since been deactivated is revoked on
    the spot.
    """
    row = _live_session(token)
    if row is None:
        return None

    now = utcnow()
    if row.expires_at < now:
        return None

    if row.user is None or not row.user.is_active:
        _revoke(row, "User account deactivated")
        return None
    if row.tenant is None or not row.tenant.is_active:
        _revoke(row, "Tenant deactivated")
        return None

    row.last_used_at = now
    db.session.commit()
    return SessionContext(user=row.user, session=row, tenant_id=row.tenant_id, role=row.role)


def revoke_session(token: str, reason: str = "User logout") -> bool:
    """True if a live session was revoked."""
    row = _live_session(token)
    if row is None:
        return False
    _revoke(row, reason)
    return True
