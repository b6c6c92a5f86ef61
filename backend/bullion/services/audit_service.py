# Overview: Append-only audit trail of successful mutations.

"""
Audit Trail

Every mutating operation records exactly one entry after its business
transaction has committed.

AVAILABILITY OVER COMPLETENESS: an audit entry that cannot be written is
logged (AuditWriteFailure) and dropped. It never fails or rolls back the
business operation it describes, which has already committed.
"""

from __future__ import annotations

from typing import Any

from flask import current_app

from ..errors import AuditWriteFailure
from ..extensions import db
from ..models import AuditLog
from bullion.time_utils import utcnow


def _write_entry(identity, action: str, module: str, payload: Any) -> AuditLog:
    entry = AuditLog(
        tenant_id=identity.tenant_id,
        user_id=identity.user_id,
        action=action,
        module=module,
        payload=payload,
        created_at=utcnow(),
    )
    db.session.add(entry)
    db.session.commit()
    return entry


def record(identity, action: str, module: str, payload: Any = None) -> AuditLog | None:
    """Fire-and-forget append. Returns None when the write was dropped."""
    try:
        return _write_entry(identity, action, module, payload)
    except Exception as exc:
        db.session.rollback()
        failure = AuditWriteFailure(
            f"Audit entry {module}/{action} dropped for tenant {identity.tenant_id}: {exc}"
        )
        current_app.logger.exception(failure.message)
        return None


def list_logs(identity, *, limit: int | None = None) -> list[AuditLog]:
    """Tenant's audit entries, most recent first, bounded page size."""
    default_size = current_app.config.get("AUDIT_LOG_PAGE_SIZE", 100)
    max_size = current_app.config.get("AUDIT_LOG_MAX_PAGE_SIZE", 500)
    size = default_size if limit is None else max(1, min(limit, max_size))

    return (
        db.session.query(AuditLog)
        .filter(AuditLog.tenant_id == identity.tenant_id)
        .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .limit(size)
        .all()
    )
