from __future__ import annotations

from ..extensions import db
from bullion.time_utils import to_utc_z


class AuditLog(db.Model):
    """
    Append-only record of a mutating action.

    APPEND-ONLY: never updated or deleted by normal flow.
    MULTI-TENANT: every entry belongs to the tenant of the acting user.
    """
    __tablename__ = "audit_logs"
    __table_args__ = (
        db.Index("ix_audit_logs_tenant_created", "tenant_id", "created_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    action = db.Column(db.String(64), nullable=False)
    module = db.Column(db.String(64), nullable=False)
    payload = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    user = db.relationship("User")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "username": self.user.username if self.user else None,
            "action": self.action,
            "module": self.module,
            "payload": self.payload,
            "createdAt": to_utc_z(self.created_at),
        }
