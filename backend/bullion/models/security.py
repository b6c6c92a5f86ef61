from __future__ import annotations

from ..extensions import db


class SecurityEvent(db.Model):
    """
    Refused or suspicious attempts: denied capabilities, failed logins.

    Kept apart from AuditLog, which only ever describes mutations that
    happened. Nothing here changed business state.

    APPEND-ONLY.
    """
    __tablename__ = "security_events"
    __table_args__ = (
        db.Index("ix_security_events_tenant_occurred", "tenant_id", "occurred_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)

    # Unknown before authentication (failed login)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=True, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True, index=True)

    event_type = db.Column(db.String(64), nullable=False, index=True)  # PERMISSION_DENIED, LOGIN_FAILED
    resource = db.Column(db.String(128), nullable=True)  # route path, "lot:LOT-001", "sync:workflow.approve"
    action = db.Column(db.String(64), nullable=True)     # capability code or LOGIN

    success = db.Column(db.Boolean, nullable=False, index=True)
    reason = db.Column(db.Text, nullable=True)

    ip_address = db.Column(db.String(45), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    occurred_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), index=True)

    def __repr__(self) -> str:
        return f"<SecurityEvent {self.event_type} user={self.user_id} tenant={self.tenant_id}>"
