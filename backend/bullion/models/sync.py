from __future__ import annotations

from ..extensions import db
from bullion.time_utils import to_utc_z


class SyncReceipt(db.Model):
    """
    Outcome of one client-queued mutation replayed through the sync gateway.

    WHY: Clients retry their offline queue after reconnecting. The receipt is
    written in the same transaction as the mutation it records, so a replayed
    client_mutation_id is answered from here instead of being applied twice.
    """
    __tablename__ = "sync_receipts"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "client_mutation_id", name="uq_sync_receipts_tenant_mutation"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    client_mutation_id = db.Column(db.String(128), nullable=False)

    op = db.Column(db.String(64), nullable=False)
    status = db.Column(db.String(16), nullable=False)  # applied, rejected
    error_kind = db.Column(db.String(64), nullable=True)
    error_message = db.Column(db.Text, nullable=True)
    result = db.Column(db.JSON, nullable=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "clientMutationId": self.client_mutation_id,
            "op": self.op,
            "status": self.status,
            "errorKind": self.error_kind,
            "error": self.error_message,
            "result": self.result,
            "recordedAt": to_utc_z(self.created_at),
        }
