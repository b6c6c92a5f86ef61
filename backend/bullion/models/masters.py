from __future__ import annotations

from ..extensions import db
from bullion.time_utils import to_utc_z, to_iso_date


class MasterRecord(db.Model):
    """
    Reference entity of one MasterKind (franchise, hub, buyer, customer, ...).

    MULTI-TENANT: record_id is unique within a tenant only.

    LIFECYCLE: created and replaced via upsert keyed by (tenant_id, record_id).
    Never hard-deleted in normal flow (historical lots reference these names).

    `details` holds the kind-specific attribute set; master_kinds validates it
    on every write so the column never contains keys foreign to the kind.
    """
    __tablename__ = "master_records"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "record_id", name="uq_master_records_tenant_record"),
        db.Index("ix_master_records_tenant_kind", "tenant_id", "kind"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    record_id = db.Column(db.String(64), nullable=False)

    kind = db.Column(db.String(32), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    identifier = db.Column(db.String(64), nullable=False)  # GSTIN, Aadhaar, branch code, ...
    secondary = db.Column(db.String(128), nullable=True)   # mobile, branch, ...
    record_date = db.Column(db.Date, nullable=True)

    # verified, pending, failed (customers only)
    kyc_status = db.Column(db.String(16), nullable=True)

    details = db.Column(db.JSON, nullable=False, default=dict)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def to_dict(self) -> dict:
        from bullion.master_kinds import MasterKind

        return {
            "id": self.record_id,
            "kind": self.kind,
            "type": MasterKind(self.kind).label,
            "name": self.name,
            "identifier": self.identifier,
            "secondary": self.secondary,
            "date": to_iso_date(self.record_date),
            "kycStatus": self.kyc_status,
            "details": dict(self.details or {}),
            "updatedAt": to_utc_z(self.updated_at),
        }


class KycRecord(db.Model):
    """
    One identity verification attempt.

    IMMUTABLE: written once per attempt, never updated. Re-verification of
    the same identity appends a new row. Only the masked identity number is
    stored, plus a digest of the full number for lookups.
    """
    __tablename__ = "kyc_records"
    __table_args__ = (
        db.Index("ix_kyc_records_tenant_verified", "tenant_id", "verified_at"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)

    identity_masked = db.Column(db.String(32), nullable=False, index=True)
    # SHA-256 of the normalized digits; the lookup key for "latest outcome for this identity"
    identity_digest = db.Column(db.String(64), nullable=False, index=True)
    full_name = db.Column(db.String(255), nullable=True)

    # Verified, AddressMismatch, Rejected
    status = db.Column(db.String(32), nullable=False)
    remarks = db.Column(db.Text, nullable=True)

    customer_record_id = db.Column(db.String(64), nullable=True)
    verified_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    verified_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "identityMasked": self.identity_masked,
            "fullName": self.full_name,
            "status": self.status,
            "remarks": self.remarks,
            "customerId": self.customer_record_id,
            "verifiedBy": self.verified_by_user_id,
            "verifiedAt": to_utc_z(self.verified_at),
        }
