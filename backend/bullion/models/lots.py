from __future__ import annotations

from decimal import Decimal

from ..extensions import db
from bullion.time_utils import to_utc_z, to_iso_date
from bullion.units import mg_to_grams, paise_to_rupees


class Lot(db.Model):
    """
    One batch of physical metal moving through the procurement pipeline.

    LIFECYCLE (internal phases, see services/lot_states.py):
        PENDING -> APPROVED | REJECTED
        APPROVED -> INVOICED -> VERIFIED_BY_ACCOUNTS -> PAID -> IN_TRANSIT
        IN_TRANSIT -> RECEIVED_AT_HUB -> MELTED

    The external "status" label is a projection of `phase`; two phases
    project to "Received" and two to "Approved".

    MULTI-TENANT: lot_no is unique within a tenant.

    CONCURRENCY: version_id is an optimistic lock. Every transition bumps it,
    so two writers that observed the same source phase cannot both commit.
    """
    __tablename__ = "lots"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "lot_no", name="uq_lots_tenant_lot_no"),
        db.Index("ix_lots_tenant_phase", "tenant_id", "phase"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    lot_no = db.Column(db.String(64), nullable=False)

    branch = db.Column(db.String(128), nullable=True)
    ref_no = db.Column(db.String(64), nullable=True)
    lot_date = db.Column(db.Date, nullable=True)
    customer_identity = db.Column(db.String(32), nullable=True)
    customer_name = db.Column(db.String(255), nullable=True)

    phase = db.Column(db.String(32), nullable=False, default="PENDING")
    remarks = db.Column(db.Text, nullable=True)

    # User attribution for accountability
    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    decided_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    invoiced_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    verified_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # Timestamps for each decision
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())
    decided_at = db.Column(db.DateTime(timezone=True), nullable=True)
    invoiced_at = db.Column(db.DateTime(timezone=True), nullable=True)
    verified_at = db.Column(db.DateTime(timezone=True), nullable=True)

    # Invoice figures, fixed when the lot is invoiced
    gst_enabled = db.Column(db.Boolean, nullable=True)
    subtotal_paise = db.Column(db.BigInteger, nullable=True)
    gst_paise = db.Column(db.BigInteger, nullable=True)
    grand_total_paise = db.Column(db.BigInteger, nullable=True)

    # Market rates in force when the lot was invoiced (per gram)
    applied_gold_rate_paise = db.Column(db.BigInteger, nullable=True)
    applied_silver_rate_paise = db.Column(db.BigInteger, nullable=True)

    version_id = db.Column(db.Integer, nullable=False, default=1)

    items = db.relationship(
        "MaterialRow",
        back_populates="lot",
        cascade="all, delete-orphan",
        order_by="MaterialRow.s_no",
        lazy="selectin",
    )
    logistics = db.relationship("LogisticsDetail", uselist=False, cascade="all, delete-orphan", lazy="selectin")
    melting = db.relationship("MeltingDetail", uselist=False, cascade="all, delete-orphan", lazy="selectin")
    disbursement = db.relationship("DisbursementRecord", uselist=False, cascade="all, delete-orphan", lazy="selectin")

    __mapper_args__ = {"version_id_col": version_id}

    def __repr__(self) -> str:
        return f"<Lot lot_no={self.lot_no!r} phase={self.phase} tenant_id={self.tenant_id}>"

    @property
    def total_weight_mg(self) -> int:
        return sum(item.weight_mg for item in self.items)

    @property
    def total_net_weight_mg(self) -> int:
        return sum(item.net_weight_mg for item in self.items)

    @property
    def total_amount_paise(self) -> int:
        return sum(item.amount_paise or 0 for item in self.items)

    def to_dict(self) -> dict:
        from bullion.services.lot_states import LotPhase

        phase = LotPhase(self.phase)
        return {
            "lotNo": self.lot_no,
            "branch": self.branch,
            "refNo": self.ref_no,
            "date": to_iso_date(self.lot_date),
            "customerIdentity": self.customer_identity,
            "customerName": self.customer_name,
            "status": phase.label,
            "phase": phase.value,
            "remarks": self.remarks,
            "items": [item.to_dict() for item in self.items],
            "totals": {
                "weight": mg_to_grams(self.total_weight_mg),
                "netWeight": mg_to_grams(self.total_net_weight_mg),
                "amount": paise_to_rupees(self.total_amount_paise),
            },
            "invoice": None if self.subtotal_paise is None else {
                "gstEnabled": self.gst_enabled,
                "subtotal": paise_to_rupees(self.subtotal_paise),
                "gstAmount": paise_to_rupees(self.gst_paise),
                "grandTotal": paise_to_rupees(self.grand_total_paise),
                "appliedGoldRate": paise_to_rupees(self.applied_gold_rate_paise),
                "appliedSilverRate": paise_to_rupees(self.applied_silver_rate_paise),
                "invoicedBy": self.invoiced_by_user_id,
                "invoicedAt": to_utc_z(self.invoiced_at),
            },
            "logistics": self.logistics.to_dict() if self.logistics else None,
            "melting": self.melting.to_dict() if self.melting else None,
            "payment": self.disbursement.to_dict() if self.disbursement else None,
            "createdBy": self.created_by_user_id,
            "auditBy": self.decided_by_user_id,
            "auditDate": to_utc_z(self.decided_at),
            "verifiedBy": self.verified_by_user_id,
            "verifiedAt": to_utc_z(self.verified_at),
            "createdAt": to_utc_z(self.created_at),
            "updatedAt": to_utc_z(self.updated_at),
            "version": self.version_id,
        }


class MaterialRow(db.Model):
    """
    One line item of a lot.

    INVARIANTS (enforced by lot_service, never by callers):
    - net_weight_mg = weight_mg x (1 - waste/100), rounded to 1 mg
    - amount_paise = rate_paise x net weight in grams, rounded to 1 paisa, once a rate exists

    Rows are replaced wholesale whenever the lot's item list is saved.
    """
    __tablename__ = "material_rows"
    __table_args__ = (
        db.UniqueConstraint("lot_id", "s_no", name="uq_material_rows_lot_sno"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    lot_id = db.Column(db.Integer, db.ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, index=True)

    s_no = db.Column(db.Integer, nullable=False)
    product = db.Column(db.String(255), nullable=False)
    piece = db.Column(db.Integer, nullable=False, default=1)
    weight_mg = db.Column(db.BigInteger, nullable=False)
    purity = db.Column(db.String(16), nullable=True)
    waste_bps = db.Column(db.Integer, nullable=False, default=0)  # Basis points (e.g., 150 = 1.5%)
    net_weight_mg = db.Column(db.BigInteger, nullable=False)
    rate_paise = db.Column(db.BigInteger, nullable=True)
    amount_paise = db.Column(db.BigInteger, nullable=True)

    lot = db.relationship("Lot", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "sNo": self.s_no,
            "product": self.product,
            "piece": self.piece,
            "weight": mg_to_grams(self.weight_mg),
            "purity": self.purity,
            "wastePercent": float(Decimal(self.waste_bps) / 100),
            "netWeight": mg_to_grams(self.net_weight_mg),
            "rate": paise_to_rupees(self.rate_paise),
            "amount": paise_to_rupees(self.amount_paise),
        }


class LogisticsDetail(db.Model):
    """Branch-to-hub dispatch and receipt of a lot."""
    __tablename__ = "logistics_details"

    id = db.Column(db.Integer, primary_key=True)
    lot_id = db.Column(db.Integer, db.ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, unique=True)

    vehicle_no = db.Column(db.String(32), nullable=False)
    driver_name = db.Column(db.String(128), nullable=True)
    seal_number = db.Column(db.String(64), nullable=False)

    dispatched_at = db.Column(db.DateTime(timezone=True), nullable=False)
    dispatched_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    received_at = db.Column(db.DateTime(timezone=True), nullable=True)
    received_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "vehicleNo": self.vehicle_no,
            "driverName": self.driver_name,
            "sealNumber": self.seal_number,
            "dispatchedAt": to_utc_z(self.dispatched_at),
            "dispatchedBy": self.dispatched_by_user_id,
            "receivedAt": to_utc_z(self.received_at),
            "receivedBy": self.received_by_user_id,
        }


class MeltingDetail(db.Model):
    """Refining record: input vs output weight and the resulting loss."""
    __tablename__ = "melting_details"

    id = db.Column(db.Integer, primary_key=True)
    lot_id = db.Column(db.Integer, db.ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, unique=True)

    input_weight_mg = db.Column(db.BigInteger, nullable=False)
    output_weight_mg = db.Column(db.BigInteger, nullable=False)
    loss_weight_mg = db.Column(db.BigInteger, nullable=False)
    loss_bps = db.Column(db.Integer, nullable=False, default=0)
    loss_flagged = db.Column(db.Boolean, nullable=False, default=False)

    operator = db.Column(db.String(128), nullable=True)
    temperature = db.Column(db.Integer, nullable=True)  # degrees Celsius

    melted_at = db.Column(db.DateTime(timezone=True), nullable=False)
    melted_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "inputWeight": mg_to_grams(self.input_weight_mg),
            "outputWeight": mg_to_grams(self.output_weight_mg),
            "lossWeight": mg_to_grams(self.loss_weight_mg),
            "lossPercent": float(Decimal(self.loss_bps) / 100),
            "lossFlagged": self.loss_flagged,
            "operator": self.operator,
            "temperature": self.temperature,
            "meltDate": to_utc_z(self.melted_at),
            "meltedBy": self.melted_by_user_id,
        }


class DisbursementRecord(db.Model):
    """Payment made to the customer for a verified lot."""
    __tablename__ = "disbursement_records"

    id = db.Column(db.Integer, primary_key=True)
    lot_id = db.Column(db.Integer, db.ForeignKey("lots.id", ondelete="CASCADE"), nullable=False, unique=True)

    payment_mode = db.Column(db.String(16), nullable=False)  # bank, cash
    reference_no = db.Column(db.String(64), nullable=True)
    amount_paise = db.Column(db.BigInteger, nullable=False)

    paid_at = db.Column(db.DateTime(timezone=True), nullable=False)
    verified_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    def to_dict(self) -> dict:
        return {
            "paymentMode": self.payment_mode,
            "referenceNo": self.reference_no,
            "amount": paise_to_rupees(self.amount_paise),
            "paidAt": to_utc_z(self.paid_at),
            "verifiedBy": self.verified_by_user_id,
        }
