from __future__ import annotations

from ..extensions import db
from bullion.time_utils import to_utc_z, to_iso_date
from bullion.units import mg_to_grams, paise_to_rupees


ORDER_STATUSES = ("Draft", "Confirmed", "Processing", "Completed")


class SalesOrder(db.Model):
    """
    Institutional sale contract for refined metal.

    MULTI-TENANT: order_no is unique within a tenant ("SO-0001", ...).

    INVARIANT: total_amount_paise == sum(item.line_total_paise). The total is
    always recomputed by sales_service; client-supplied totals are ignored.
    """
    __tablename__ = "sales_orders"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "order_no", name="uq_sales_orders_tenant_order_no"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    order_no = db.Column(db.String(32), nullable=False)

    buyer = db.Column(db.String(255), nullable=False)
    order_date = db.Column(db.Date, nullable=True)
    status = db.Column(db.String(16), nullable=False, default="Confirmed")
    total_amount_paise = db.Column(db.BigInteger, nullable=False, default=0)

    created_by_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    items = db.relationship(
        "SalesOrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="SalesOrderItem.line_no",
        lazy="selectin",
    )

    def to_dict(self) -> dict:
        return {
            "id": self.order_no,
            "buyer": self.buyer,
            "date": to_iso_date(self.order_date),
            "status": self.status,
            "items": [item.to_dict() for item in self.items],
            "totalAmount": paise_to_rupees(self.total_amount_paise),
            "createdBy": self.created_by_user_id,
            "updatedAt": to_utc_z(self.updated_at),
        }


class SalesOrderItem(db.Model):
    """One product line of a sales order. Replaced wholesale on update."""
    __tablename__ = "sales_order_items"
    __table_args__ = (
        db.UniqueConstraint("order_id", "line_no", name="uq_sales_order_items_line"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("sales_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    line_no = db.Column(db.Integer, nullable=False)

    product = db.Column(db.String(255), nullable=False)
    quantity_mg = db.Column(db.BigInteger, nullable=False)   # grams of metal
    unit_price_paise = db.Column(db.BigInteger, nullable=False)  # per gram
    line_total_paise = db.Column(db.BigInteger, nullable=False)

    order = db.relationship("SalesOrder", back_populates="items")

    def to_dict(self) -> dict:
        return {
            "product": self.product,
            "quantity": mg_to_grams(self.quantity_mg),
            "unitPrice": paise_to_rupees(self.unit_price_paise),
            "total": paise_to_rupees(self.line_total_paise),
        }
