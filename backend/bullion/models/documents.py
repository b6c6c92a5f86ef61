from __future__ import annotations

from ..extensions import db


class DocumentSequence(db.Model):
    """
    Next free number per (tenant, document type), e.g. SALES_ORDER -> 7.

    Numbers are allocated inside the caller's transaction, so an order that
    fails to save gives its number back and the series stays gap-free.
    """
    __tablename__ = "document_sequences"
    __table_args__ = (
        db.UniqueConstraint("tenant_id", "document_type", name="uq_doc_sequences_tenant_type"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    tenant_id = db.Column(db.Integer, db.ForeignKey("tenants.id"), nullable=False, index=True)
    document_type = db.Column(db.String(32), nullable=False, index=True)
    next_number = db.Column(db.Integer, nullable=False, default=1)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now(), onupdate=db.func.now())

    def __repr__(self) -> str:
        return f"<DocumentSequence {self.document_type} tenant={self.tenant_id} next={self.next_number}>"
