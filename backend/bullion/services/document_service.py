# Overview: Gap-free per-tenant document numbers (SO-0001, SO-0002, ...).

from __future__ import annotations

from sqlalchemy import update

from ..extensions import db
from ..models import DocumentSequence


def next_document_number(*, tenant_id: int, document_type: str, prefix: str, pad: int = 4) -> str:
    """
    Allocate "<prefix>-<n>" for the tenant's `document_type` series.

    Flushes but never commits: the number belongs to the caller's unit of
    work and is released if that unit rolls back. The increment is a single
    UPDATE so two writers serialize on the sequence row.
    """
    if not tenant_id or not document_type:
        raise ValueError("tenant_id and document_type are required")

    bumped = db.session.execute(
        update(DocumentSequence)
        .where(
            DocumentSequence.tenant_id == tenant_id,
            DocumentSequence.document_type == document_type,
        )
        .values(next_number=DocumentSequence.next_number + 1)
    )

    if bumped.rowcount:
        following = (
            db.session.query(DocumentSequence.next_number)
            .filter_by(tenant_id=tenant_id, document_type=document_type)
            .scalar()
        )
        number = following - 1
    else:
        # First document of this type; a racing first insert trips the unique constraint
        db.session.add(DocumentSequence(tenant_id=tenant_id, document_type=document_type, next_number=2))
        db.session.flush()
        number = 1

    return f"{prefix}-{number:0{pad}d}"
