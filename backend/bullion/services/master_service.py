# Overview: Master registry; tenant-scoped reference records of each MasterKind.

"""
Master Registry

Uniform contract across all kinds: upsert by id, list by tenant (optionally
by kind). There is no delete: historical lots and orders refer to these
records by name.
"""

from __future__ import annotations

from ..errors import NotFoundError
from ..extensions import db
from ..master_kinds import MasterKind, parse_details, parse_kyc_status
from ..models import MasterRecord
from ..validation import optional_text, parse_date_field, require_payload, require_text
from . import audit_service
from .concurrency import lock_for_update, run_atomically


def parse_master(payload: dict) -> dict:
    payload = require_payload(payload)
    kind = MasterKind.parse(payload.get("kind", payload.get("type")))

    record_id = require_text(payload, "id", max_length=64)
    name = require_text(payload, "name", max_length=255)
    identifier = require_text(payload, "identifier", max_length=64)

    return {
        "record_id": record_id,
        "kind": kind,
        "name": name,
        "identifier": identifier,
        "secondary": optional_text(payload, "secondary", max_length=128),
        "record_date": parse_date_field(payload, "date"),
        "kyc_status": parse_kyc_status(kind, payload.get("kycStatus")),
        "details": parse_details(kind, payload.get("details")).to_dict(),
    }


def stage_upsert(identity, fields: dict) -> tuple[MasterRecord, bool]:
    """Insert or replace inside the caller's transaction. Returns (record, created)."""
    record = lock_for_update(
        db.session.query(MasterRecord).filter_by(
            tenant_id=identity.tenant_id, record_id=fields["record_id"]
        )
    ).first()
    created = record is None
    if created:
        record = MasterRecord(tenant_id=identity.tenant_id, record_id=fields["record_id"])
        db.session.add(record)

    # Replace everything except tenant and id
    record.kind = fields["kind"].value
    record.name = fields["name"]
    record.identifier = fields["identifier"]
    record.secondary = fields["secondary"]
    record.record_date = fields["record_date"]
    record.kyc_status = fields["kyc_status"]
    record.details = fields["details"]
    return record, created


def upsert_master(identity, payload: dict) -> MasterRecord:
    """POST /masters: insert if the id is unseen in the tenant, else replace."""
    fields = parse_master(payload)
    outcome = {}

    def _op():
        record, outcome["created"] = stage_upsert(identity, fields)
        return record

    record = run_atomically(_op)
    audit_service.record(identity, "MASTER_CREATED" if outcome["created"] else "MASTER_UPDATED", "masters", {
        "id": fields["record_id"],
        "kind": fields["kind"].value,
        "name": fields["name"],
    })
    return record


def list_masters(identity, kind: str | None = None) -> list[MasterRecord]:
    query = db.session.query(MasterRecord).filter(MasterRecord.tenant_id == identity.tenant_id)
    if kind:
        query = query.filter(MasterRecord.kind == MasterKind.parse(kind).value)
    return query.order_by(MasterRecord.kind.asc(), MasterRecord.record_id.asc()).all()


def get_master(identity, record_id: str) -> MasterRecord:
    record = (
        db.session.query(MasterRecord)
        .filter_by(tenant_id=identity.tenant_id, record_id=record_id)
        .first()
    )
    if record is None:
        raise NotFoundError("Master", record_id)
    return record

