# Overview: Sync gateway; authoritative snapshots and idempotent replay of client mutations.

"""
Sync Gateway

TWO-TIER CONSISTENCY:
- The client holds a possibly-stale replica and queues its mutations while
  offline.
- POST /sync replays the queue in order. Each mutation runs in its own
  atomic unit together with a SyncReceipt keyed by clientMutationId, so a
  mutation replayed after a lost response is answered from the receipt
  ("duplicate") and never applied twice.
- The response always carries a fresh full snapshot. The client replaces
  its replica with it wholesale; there is no merge. Local edits that were
  rejected are therefore discarded, and the per-mutation results tell the
  client which ones.
"""

from __future__ import annotations

from flask import current_app

from ..errors import BullionError, PersistenceFailure, ValidationError
from ..extensions import db
from ..models import Lot, MasterRecord, SalesOrder, SyncReceipt
from ..units import paise_to_rupees
from ..validation import require_list, require_payload
from . import lot_service, master_service, permission_service, sales_service, settings_service
from .concurrency import run_atomically, staged_with_commit
from .lot_states import project_status
from bullion.time_utils import to_utc_z, utcnow


MAX_MUTATIONS_PER_SYNC = 200

STATUS_APPLIED = "applied"
STATUS_REJECTED = "rejected"
STATUS_DUPLICATE = "duplicate"
STATUS_FAILED = "failed"


def _lot_summary(lot: Lot) -> dict:
    return {"lotNo": lot.lot_no, "status": project_status(lot.phase), "phase": lot.phase}


def _master_summary(record: MasterRecord) -> dict:
    return {"id": record.record_id, "kind": record.kind}


def _order_summary(order: SalesOrder) -> dict:
    return {"id": order.order_no, "totalAmount": paise_to_rupees(order.total_amount_paise)}


def _rates_summary(rates: dict) -> dict:
    return {metal: paise_to_rupees(paise) for metal, paise in rates.items()}


# op -> (permission, handler, summarizer)
OPERATIONS = {
    "masters.upsert": ("MANAGE_MASTERS", master_service.upsert_master, _master_summary),
    "transactions.submit": ("SUBMIT_LOTS", lot_service.submit_lot, _lot_summary),
    "workflow.approve": ("APPROVE_LOTS", lot_service.decide, _lot_summary),
    "workflow.invoice": ("ISSUE_INVOICES", lot_service.invoice, _lot_summary),
    "workflow.verify": ("VERIFY_ACCOUNTS", lot_service.accounts_verify, _lot_summary),
    "workflow.disburse": ("DISBURSE_PAYMENTS", lot_service.disburse, _lot_summary),
    "workflow.transfer": ("MANAGE_LOGISTICS", lot_service.initiate_transfer, _lot_summary),
    "workflow.receive": ("MANAGE_LOGISTICS", lot_service.confirm_receipt, _lot_summary),
    "workflow.melt": ("RECORD_MELTING", lot_service.melt, _lot_summary),
    "sales.upsert": ("MANAGE_SALES", sales_service.upsert_order, _order_summary),
    "settings.marketRates": ("MANAGE_SETTINGS", settings_service.set_market_rates, _rates_summary),
}


def snapshot(identity) -> dict:
    """Full authoritative state of the caller's tenant."""
    tenant_id = identity.tenant_id
    rates = settings_service.get_market_rates_paise(tenant_id)
    return {
        "masters": [m.to_dict() for m in master_service.list_masters(identity)],
        "transactions": [lot.to_dict() for lot in lot_service.list_lots(identity)],
        "salesOrders": [o.to_dict() for o in sales_service.list_orders(identity)],
        "goldRate": paise_to_rupees(rates["gold"]),
        "silverRate": paise_to_rupees(rates["silver"]),
        "generatedAt": to_utc_z(utcnow()),
    }


def _find_receipt(tenant_id: int, client_mutation_id: str) -> SyncReceipt | None:
    return (
        db.session.query(SyncReceipt)
        .filter_by(tenant_id=tenant_id, client_mutation_id=client_mutation_id)
        .first()
    )


def _outcome(client_mutation_id: str, op: str, status: str, **extra) -> dict:
    return {"clientMutationId": client_mutation_id, "op": op, "status": status, **extra}


def _record_rejection(identity, client_mutation_id: str, op: str, exc: BullionError) -> None:
    def _op():
        db.session.add(SyncReceipt(
            tenant_id=identity.tenant_id,
            client_mutation_id=client_mutation_id,
            op=op,
            status=STATUS_REJECTED,
            error_kind=exc.kind,
            error_message=exc.message,
            user_id=identity.user_id,
        ))
    run_atomically(_op)


def _parse_mutation(index: int, mutation) -> tuple[str, str, dict | None]:
    field = f"mutations[{index}]"
    if not isinstance(mutation, dict):
        raise ValidationError(f"{field} must be an object", field=field)
    client_mutation_id = str(mutation.get("clientMutationId") or "").strip()
    if not client_mutation_id or len(client_mutation_id) > 128:
        raise ValidationError(
            f"{field}.clientMutationId is required (max 128 chars)",
            field=f"{field}.clientMutationId",
        )
    return client_mutation_id, str(mutation.get("op") or "").strip(), mutation.get("payload")


def apply_mutation(identity, client_mutation_id: str, op: str, payload) -> dict:
    """Apply one queued mutation; never raises, every failure becomes an outcome."""
    existing = _find_receipt(identity.tenant_id, client_mutation_id)
    if existing is not None:
        return _outcome(client_mutation_id, existing.op, STATUS_DUPLICATE, original=existing.to_dict())

    try:
        if op not in OPERATIONS:
            raise ValidationError(f"Unsupported op: {op or '<missing>'}", field="op")
        permission, handler, summarize = OPERATIONS[op]
        permission_service.require_permission(identity, permission, resource=f"sync:{op}")

        def _receipt(result):
            return SyncReceipt(
                tenant_id=identity.tenant_id,
                client_mutation_id=client_mutation_id,
                op=op,
                status=STATUS_APPLIED,
                result=summarize(result),
                user_id=identity.user_id,
            )

        with staged_with_commit(_receipt):
            result = handler(identity, payload)
        return _outcome(client_mutation_id, op, STATUS_APPLIED, result=summarize(result))

    except PersistenceFailure as exc:
        # Transient: no receipt, the client may retry the same id
        return _outcome(client_mutation_id, op, STATUS_FAILED, errorKind=exc.kind, error=exc.message)
    except BullionError as exc:
        try:
            _record_rejection(identity, client_mutation_id, op, exc)
        except PersistenceFailure:
            current_app.logger.exception("Failed to record sync rejection %s", client_mutation_id)
        return _outcome(client_mutation_id, op, STATUS_REJECTED, errorKind=exc.kind, error=exc.message)
    except Exception:
        # Earlier mutations of the batch are already committed; report this one
        # as failed (no receipt, retryable) and keep going
        db.session.rollback()
        current_app.logger.exception("Failed to apply sync mutation %s (%s)", client_mutation_id, op)
        return _outcome(
            client_mutation_id, op, STATUS_FAILED,
            errorKind="InternalError", error="Internal server error",
        )


def sync(identity, payload: dict) -> dict:
    """
    POST /sync {mutations: [{clientMutationId, op, payload}]}

    Returns per-mutation results and a fresh snapshot.
    """
    payload = require_payload(payload)
    mutations = require_list(payload, "mutations")
    if len(mutations) > MAX_MUTATIONS_PER_SYNC:
        raise ValidationError(
            f"At most {MAX_MUTATIONS_PER_SYNC} mutations per sync",
            field="mutations",
        )

    # Reject a malformed batch before anything is applied
    parsed = [_parse_mutation(index, mutation) for index, mutation in enumerate(mutations)]
    results = [apply_mutation(identity, *entry) for entry in parsed]
    applied = sum(1 for r in results if r["status"] == STATUS_APPLIED)
    if mutations:
        current_app.logger.info(
            "Sync for tenant %s: %s/%s applied", identity.tenant_id, applied, len(mutations)
        )
    return {"results": results, "state": snapshot(identity)}
