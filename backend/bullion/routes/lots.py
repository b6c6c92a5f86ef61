# Overview: Flask API routes for lot intake and workflow transitions; parses input and returns JSON responses.

# backend/bullion/routes/lots.py
"""
Lot API routes

- POST /api/transactions            submit or re-submit a Pending lot
- GET  /api/transactions            list (?status=<label>&phase=<tag>)
- GET  /api/transactions/<lotNo>    one lot
- POST /api/workflow/<transition>   approve, invoice, verify, disburse,
                                    transfer, receive, melt

Transitions answer 409 (kind InvalidStateTransition) when the lot is not in
the required state; the body carries both the current and the required
state so the client can re-fetch and reconcile.
"""

from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import BullionError
from ..services import lot_service
from ..services.tenant_service import current_identity
from . import internal_error, json_body, json_error


lots_bp = Blueprint("lots", __name__, url_prefix="/api")


def _run(handler, action: str):
    try:
        lot = handler(current_identity(), json_body())
        return jsonify(lot.to_dict()), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to %s lot", action)
        return internal_error()


@lots_bp.post("/transactions")
@require_auth
@require_permission("SUBMIT_LOTS")
def submit_lot_route():
    """
    Request body:
    {
        "lotNo": str, "branch": str, "refNo": str, "date": "YYYY-MM-DD",
        "customerIdentity": str, "customerName": str, "remarks": str,
        "items": [{"product": str, "piece": int, "weight": grams,
                   "purity": str, "wastePercent": number, "rate": rupees?}]
    }

    netWeight and amount are always derived server-side.
    """
    return _run(lot_service.submit_lot, "submit")


@lots_bp.get("/transactions")
@require_auth
@require_permission("VIEW_STATE")
def list_lots_route():
    try:
        lots = lot_service.list_lots(
            current_identity(),
            status=request.args.get("status"),
            phase=request.args.get("phase"),
        )
        return jsonify({"items": [lot.to_dict() for lot in lots], "count": len(lots)}), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to list lots")
        return internal_error()


@lots_bp.get("/transactions/<lot_no>")
@require_auth
@require_permission("VIEW_STATE")
def get_lot_route(lot_no: str):
    try:
        return jsonify(lot_service.get_lot(current_identity(), lot_no).to_dict()), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to get lot")
        return internal_error()


@lots_bp.post("/workflow/approve")
@require_auth
@require_permission("APPROVE_LOTS")
def approve_route():
    """{lotNo, decision: "Approved" | "Rejected", remarks}"""
    return _run(lot_service.decide, "decide")


@lots_bp.post("/workflow/invoice")
@require_auth
@require_permission("ISSUE_INVOICES")
def invoice_route():
    """{lotNo, remarks, gst: bool = true, items?}"""
    return _run(lot_service.invoice, "invoice")


@lots_bp.post("/workflow/verify")
@require_auth
@require_permission("VERIFY_ACCOUNTS")
def verify_route():
    """{lotNo, remarks?}"""
    return _run(lot_service.accounts_verify, "verify")


@lots_bp.post("/workflow/disburse")
@require_auth
@require_permission("DISBURSE_PAYMENTS")
def disburse_route():
    """{lotNo, paymentMode: "bank" | "cash", referenceNo, amount}"""
    return _run(lot_service.disburse, "disburse")


@lots_bp.post("/workflow/transfer")
@require_auth
@require_permission("MANAGE_LOGISTICS")
def transfer_route():
    """{lotNo, vehicleNo, driverName, sealNumber}"""
    return _run(lot_service.initiate_transfer, "transfer")


@lots_bp.post("/workflow/receive")
@require_auth
@require_permission("MANAGE_LOGISTICS")
def receive_route():
    """{lotNo, remarks}"""
    return _run(lot_service.confirm_receipt, "receive")


@lots_bp.post("/workflow/melt")
@require_auth
@require_permission("RECORD_MELTING")
def melt_route():
    """{lotNo, inputWeight?, outputWeight, operator, temperature}"""
    return _run(lot_service.melt, "melt")
