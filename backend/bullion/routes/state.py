# Overview: Flask API routes for the tenant snapshot and the offline sync gateway.

# backend/bullion/routes/state.py
from flask import Blueprint, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import BullionError
from ..services import sync_service
from ..services.tenant_service import current_identity
from . import internal_error, json_body, json_error


state_bp = Blueprint("state", __name__, url_prefix="/api")


@state_bp.get("/state")
@require_auth
@require_permission("VIEW_STATE")
def get_state_route():
    """
    Full authoritative snapshot of the caller's tenant: masters, lots (with
    items, logistics, melting and payment), sales orders and market rates.
    """
    try:
        return jsonify(sync_service.snapshot(current_identity())), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to build state snapshot")
        return internal_error()


@state_bp.post("/sync")
@require_auth
@require_permission("SYNC_CLIENT")
def sync_route():
    """
    Replay queued client mutations.

    Request body:
    {
        "mutations": [{"clientMutationId": str, "op": str, "payload": {...}}]
    }

    Returns:
        200: {"results": [...], "state": {...snapshot}}
        400: malformed batch (nothing applied)

    Individual mutation failures do not fail the request; each one is
    reported in results with status applied|rejected|duplicate|failed.
    """
    try:
        return jsonify(sync_service.sync(current_identity(), json_body())), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to sync client mutations")
        return internal_error()
