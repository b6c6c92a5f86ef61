# Overview: Flask API routes for master records; parses input and returns JSON responses.

# backend/bullion/routes/masters.py
from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import BullionError
from ..services import master_service
from ..services.tenant_service import current_identity
from . import internal_error, json_body, json_error


masters_bp = Blueprint("masters", __name__, url_prefix="/api/masters")


@masters_bp.post("")
@require_auth
@require_permission("MANAGE_MASTERS")
def upsert_master_route():
    """
    Insert or replace a master record keyed by id.

    Request body:
    {
        "id": str, "kind": "CUSTOMER" | "Customer Master" | ...,
        "name": str, "identifier": str, "secondary": str?, "date": "YYYY-MM-DD"?,
        "kycStatus": "verified" | "pending" | "failed" (customers only),
        "details": {...kind-specific attributes}
    }
    """
    try:
        record = master_service.upsert_master(current_identity(), json_body())
        return jsonify(record.to_dict()), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to upsert master record")
        return internal_error()


@masters_bp.get("")
@require_auth
@require_permission("VIEW_STATE")
def list_masters_route():
    try:
        records = master_service.list_masters(current_identity(), kind=request.args.get("kind"))
        return jsonify({"items": [r.to_dict() for r in records], "count": len(records)}), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to list master records")
        return internal_error()


@masters_bp.get("/<record_id>")
@require_auth
@require_permission("VIEW_STATE")
def get_master_route(record_id: str):
    try:
        return jsonify(master_service.get_master(current_identity(), record_id).to_dict()), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to get master record")
        return internal_error()
