# Overview: Flask API routes for KYC verification; parses input and returns JSON responses.

# backend/bullion/routes/kyc.py
from flask import Blueprint, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import BullionError
from ..services import kyc_service
from ..services.tenant_service import current_identity
from . import internal_error, json_body, json_error


kyc_bp = Blueprint("kyc", __name__, url_prefix="/api/kyc")


@kyc_bp.post("/verify")
@require_auth
@require_permission("VERIFY_KYC")
def verify_route():
    """
    Verify an identity document.

    Request body:
    {
        "identityNumber": "2341 2341 2346",
        "name": str,
        "address": str,
        "customerId": str (optional)
    }

    Always 200 for well-formed requests: the outcome (Verified,
    AddressMismatch or Rejected) is in the body along with the record.
    """
    try:
        record, result = kyc_service.verify(current_identity(), json_body())
        return jsonify({
            "status": record.status,
            "checks": result.to_dict(),
            "record": record.to_dict(),
        }), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to verify identity")
        return internal_error()


@kyc_bp.get("/records")
@require_auth
@require_permission("VERIFY_KYC")
def list_records_route():
    try:
        records = kyc_service.list_records(current_identity())
        return jsonify({"items": [r.to_dict() for r in records], "count": len(records)}), 200
    except Exception:
        current_app.logger.exception("Failed to list KYC records")
        return internal_error()
