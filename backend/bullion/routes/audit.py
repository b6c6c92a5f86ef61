# Overview: Flask API route for the tenant audit trail.

# backend/bullion/routes/audit.py
from flask import Blueprint, request, jsonify, current_app

from ..decorators import require_auth, require_permission
from ..errors import BullionError
from ..services import audit_service
from ..services.tenant_service import current_identity
from ..validation import parse_int
from . import internal_error, json_error


audit_bp = Blueprint("audit", __name__, url_prefix="/api")


@audit_bp.get("/audit-logs")
@require_auth
@require_permission("VIEW_AUDIT_LOG")
def list_audit_logs_route():
    """
    Most recent entries first. ?limit=N is clamped to AUDIT_LOG_MAX_PAGE_SIZE.
    """
    try:
        raw_limit = request.args.get("limit")
        limit = None if raw_limit in (None, "") else parse_int(raw_limit, "limit", minimum=1)
        entries = audit_service.list_logs(current_identity(), limit=limit)
        return jsonify({"items": [e.to_dict() for e in entries], "count": len(entries)}), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to list audit logs")
        return internal_error()
