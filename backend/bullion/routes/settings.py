from __future__ import annotations

from flask import Blueprint, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..errors import BullionError
from ..services import settings_service
from ..services.tenant_service import current_identity
from ..units import paise_to_rupees
from . import internal_error, json_body, json_error


settings_bp = Blueprint("settings", __name__, url_prefix="/api")


def _rates_body(rates: dict) -> dict:
    return {metal: paise_to_rupees(paise) for metal, paise in rates.items()}


@settings_bp.get("/settings")
@require_auth
@require_permission("VIEW_STATE")
def list_settings_route():
    try:
        rows = settings_service.list_settings(g.tenant_id)
        return jsonify({
            "items": [row.to_dict() for row in rows],
            "marketRates": _rates_body(settings_service.get_market_rates_paise(g.tenant_id)),
        }), 200
    except Exception:
        current_app.logger.exception("Failed to list settings")
        return internal_error()


@settings_bp.post("/settings")
@require_auth
@require_permission("MANAGE_SETTINGS")
def set_setting_route():
    """{key, value}: last write wins."""
    try:
        data = json_body()
        value = data.get("value")
        row = settings_service.set_setting(
            current_identity(),
            str(data.get("key") or ""),
            None if value is None else str(value),
        )
        return jsonify(row.to_dict()), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to update setting")
        return internal_error()


@settings_bp.post("/settings/market-rates")
@require_auth
@require_permission("MANAGE_SETTINGS")
def set_market_rates_route():
    """{gold?, silver?}: rupees per gram, each > 0."""
    try:
        rates = settings_service.set_market_rates(current_identity(), json_body())
        return jsonify({"marketRates": _rates_body(rates)}), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to update market rates")
        return internal_error()
