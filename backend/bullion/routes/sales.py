# Overview: Flask API routes for sales orders and refined inventory; parses input and returns JSON responses.

# backend/bullion/routes/sales.py
from flask import Blueprint, jsonify, current_app, g

from ..decorators import require_auth, require_permission
from ..errors import BullionError
from ..services import sales_service
from ..services.tenant_service import current_identity
from ..units import mg_to_grams, paise_to_rupees
from . import internal_error, json_body, json_error


sales_bp = Blueprint("sales", __name__, url_prefix="/api")


@sales_bp.post("/sales-orders")
@require_auth
@require_permission("MANAGE_SALES")
def upsert_order_route():
    """
    Create or replace a sales order.

    Request body:
    {
        "id": "SO-0001" (omit to create), "buyer": str, "date": "YYYY-MM-DD",
        "status": "Draft" | "Confirmed" | "Processing" | "Completed",
        "items": [{"product": str, "quantity": grams, "unitPrice": rupees per gram}]
    }

    Line totals and totalAmount are computed server-side.
    """
    try:
        order = sales_service.upsert_order(current_identity(), json_body())
        return jsonify(order.to_dict()), 200
    except BullionError as e:
        return json_error(e)
    except Exception:
        current_app.logger.exception("Failed to upsert sales order")
        return internal_error()


@sales_bp.get("/sales-orders")
@require_auth
@require_permission("VIEW_STATE")
def list_orders_route():
    try:
        orders = sales_service.list_orders(current_identity())
        return jsonify({"items": [o.to_dict() for o in orders], "count": len(orders)}), 200
    except Exception:
        current_app.logger.exception("Failed to list sales orders")
        return internal_error()


@sales_bp.get("/inventory")
@require_auth
@require_permission("VIEW_STATE")
def inventory_route():
    """Refined stock in grams per metal and its value at current market rates."""
    try:
        valuation = sales_service.inventory_valuation(g.tenant_id)
        return jsonify({
            "availableInventory": {
                metal: mg_to_grams(mg) for metal, mg in valuation["inventory_mg"].items()
            },
            "rates": {
                metal: paise_to_rupees(paise) for metal, paise in valuation["rates_paise"].items()
            },
            "valuation": paise_to_rupees(valuation["valuation_paise"]),
        }), 200
    except Exception:
        current_app.logger.exception("Failed to compute inventory")
        return internal_error()
