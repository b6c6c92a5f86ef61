# Overview: Sales/inventory ledger; refined stock and institutional sales orders.

"""
Sales/Inventory Ledger

- available_inventory: grams of refined metal from melted lots, bucketed by
  metal (a product name containing "silver" is silver, anything else gold)
- upsert_order: sales contracts with server-computed totals

INVARIANT: SalesOrder.total_amount_paise == sum of its line totals. Client
totals (line or order) are never trusted.
"""

from __future__ import annotations

from ..errors import NotFoundError, ValidationError
from ..extensions import db
from ..models import Lot, SalesOrder, SalesOrderItem
from ..models.sales import ORDER_STATUSES
from ..units import line_amount_paise
from ..validation import (
    optional_text,
    parse_amount_paise,
    parse_date_field,
    parse_weight_mg,
    require_list,
    require_payload,
)
from . import audit_service, settings_service
from .concurrency import lock_for_update, run_atomically
from .document_service import next_document_number
from .lot_service import is_silver
from .lot_states import LotPhase


ORDER_DOCUMENT_TYPE = "SALES_ORDER"
ORDER_PREFIX = "SO"


def available_inventory_mg(tenant_id: int) -> dict[str, int]:
    """Sum of item gross weights over melted lots, per metal."""
    lots = (
        db.session.query(Lot)
        .filter(Lot.tenant_id == tenant_id, Lot.phase == LotPhase.MELTED.value)
        .all()
    )
    totals = {"gold": 0, "silver": 0}
    for lot in lots:
        for item in lot.items:
            totals["silver" if is_silver(item.product) else "gold"] += item.weight_mg
    return totals


def inventory_valuation(tenant_id: int) -> dict:
    grams = available_inventory_mg(tenant_id)
    rates = settings_service.get_market_rates_paise(tenant_id)
    value = 0
    for metal, mg in grams.items():
        if rates.get(metal):
            value += line_amount_paise(rates[metal], mg)
    return {"inventory_mg": grams, "rates_paise": rates, "valuation_paise": value}


def _parse_items(raw_items: list) -> list[dict]:
    if not raw_items:
        raise ValidationError("items must contain at least one line", field="items")
    lines = []
    for index, raw in enumerate(raw_items, start=1):
        prefix = f"items[{index - 1}]"
        if not isinstance(raw, dict):
            raise ValidationError(f"{prefix} must be an object", field=prefix)
        product = raw.get("product")
        if product is None or not str(product).strip():
            raise ValidationError(f"{prefix}.product is required", field=f"{prefix}.product")
        quantity_mg = parse_weight_mg(raw.get("quantity"), f"{prefix}.quantity", positive=True)
        price_raw = raw.get("unitPrice", raw.get("price"))
        unit_price = parse_amount_paise(price_raw, f"{prefix}.unitPrice")
        lines.append({
            "line_no": index,
            "product": str(product).strip()[:255],
            "quantity_mg": quantity_mg,
            "unit_price_paise": unit_price,
            "line_total_paise": line_amount_paise(unit_price, quantity_mg),
        })
    return lines


def parse_order(payload: dict) -> dict:
    payload = require_payload(payload)
    buyer = payload.get("buyer", payload.get("buyerName"))
    if buyer is None or not str(buyer).strip():
        raise ValidationError("buyer is required", field="buyer")

    status = optional_text(payload, "status", max_length=16) or "Confirmed"
    matched = [s for s in ORDER_STATUSES if s.lower() == status.lower()]
    if not matched:
        raise ValidationError(f"status must be one of: {', '.join(ORDER_STATUSES)}", field="status")

    return {
        "order_no": optional_text(payload, "id", max_length=32),
        "buyer": str(buyer).strip()[:255],
        "order_date": parse_date_field(payload, "date"),
        "status": matched[0],
        "lines": _parse_items(require_list(payload, "items")),
    }


def stage_order(identity, fields: dict) -> tuple[SalesOrder, bool]:
    """Create (new number) or replace by id inside the caller's transaction."""
    if fields["order_no"]:
        order = lock_for_update(
            db.session.query(SalesOrder).filter_by(
                tenant_id=identity.tenant_id, order_no=fields["order_no"]
            )
        ).first()
        if order is None:
            raise NotFoundError("SalesOrder", fields["order_no"])
        created = False
        order.items.clear()
        db.session.flush()
    else:
        order = SalesOrder(
            tenant_id=identity.tenant_id,
            order_no=next_document_number(
                tenant_id=identity.tenant_id,
                document_type=ORDER_DOCUMENT_TYPE,
                prefix=ORDER_PREFIX,
            ),
            created_by_user_id=identity.user_id,
        )
        db.session.add(order)
        created = True

    order.buyer = fields["buyer"]
    order.order_date = fields["order_date"]
    order.status = fields["status"]
    for line in fields["lines"]:
        order.items.append(SalesOrderItem(**line))
    order.total_amount_paise = sum(line["line_total_paise"] for line in fields["lines"])
    return order, created


def upsert_order(identity, payload: dict) -> SalesOrder:
    """
    POST /sales-orders

    Without an id a new order is numbered SO-0001, SO-0002, ... per tenant.
    With an id the existing order is replaced (items wholesale); an unknown
    id is NotFound.
    """
    fields = parse_order(payload)
    outcome = {}

    def _op():
        order, outcome["created"] = stage_order(identity, fields)
        return order

    order = run_atomically(_op)
    audit_service.record(identity, "SALES_ORDER_CREATED" if outcome["created"] else "SALES_ORDER_UPDATED", "sales", {
        "id": order.order_no,
        "buyer": fields["buyer"],
        "totalAmountPaise": order.total_amount_paise,
    })
    return order


def list_orders(identity) -> list[SalesOrder]:
    return (
        db.session.query(SalesOrder)
        .filter_by(tenant_id=identity.tenant_id)
        .order_by(SalesOrder.created_at.desc(), SalesOrder.id.desc())
        .all()
    )
