# Overview: Tenant key-value settings and market rates.

"""
Settings Store

WHY: Market rates are set by operators, read by invoicing and inventory
valuation. Last write wins; there is no versioning because rates are not
contested by concurrent writers in practice. Invoices snapshot the rates
they used onto the lot, so history never depends on the current value.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from flask import current_app

from ..errors import ValidationError
from ..extensions import db
from ..models import GlobalSetting
from ..units import PAISE_PER_RUPEE, rupees_to_paise
from ..validation import parse_amount_paise, require_payload
from . import audit_service
from .concurrency import run_atomically


GOLD_RATE_KEY = "goldRate"
SILVER_RATE_KEY = "silverRate"


def get_setting(tenant_id: int, key: str, default: str | None = None) -> str | None:
    row = db.session.query(GlobalSetting).filter_by(tenant_id=tenant_id, key=key).first()
    if row is None or row.value is None:
        return default
    return row.value


def list_settings(tenant_id: int) -> list[GlobalSetting]:
    return (
        db.session.query(GlobalSetting)
        .filter_by(tenant_id=tenant_id)
        .order_by(GlobalSetting.key.asc())
        .all()
    )


def stage_setting(identity, key: str, value: str | None) -> GlobalSetting:
    """Upsert inside the caller's transaction (no commit)."""
    row = db.session.query(GlobalSetting).filter_by(tenant_id=identity.tenant_id, key=key).first()
    if row is None:
        row = GlobalSetting(tenant_id=identity.tenant_id, key=key)
        db.session.add(row)
    row.value = value
    row.updated_by_user_id = identity.user_id
    return row


def set_setting(identity, key: str, value: str | None) -> GlobalSetting:
    key = (key or "").strip()
    if not key:
        raise ValidationError("key is required", field="key")
    row = run_atomically(lambda: stage_setting(identity, key, value))
    audit_service.record(identity, "SETTING_UPDATED", "settings", {"key": key, "value": value})
    return row


def _rate_paise(tenant_id: int, key: str) -> int | None:
    raw = get_setting(tenant_id, key)
    if raw is None:
        return None
    try:
        return rupees_to_paise(Decimal(raw))
    except InvalidOperation:
        current_app.logger.warning("Ignoring non-numeric %s setting for tenant %s: %r", key, tenant_id, raw)
        return None


def get_market_rates_paise(tenant_id: int) -> dict[str, int | None]:
    return {
        "gold": _rate_paise(tenant_id, GOLD_RATE_KEY),
        "silver": _rate_paise(tenant_id, SILVER_RATE_KEY),
    }


def _paise_text(paise: int) -> str:
    """Stored form of a rate: "7250" or "94.50"."""
    rupees, rem = divmod(paise, PAISE_PER_RUPEE)
    return str(rupees) if rem == 0 else f"{rupees}.{rem:02d}"


def set_market_rates(identity, payload: dict) -> dict[str, int | None]:
    """
    POST /settings/market-rates {gold?, silver?}

    Each provided rate is rupees per gram and must be > 0. At least one rate
    is required.
    """
    payload = require_payload(payload)
    updates: dict[str, int] = {}
    if payload.get("gold") is not None:
        updates[GOLD_RATE_KEY] = parse_amount_paise(payload.get("gold"), "gold", positive=True)
    if payload.get("silver") is not None:
        updates[SILVER_RATE_KEY] = parse_amount_paise(payload.get("silver"), "silver", positive=True)
    if not updates:
        raise ValidationError("gold or silver rate is required", field="gold")

    def _op():
        for key, paise in updates.items():
            stage_setting(identity, key, _paise_text(paise))
        return get_market_rates_paise(identity.tenant_id)

    rates = run_atomically(_op)
    audit_service.record(identity, "MARKET_RATES_UPDATED", "settings", {
        key: _paise_text(paise) for key, paise in updates.items()
    })
    return rates
