from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any

from .errors import ValidationError
from .time_utils import parse_business_date
from .units import grams_to_mg, rupees_to_paise


# Maximum single amount: 99,99,99,999.99 rupees (kept well inside a 64-bit integer of paise)
MAX_AMOUNT_PAISE = 999_999_999_999
# Maximum single weight: 1,000 kg
MAX_WEIGHT_MG = 1_000_000_000


def require_payload(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")
    return payload


def require_text(payload: dict, key: str, *, max_length: int | None = None) -> str:
    """Required, non-blank string field (stripped)."""
    value = payload.get(key)
    if value is None:
        raise ValidationError(f"{key} is required", field=key)
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{key} must be a string", field=key)
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{key} cannot be blank", field=key)
    if max_length and len(text) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}", field=key)
    return text


def optional_text(payload: dict, key: str, *, max_length: int | None = None) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise ValidationError(f"{key} must be a string", field=key)
    text = str(value).strip()
    if max_length and len(text) > max_length:
        raise ValidationError(f"{key} exceeds max length {max_length}", field=key)
    return text or None


def parse_decimal(value: Any, field: str) -> Decimal:
    """
    Strict numeric coercion.

    Accepts int, float and numeric strings. Rejects booleans, blanks,
    scientific notation, NaN and infinities.
    """
    if value is None:
        raise ValidationError(f"{field} is required", field=field)
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number", field=field)
    if isinstance(value, (int, float)):
        raw = str(value)
    elif isinstance(value, str):
        raw = value.strip()
        if not raw:
            raise ValidationError(f"{field} must be a number", field=field)
        # Reject scientific notation (e.g., "1e15", "1E10")
        if "e" in raw.lower():
            raise ValidationError(f"{field} must be a plain number (scientific notation not allowed)", field=field)
    else:
        raise ValidationError(f"{field} must be a number", field=field)

    try:
        number = Decimal(raw)
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number", field=field)
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    return number


def parse_weight_mg(value: Any, field: str, *, positive: bool = False) -> int:
    """Grams (up to 3 decimals) -> integer milligrams."""
    grams = parse_decimal(value, field)
    if grams < 0:
        raise ValidationError(f"{field} must be >= 0", field=field)
    mg = grams_to_mg(grams)
    if positive and mg <= 0:
        raise ValidationError(f"{field} must be > 0", field=field)
    if mg > MAX_WEIGHT_MG:
        raise ValidationError(f"{field} exceeds the maximum weight", field=field)
    return mg


def parse_amount_paise(value: Any, field: str, *, positive: bool = False) -> int:
    """Rupees (up to 2 decimals) -> integer paise."""
    rupees = parse_decimal(value, field)
    if rupees < 0:
        raise ValidationError(f"{field} must be >= 0", field=field)
    paise = rupees_to_paise(rupees)
    if positive and paise <= 0:
        raise ValidationError(f"{field} must be > 0", field=field)
    if paise > MAX_AMOUNT_PAISE:
        raise ValidationError(f"{field} exceeds the maximum amount", field=field)
    return paise


def parse_percent(value: Any, field: str) -> Decimal:
    percent = parse_decimal(value, field)
    if percent < 0 or percent > 100:
        raise ValidationError(f"{field} must be between 0 and 100", field=field)
    return percent


def parse_int(value: Any, field: str, *, minimum: int | None = None) -> int:
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be an integer", field=field)
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            raise ValidationError(f"{field} must be an integer, not a decimal", field=field)
        number = int(value)
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped or "." in stripped or "e" in stripped.lower():
            raise ValidationError(f"{field} must be an integer", field=field)
        try:
            number = int(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be an integer", field=field)
    else:
        raise ValidationError(f"{field} must be an integer", field=field)
    if minimum is not None and number < minimum:
        raise ValidationError(f"{field} must be >= {minimum}", field=field)
    return number


def parse_bool(value: Any, field: str, *, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in {"true", "false", "yes", "no", "1", "0"}:
        return value.strip().lower() in {"true", "yes", "1"}
    raise ValidationError(f"{field} must be a boolean", field=field)


def parse_date_field(payload: dict, key: str) -> date | None:
    value = payload.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return parse_business_date(str(value))
    except ValueError:
        raise ValidationError(f"{key} must be an ISO-8601 date (YYYY-MM-DD)", field=key)


def require_list(payload: dict, key: str) -> list:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{key} must be a list", field=key)
    return value
