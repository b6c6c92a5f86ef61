# Overview: Weight and money units with exact rounding.

"""
Storage units:
- weights are integer milligrams (grams rounded to 3 decimals)
- money and per-gram rates are integer paise (rupees rounded to 2 decimals)

All arithmetic goes through Decimal with ROUND_HALF_UP so stored values match
the published rounding policy exactly.
"""
from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

MG_PER_GRAM = 1000
PAISE_PER_RUPEE = 100

_ONE = Decimal("1")


def round_half_up(value: Decimal) -> int:
    """Round a Decimal to the nearest integer, halves away from zero."""
    return int(value.quantize(_ONE, rounding=ROUND_HALF_UP))


def grams_to_mg(grams: Decimal) -> int:
    return round_half_up(grams * MG_PER_GRAM)


def rupees_to_paise(rupees: Decimal) -> int:
    return round_half_up(rupees * PAISE_PER_RUPEE)


def mg_to_grams(mg: int | None) -> float | None:
    if mg is None:
        return None
    return float(Decimal(mg) / MG_PER_GRAM)


def paise_to_rupees(paise: int | None) -> float | None:
    if paise is None:
        return None
    return float(Decimal(paise) / PAISE_PER_RUPEE)


def net_weight_mg(weight_mg: int, waste_percent: Decimal) -> int:
    """netWeight = weight x (1 - wastePercent/100), rounded to 3 decimals (1 mg)."""
    return round_half_up(Decimal(weight_mg) * (Decimal(100) - waste_percent) / Decimal(100))


def line_amount_paise(rate_paise: int, weight_mg: int) -> int:
    """amount = rate per gram x weight in grams, rounded to 2 decimals (1 paisa)."""
    return round_half_up(Decimal(rate_paise) * Decimal(weight_mg) / MG_PER_GRAM)


def percent_of_paise(amount_paise: int, percent: Decimal | int) -> int:
    return round_half_up(Decimal(amount_paise) * Decimal(percent) / Decimal(100))


def loss_percent(input_mg: int, loss_mg: int) -> Decimal:
    if input_mg <= 0:
        return Decimal(0)
    return (Decimal(loss_mg) * Decimal(100) / Decimal(input_mg)).quantize(
        Decimal("0.01"), rounding=ROUND_HALF_UP
    )
