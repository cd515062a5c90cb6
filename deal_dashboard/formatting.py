"""Display formatting shared by the dashboard views (fr-FR conventions)."""
from __future__ import annotations

import math
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Union

CURRENCY_SYMBOL = "\u20ac"
GROUP_SEPARATOR = "\u202f"  # narrow no-break space
SYMBOL_SEPARATOR = "\u00a0"
INFINITY_SYMBOL = "\u221e"


def _round_half_up(value: float, places: str) -> Decimal:
    return Decimal(value).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_currency(value: float) -> str:
    """Whole euros with grouped thousands, e.g. ``1 234 567 €``."""

    if math.isnan(value):
        return f"NaN{SYMBOL_SEPARATOR}{CURRENCY_SYMBOL}"
    if math.isinf(value):
        sign = "-" if value < 0 else ""
        return f"{sign}{INFINITY_SYMBOL}{SYMBOL_SEPARATOR}{CURRENCY_SYMBOL}"
    negative = value < 0 or math.copysign(1.0, value) < 0
    amount = abs(int(_round_half_up(value, "1")))
    digits = f"{amount:,}".replace(",", GROUP_SEPARATOR)
    sign = "-" if negative else ""
    return f"{sign}{digits}{SYMBOL_SEPARATOR}{CURRENCY_SYMBOL}"


def format_percent(rate: float) -> str:
    """Render a ratio in ``[0, 1]`` as a percentage with one decimal."""

    return f"{_round_half_up(rate * 100, '0.1')}%"


def format_date(value: Union[date, datetime]) -> str:
    return value.strftime("%d/%m/%Y")


__all__ = ["format_currency", "format_date", "format_percent"]
