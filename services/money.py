import math
import re
from decimal import Decimal, ROUND_HALF_UP
from typing import Any

_CENT = Decimal("0.01")
_NON_NUMERIC = re.compile(r"[^0-9.\-eE+]")


def safe_amount(value: Any) -> float:
    """
    Coerce extracted / user input to a non-negative finite float.
    NaN, negatives, None and unparsable strings all become 0.0.
    """
    if value is None or isinstance(value, bool):
        return 0.0

    if isinstance(value, str):
        cleaned = _NON_NUMERIC.sub("", value.replace(",", ""))
        if not cleaned:
            return 0.0
        value = cleaned

    try:
        x = float(value)
    except (TypeError, ValueError):
        return 0.0

    if not math.isfinite(x) or x < 0:
        return 0.0
    return x


def _to_cents(value: float) -> Decimal:
    # str() keeps the shortest repr, so 79615.125 rounds half-up to .13
    return Decimal(str(value)).quantize(_CENT, rounding=ROUND_HALF_UP)


def round2(value: float) -> float:
    return float(_to_cents(value))


def format_usd(value: float) -> str:
    """180479 -> '$180,479.00'; always exactly two decimals."""
    cents = _to_cents(value)
    sign = "-" if cents < 0 else ""
    return f"{sign}${abs(cents):,.2f}"
