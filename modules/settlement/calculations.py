"""
settlement/calculations.py

Pure rounding helpers for settlement amounts. Every monetary operation in the
allocation engine goes through these so that amounts, local amounts and
exchange rates are always cut to the configured decimal places.

Rounding is half-up (away from zero at .5) on the decimal string form of the
value, so 1.005 rounds to 1.01 and not to 1.00 as binary floats would.

Do not import repos or open DB connections here.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from constants import DEFAULT_AMT_DEC, DEFAULT_EXH_RATE_DEC, DEFAULT_LOC_AMT_DEC

__all__ = [
    "DecimalSettings",
    "math_round",
    "multiply",
    "add",
    "subtract",
    "step",
    "sign",
]


@dataclass(frozen=True)
class DecimalSettings:
    """Decimal places per currency class (company setting)."""
    amt_dec: int = DEFAULT_AMT_DEC
    loc_amt_dec: int = DEFAULT_LOC_AMT_DEC
    exh_rate_dec: int = DEFAULT_EXH_RATE_DEC

    @classmethod
    def from_dict(cls, data: dict | None) -> "DecimalSettings":
        """Build from a company settings record ({'amtDec': 2, 'locAmtDec': 2, ...})."""
        data = data or {}

        def _pick(*keys, default):
            for k in keys:
                if data.get(k) is not None:
                    return int(data[k])
            return default

        return cls(
            amt_dec=_pick("amt_dec", "amtDec", default=DEFAULT_AMT_DEC),
            loc_amt_dec=_pick("loc_amt_dec", "locAmtDec", default=DEFAULT_LOC_AMT_DEC),
            exh_rate_dec=_pick("exh_rate_dec", "exhRateDec", default=DEFAULT_EXH_RATE_DEC),
        )


# -----------------------------
# Core utilities
# -----------------------------

def math_round(value: float, decimals: int) -> float:
    """Round half-up to `decimals` places. Non-numeric input rounds to 0.0."""
    try:
        d = Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return 0.0
    if not d.is_finite():
        return 0.0
    q = Decimal(1).scaleb(-int(decimals))
    r = float(d.quantize(q, rounding=ROUND_HALF_UP))
    # avoid -0.0 leaking into payloads
    return r + 0.0


def multiply(a: float, b: float, decimals: int) -> float:
    """round(a * b, decimals). Used for exchange-rate conversions."""
    return math_round(float(a) * float(b), decimals)


def add(a: float, b: float, decimals: int) -> float:
    """round(a + b, decimals)."""
    return math_round(float(a) + float(b), decimals)


def subtract(a: float, b: float, decimals: int) -> float:
    """round(a - b, decimals)."""
    return math_round(float(a) - float(b), decimals)


def step(decimals: int) -> float:
    """Smallest representable unit at the given precision (2 -> 0.01)."""
    return 10.0 ** -int(decimals)


def sign(x: float) -> int:
    if x > 0:
        return 1
    if x < 0:
        return -1
    return 0
