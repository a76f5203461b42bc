"""
settlement/clamps.py

Input clamps for manual allocation edits. These belong to the entry grid:
the engine trusts that an edited allocation already respects the line
balance and the header amount still available.

Out-of-range edits are clamped, never rejected; the caller shows the
returned warning.
"""
from __future__ import annotations

from typing import Optional, Tuple

from .calculations import DecimalSettings, math_round, sign, subtract
from .lines import SettlementHeader
from .profiles import SUM_PRIMARY_SIDE, AllocationProfile
from .strategies import primary_sign
from .aggregation import sum_allocations

MSG_AUTO_ZERO = "Nothing left to allocate; the amount was set to zero. Please check the allocation."
MSG_EXCEEDS_BALANCE = "Allocation exceeds remaining balance. It has been reset."
MSG_CAPPED = "Allocation capped at the remaining amount {amount}."

__all__ = ["clamp_to_balance", "cap_to_remaining"]


def clamp_to_balance(value: float, doc_bal_amt: float) -> Tuple[float, Optional[str]]:
    """
    Keep an allocation inside [0, balance] on the balance's side of zero.

    - zero balance, or a value on the opposite side -> 0 (with warning)
    - |value| > |balance|                            -> balance
    """
    v = float(value)
    if v == 0:
        return 0.0, None
    s_bal = sign(doc_bal_amt)
    if s_bal == 0 or sign(v) != s_bal:
        return 0.0, MSG_EXCEEDS_BALANCE
    if abs(v) > abs(doc_bal_amt):
        return float(doc_bal_amt), None
    return v, None


def cap_to_remaining(
    value: float,
    header: SettlementHeader,
    item_no: int,
    profile: AllocationProfile,
    decimals: DecimalSettings,
) -> Tuple[float, Optional[str]]:
    """
    Cap an allocation at what the header amount still has available once
    every other line's allocation is counted.

    Under the net policy credit allocations free funds rather than consume
    them; under the primary-side policy only the primary side of the set-off
    consumes the amount. Those other allocations are not capped here. A
    header total of zero means full allocation mode; nothing is capped.
    """
    v = float(value)
    if v == 0 or header.tot_amt <= 0:
        return v, None

    others = [ln for ln in header.data_details if ln.item_no != item_no]
    if profile.sum_policy == SUM_PRIMARY_SIDE:
        side = primary_sign(header.data_details)
        if sign(v) != side:
            return v, None
        used = sum_allocations(
            others, "alloc_amt", profile.sum_policy, decimals.amt_dec, primary=side
        )
    elif v > 0:
        used = sum_allocations(others, "alloc_amt", profile.sum_policy, decimals.amt_dec)
    else:
        return v, None

    remaining = subtract(header.tot_amt, used, decimals.amt_dec)
    if remaining <= 0:
        return 0.0, MSG_AUTO_ZERO
    if abs(v) > remaining:
        capped = math_round(sign(v) * remaining, decimals.amt_dec)
        return capped, MSG_CAPPED.format(amount=f"{remaining:.{decimals.amt_dec}f}")
    return v, None
