"""
settlement/strategies.py

Auto-allocation strategies. Each one takes the detail lines (display order)
and the header settlement amount, and returns one allocation amount per line
in the same order. They never touch local amounts; the engine runs the
per-line calculator afterwards.

- full:                      header total is zero -> settle every balance.
- largest_group_first:       AP set-off tie-break (see LargestGroupFirst).
- credits_first_sequential:  AR receipt tie-break (see CreditsFirstSequential).

Both proportional strategies keep sign(alloc) == sign(balance) and
|alloc| <= |balance|; zero-balance lines always get 0.
"""
from __future__ import annotations

from typing import Dict, List, Sequence

from .calculations import DecimalSettings, add, math_round, sign, subtract
from .lines import OutstandingDocumentLine

# ---- Strategy keys ----
STRATEGY_FULL = "full"
STRATEGY_LARGEST_GROUP_FIRST = "largest_group_first"
STRATEGY_CREDITS_FIRST_SEQUENTIAL = "credits_first_sequential"

__all__ = [
    "STRATEGY_FULL",
    "STRATEGY_LARGEST_GROUP_FIRST",
    "STRATEGY_CREDITS_FIRST_SEQUENTIAL",
    "FullAllocation",
    "LargestGroupFirst",
    "CreditsFirstSequential",
    "get_strategy",
    "primary_sign",
]


def primary_sign(lines: Sequence[OutstandingDocumentLine]) -> int:
    """
    Side of an AP set-off that consumes the header amount: the sign whose
    absolute balance sum is larger (a tie goes to the positive side).
    """
    pos_sum = sum(ln.doc_bal_amt for ln in lines if ln.doc_bal_amt > 0)
    neg_sum = -sum(ln.doc_bal_amt for ln in lines if ln.doc_bal_amt < 0)
    return 1 if pos_sum >= neg_sum else -1


class FullAllocation:
    """Every line receives its entire outstanding balance."""

    name = STRATEGY_FULL

    def allocate(
        self,
        lines: Sequence[OutstandingDocumentLine],
        tot_amt: float,
        decimals: DecimalSettings,
    ) -> List[float]:
        return [math_round(ln.doc_bal_amt, decimals.amt_dec) for ln in lines]


class LargestGroupFirst:
    """
    AP set-off policy.

    The sign (invoices vs. credit notes) with the larger absolute balance sum
    is the primary group; a tie goes to the positive side. Every line of the
    other sign is settled in full. Primary lines are then walked in display
    order, each taking min(remaining, |balance|) until the amount runs out.
    """

    name = STRATEGY_LARGEST_GROUP_FIRST

    def allocate(
        self,
        lines: Sequence[OutstandingDocumentLine],
        tot_amt: float,
        decimals: DecimalSettings,
    ) -> List[float]:
        dec = decimals.amt_dec
        primary = primary_sign(lines)

        remaining = math_round(tot_amt, dec)
        out: List[float] = []
        for ln in lines:
            bal = math_round(ln.doc_bal_amt, dec)
            s = sign(bal)
            if s == 0:
                out.append(0.0)
            elif s != primary:
                out.append(bal)
            elif remaining <= 0:
                out.append(0.0)
            else:
                take = min(remaining, abs(bal))
                remaining = subtract(remaining, take, dec)
                out.append(math_round(primary * take, dec))
        return out


class CreditsFirstSequential:
    """
    AR receipt policy.

    Credit lines (negative balance) are processed first, keeping their
    relative order, then the rest. A running pending amount starts at the
    receipt total; a credit line is settled in full and adds its magnitude
    back to pending, a positive line takes min(balance, pending) and
    consumes it. Whatever is still pending stays unallocated.
    """

    name = STRATEGY_CREDITS_FIRST_SEQUENTIAL

    def allocate(
        self,
        lines: Sequence[OutstandingDocumentLine],
        tot_amt: float,
        decimals: DecimalSettings,
    ) -> List[float]:
        dec = decimals.amt_dec
        order = sorted(range(len(lines)), key=lambda i: 0 if lines[i].doc_bal_amt < 0 else 1)

        pending_allocation_amt = math_round(tot_amt, dec)
        out: List[float] = [0.0] * len(lines)
        for i in order:
            bal = math_round(lines[i].doc_bal_amt, dec)
            if bal < 0:
                out[i] = bal
                pending_allocation_amt = add(pending_allocation_amt, -bal, dec)
            elif bal > 0 and pending_allocation_amt > 0:
                take = min(bal, pending_allocation_amt)
                out[i] = take
                pending_allocation_amt = subtract(pending_allocation_amt, take, dec)
        return out


_STRATEGIES: Dict[str, object] = {
    STRATEGY_FULL: FullAllocation(),
    STRATEGY_LARGEST_GROUP_FIRST: LargestGroupFirst(),
    STRATEGY_CREDITS_FIRST_SEQUENTIAL: CreditsFirstSequential(),
}


def get_strategy(name: str):
    """Return the strategy registered under `name`; ValueError if unknown."""
    try:
        return _STRATEGIES[name]
    except KeyError:
        raise ValueError(
            f"Unknown allocation strategy '{name}'. "
            f"Expected one of: {', '.join(sorted(_STRATEGIES))}"
        ) from None
