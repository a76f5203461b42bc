"""
settlement/aggregation.py

Header roll-ups: allocation totals, unallocated remainder, exchange
gain/loss and the balance total, all derived from the detail lines.

Two modes:
  - full:         header total was zero; tot_amt / tot_local_amt are taken
                  from the line sums and nothing is left unallocated.
  - proportional: header total is fixed; the remainder is unallocated.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Optional

from .calculations import DecimalSettings, math_round, sign, step, subtract
from .lines import OutstandingDocumentLine, SettlementHeader
from .profiles import (
    BALANCE_LOWEST_SIDE,
    SUM_PRIMARY_SIDE,
    AllocationProfile,
)
from .strategies import primary_sign

__all__ = [
    "sum_allocations",
    "balance_total",
    "aggregate_header",
    "reconcile_local_residual",
]


def sum_allocations(
    lines: Iterable[OutstandingDocumentLine],
    attr: str,
    sum_policy: str,
    decimals: int,
    *,
    primary: Optional[int] = None,
) -> float:
    """
    Sum `attr` over the lines.

    Net: signed sum of every line.
    Primary side: magnitude of the sum over lines allocated on the primary
    side of the set-off. `primary` defaults to primary_sign(lines); pass it
    when summing a subset of the document's lines.
    """
    lines = list(lines)
    if sum_policy != SUM_PRIMARY_SIDE:
        return math_round(sum(float(getattr(ln, attr)) for ln in lines), decimals)

    side = primary_sign(lines) if primary is None else primary
    total = sum(float(getattr(ln, attr)) for ln in lines if sign(ln.alloc_amt) == side)
    return math_round(abs(total), decimals)


def balance_total(
    lines: Iterable[OutstandingDocumentLine],
    balance_policy: str,
    decimals: int,
) -> float:
    """
    Net: plain sum of balances.
    Lowest side: the smaller of |sum of negatives| and sum of positives,
    i.e. the most a set-off can net out.
    """
    lines = list(lines)
    if balance_policy == BALANCE_LOWEST_SIDE:
        neg = abs(sum(ln.doc_bal_amt for ln in lines if ln.doc_bal_amt < 0))
        pos = sum(ln.doc_bal_amt for ln in lines if ln.doc_bal_amt > 0)
        return math_round(neg if neg < pos else pos, decimals)
    return math_round(sum(ln.doc_bal_amt for ln in lines), decimals)


def aggregate_header(
    header: SettlementHeader,
    profile: AllocationProfile,
    decimals: DecimalSettings,
    *,
    full_mode: bool = False,
) -> SettlementHeader:
    """Recompute every derived header field from header.data_details."""
    lines = header.data_details
    alloc_tot = sum_allocations(lines, "alloc_amt", profile.sum_policy, decimals.amt_dec)
    alloc_tot_local = sum_allocations(lines, "alloc_local_amt", profile.sum_policy, decimals.loc_amt_dec)
    # sign preserved; gain/loss is never abs()'d
    gain_loss = math_round(sum(ln.exh_gain_loss for ln in lines), decimals.loc_amt_dec)
    bal_tot = balance_total(lines, profile.balance_policy, decimals.amt_dec)

    if full_mode:
        return replace(
            header,
            tot_amt=alloc_tot,
            tot_local_amt=alloc_tot_local,
            bal_tot_amt=bal_tot,
            alloc_tot_amt=alloc_tot,
            alloc_tot_local_amt=alloc_tot_local,
            un_alloc_tot_amt=0.0,
            un_alloc_tot_local_amt=0.0,
            exh_gain_loss=gain_loss,
        )

    return replace(
        header,
        bal_tot_amt=bal_tot,
        alloc_tot_amt=alloc_tot,
        alloc_tot_local_amt=alloc_tot_local,
        un_alloc_tot_amt=subtract(header.tot_amt, alloc_tot, decimals.amt_dec),
        un_alloc_tot_local_amt=subtract(header.tot_local_amt, alloc_tot_local, decimals.loc_amt_dec),
        exh_gain_loss=gain_loss,
    )


def reconcile_local_residual(
    header: SettlementHeader,
    profile: AllocationProfile,
    decimals: DecimalSettings,
    *,
    target_item_no: Optional[int] = None,
) -> SettlementHeader:
    """
    When the whole settlement amount is allocated but the local amounts miss
    the header local total by a rounding residual (at most one local unit per
    allocated line), move the residual into one line's alloc_local_amt so the
    header balances in local currency too. The line's cent_diff and
    exh_gain_loss follow.

    The target is `target_item_no` when given (and allocated), else the last
    allocated line. Returns the header unchanged when nothing qualifies.
    """
    if header.un_alloc_tot_amt != 0 or header.un_alloc_tot_local_amt == 0:
        return header

    allocated = [ln for ln in header.data_details if ln.is_allocated]
    if not allocated:
        return header
    tolerance = step(decimals.loc_amt_dec) * len(allocated) + 1e-9
    residual = header.un_alloc_tot_local_amt
    if abs(residual) > tolerance:
        return header

    target = None
    if target_item_no is not None:
        target = next((ln for ln in allocated if ln.item_no == target_item_no), None)
        if target is None:
            return header
    else:
        target = allocated[-1]

    # primary-side totals are magnitudes, so the residual follows the side's sign
    side = 1
    if profile.sum_policy == SUM_PRIMARY_SIDE:
        side = primary_sign(header.data_details)
        if sign(target.alloc_amt) != side:
            return header

    new_local = math_round(target.alloc_local_amt + side * residual, decimals.loc_amt_dec)
    cent_diff = subtract(target.doc_alloc_local_amt, new_local, decimals.loc_amt_dec)
    fixed = replace(target, alloc_local_amt=new_local, cent_diff=cent_diff, exh_gain_loss=cent_diff)

    lines = tuple(fixed if ln.item_no == target.item_no else ln for ln in header.data_details)
    return aggregate_header(header.with_lines(lines), profile, decimals)
