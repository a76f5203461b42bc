"""
settlement/engine.py

Allocation operations over an immutable SettlementHeader. Every function
takes the current header (with its lines) and returns an AllocationResult
carrying the new header and any non-fatal warnings for the UI.

Nothing here raises on numeric input: "no lines", "nothing to allocate"
and similar conditions come back as warnings with the header unchanged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List

from .aggregation import aggregate_header, balance_total, reconcile_local_residual
from .calculations import DecimalSettings
from .line_calculator import calculate_line
from .lines import OutstandingDocumentLine, SettlementHeader
from .profiles import AllocationProfile
from .strategies import FullAllocation

_log = logging.getLogger(__name__)

STATE_UNALLOCATED = "Unallocated"
STATE_ALLOCATED = "Allocated"

ALLOC_FIELD_NAMES = ("alloc_amt", "allocAmt")

MSG_NO_LINES = "No outstanding lines to allocate."
MSG_NEGATIVE_TOTAL = "Enter a positive amount to allocate."
MSG_UNKNOWN_ITEM = "Item No {item_no} is not part of this settlement."
MSG_DUPLICATE_DOCUMENT = "Document {document_no} is already selected."

__all__ = [
    "AllocationResult",
    "STATE_UNALLOCATED",
    "STATE_ALLOCATED",
    "allocation_state",
    "new_settlement",
    "auto_allocate",
    "edit_allocation",
    "reset_allocation",
    "append_lines",
    "remove_lines",
]


@dataclass(frozen=True)
class AllocationResult:
    header: SettlementHeader
    warnings: List[str] = field(default_factory=list)


def allocation_state(header: SettlementHeader) -> str:
    """Allocated iff at least one line carries a non-zero allocation."""
    if any(ln.is_allocated for ln in header.data_details):
        return STATE_ALLOCATED
    return STATE_UNALLOCATED


def new_settlement(profile: AllocationProfile, **header_fields: Any) -> SettlementHeader:
    """Empty header for the profile's settlement type (the "New" action)."""
    return SettlementHeader(settlement_type=profile.settlement_type, **header_fields)


# -----------------------------
# Auto allocation
# -----------------------------

def _apply_amounts(
    header: SettlementHeader,
    amounts: Iterable[float],
    decimals: DecimalSettings,
) -> SettlementHeader:
    lines = tuple(
        calculate_line(ln, amt, header.exh_rate, decimals)
        for ln, amt in zip(header.data_details, amounts)
    )
    return header.with_lines(lines)


def auto_allocate(
    header: SettlementHeader,
    profile: AllocationProfile,
    decimals: DecimalSettings,
) -> AllocationResult:
    """
    Header total zero  -> full allocation; header totals follow the lines.
    Header total > 0   -> the profile's proportional strategy; the rest is
                          left unallocated.
    """
    if not header.data_details:
        _log.warning("auto_allocate: %s", MSG_NO_LINES)
        return AllocationResult(header, [MSG_NO_LINES])
    if header.tot_amt < 0:
        _log.warning("auto_allocate: negative header total %s", header.tot_amt)
        return AllocationResult(header, [MSG_NEGATIVE_TOTAL])

    if header.tot_amt == 0:
        amounts = FullAllocation().allocate(header.data_details, 0.0, decimals)
        allocated = _apply_amounts(header, amounts, decimals)
        out = aggregate_header(allocated, profile, decimals, full_mode=True)
        _log.info(
            "Full allocation on %d line(s): tot_amt=%s exh_gain_loss=%s",
            len(out.data_details), out.tot_amt, out.exh_gain_loss,
        )
        return AllocationResult(out)

    strategy = profile.proportional_strategy()
    amounts = strategy.allocate(header.data_details, header.tot_amt, decimals)
    allocated = _apply_amounts(header, amounts, decimals)
    out = aggregate_header(allocated, profile, decimals)
    if profile.reconcile_local_residual:
        out = reconcile_local_residual(out, profile, decimals)
    _log.info(
        "%s allocation of %s on %d line(s): unallocated=%s",
        strategy.name, header.tot_amt, len(out.data_details), out.un_alloc_tot_amt,
    )
    return AllocationResult(out)


# -----------------------------
# Manual cell edit
# -----------------------------

def edit_allocation(
    header: SettlementHeader,
    item_no: int,
    field_name: str,
    value: float,
    profile: AllocationProfile,
    decimals: DecimalSettings,
) -> AllocationResult:
    """
    Recalculate one line after the user edits its allocation, then
    re-aggregate the header over all lines. Other lines are not touched.

    `value` is expected to be clamped already (see clamps.py).
    """
    if field_name not in ALLOC_FIELD_NAMES:
        return AllocationResult(header)

    current = header.line(item_no)
    if current is None:
        msg = MSG_UNKNOWN_ITEM.format(item_no=item_no)
        _log.warning("edit_allocation: %s", msg)
        return AllocationResult(header, [msg])

    if float(value) == current.alloc_amt:
        return AllocationResult(header)

    updated = calculate_line(current, value, header.exh_rate, decimals)
    lines = tuple(updated if ln.item_no == item_no else ln for ln in header.data_details)
    out = aggregate_header(
        header.with_lines(lines), profile, decimals, full_mode=header.tot_amt == 0
    )
    if profile.reconcile_local_residual:
        out = reconcile_local_residual(out, profile, decimals, target_item_no=item_no)
    _log.debug("Item %s alloc_amt %s -> %s", item_no, current.alloc_amt, updated.alloc_amt)
    return AllocationResult(out)


# -----------------------------
# Reset
# -----------------------------

def reset_allocation(
    header: SettlementHeader,
    profile: AllocationProfile,
    decimals: DecimalSettings,
) -> AllocationResult:
    """Zero every line allocation and every header aggregate."""
    if not header.data_details:
        return AllocationResult(header)
    out = _cleared(header, header.data_details, profile, decimals)
    _log.info("Allocation reset on %d line(s)", len(out.data_details))
    return AllocationResult(out)


def _cleared(
    header: SettlementHeader,
    lines: Iterable[OutstandingDocumentLine],
    profile: AllocationProfile,
    decimals: DecimalSettings,
) -> SettlementHeader:
    lines = tuple(ln.cleared() for ln in lines)
    return replace(
        header.with_lines(lines),
        bal_tot_amt=balance_total(lines, profile.balance_policy, decimals.amt_dec),
        alloc_tot_amt=0.0,
        alloc_tot_local_amt=0.0,
        un_alloc_tot_amt=0.0,
        un_alloc_tot_local_amt=0.0,
        exh_gain_loss=0.0,
    )


# -----------------------------
# Line collection
# -----------------------------

def append_lines(
    header: SettlementHeader,
    records: Iterable[Dict[str, Any]],
    profile: AllocationProfile,
    decimals: DecimalSettings,
) -> AllocationResult:
    """
    Append outstanding transactions picked in the lookup. New lines get the
    next sequential item numbers and zeroed allocations; documents already
    on the settlement are skipped with a warning.
    """
    warnings: List[str] = []
    seen = header.document_ids()
    next_no = header.next_item_no()
    new_lines: List[OutstandingDocumentLine] = []
    for rec in records or []:
        ln = OutstandingDocumentLine.from_outstanding(
            rec, next_no, use_lowest_balance=profile.use_lowest_balance
        )
        if ln.document_id in seen:
            warnings.append(MSG_DUPLICATE_DOCUMENT.format(document_no=ln.document_no or ln.document_id))
            continue
        seen.add(ln.document_id)
        new_lines.append(ln)
        next_no += 1

    if not new_lines:
        return AllocationResult(header, warnings)

    out = header.with_lines(header.data_details + tuple(new_lines))
    out = aggregate_header(out, profile, decimals)
    _log.info("Added %d outstanding line(s)", len(new_lines))
    return AllocationResult(out, warnings)


def remove_lines(
    header: SettlementHeader,
    item_nos: Iterable[int],
    profile: AllocationProfile,
    decimals: DecimalSettings,
) -> AllocationResult:
    """
    Drop the given lines. When anything was removed the remaining lines lose
    their allocations too, so the user re-allocates against the new set.
    """
    to_remove = set()
    for n in item_nos or []:
        try:
            to_remove.add(int(n))
        except (TypeError, ValueError):
            continue
    kept = tuple(ln for ln in header.data_details if ln.item_no not in to_remove)
    if len(kept) == len(header.data_details):
        return AllocationResult(header)

    _log.info("Removed %d line(s)", len(header.data_details) - len(kept))
    return AllocationResult(_cleared(header, kept, profile, decimals))
