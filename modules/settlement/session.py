"""
settlement/session.py

AllocationSession: the stateful controller behind one settlement entry
screen. It owns the current SettlementHeader, forwards every action to the
pure engine, keeps the returned header, and hands warnings back to the UI.

Typical flow:
    s = AllocationSession(get_profile("ar_receipt"), DecimalSettings())
    s.set_header_amounts(tot_amt=500, exh_rate=1.0)
    s.add_selected_transactions(lookup_rows)
    s.auto_allocate()
    s.edit_cell(2, "alloc_amt", 150)
    payload = s.to_payload()
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any, Dict, Iterable, List, Optional

from .aggregation import aggregate_header
from .calculations import DecimalSettings, math_round, multiply
from .clamps import cap_to_remaining, clamp_to_balance
from .engine import (
    ALLOC_FIELD_NAMES,
    STATE_ALLOCATED,
    AllocationResult,
    allocation_state,
    append_lines,
    auto_allocate,
    edit_allocation,
    new_settlement,
    remove_lines,
    reset_allocation,
)
from .lines import SettlementHeader
from .profiles import AllocationProfile

_log = logging.getLogger(__name__)

MSG_ZERO_TOTAL_MANUAL = (
    "Total Amount is zero. Cannot manually allocate. "
    "Please use Auto Allocation or enter Total Amount."
)


class AllocationSession:
    def __init__(
        self,
        profile: AllocationProfile,
        decimals: Optional[DecimalSettings] = None,
        header: Optional[SettlementHeader] = None,
    ) -> None:
        self.profile = profile
        self.decimals = decimals or DecimalSettings()
        self._header: SettlementHeader = header or new_settlement(profile)
        self.last_warnings: List[str] = []

    # ---- state ------------------------------------------------------------

    @property
    def header(self) -> SettlementHeader:
        return self._header

    @property
    def lines(self):
        return self._header.data_details

    @property
    def state(self) -> str:
        return allocation_state(self._header)

    @property
    def is_allocated(self) -> bool:
        return self.state == STATE_ALLOCATED

    @property
    def set_off_total(self) -> float:
        """Signed sum of all allocations; a balanced AP set-off nets to zero."""
        return math_round(sum(ln.alloc_amt for ln in self.lines), self.decimals.amt_dec)

    def _apply(self, result: AllocationResult) -> AllocationResult:
        self._header = result.header
        self.last_warnings = list(result.warnings)
        for w in result.warnings:
            _log.warning("[%s] %s", self.profile.settlement_type, w)
        return result

    # ---- header -----------------------------------------------------------

    def new(self, **header_fields: Any) -> AllocationResult:
        """Discard the current document and start an empty one."""
        return self._apply(AllocationResult(new_settlement(self.profile, **header_fields)))

    def load(self, header: SettlementHeader) -> AllocationResult:
        if header.settlement_type != self.profile.settlement_type:
            raise ValueError(
                f"Cannot load a {header.settlement_type!r} document into a "
                f"{self.profile.settlement_type!r} session."
            )
        return self._apply(AllocationResult(header))

    def set_header_amounts(
        self,
        *,
        tot_amt: Optional[float] = None,
        tot_local_amt: Optional[float] = None,
        exh_rate: Optional[float] = None,
        pay_exh_rate: Optional[float] = None,
    ) -> AllocationResult:
        """
        Form-layer entry point for the settlement amount and rates. The local
        total follows tot_amt * exh_rate unless given explicitly.
        """
        h = self._header
        dec = self.decimals
        rate = h.exh_rate if exh_rate is None else math_round(exh_rate, dec.exh_rate_dec)
        amt = h.tot_amt if tot_amt is None else math_round(tot_amt, dec.amt_dec)
        if tot_local_amt is None:
            local = multiply(amt, rate, dec.loc_amt_dec)
        else:
            local = math_round(tot_local_amt, dec.loc_amt_dec)
        h = replace(
            h,
            tot_amt=amt,
            tot_local_amt=local,
            exh_rate=rate,
            pay_exh_rate=h.pay_exh_rate if pay_exh_rate is None else math_round(pay_exh_rate, dec.exh_rate_dec),
        )
        return self._apply(AllocationResult(aggregate_header(h, self.profile, dec)))

    # ---- lines ------------------------------------------------------------

    def add_selected_transactions(self, records: Iterable[Dict[str, Any]]) -> AllocationResult:
        return self._apply(append_lines(self._header, records, self.profile, self.decimals))

    def remove_lines(self, item_nos: Iterable[int]) -> AllocationResult:
        return self._apply(remove_lines(self._header, item_nos, self.profile, self.decimals))

    # ---- allocation -------------------------------------------------------

    def auto_allocate(self) -> AllocationResult:
        return self._apply(auto_allocate(self._header, self.profile, self.decimals))

    def reset_allocation(self) -> AllocationResult:
        return self._apply(reset_allocation(self._header, self.profile, self.decimals))

    def edit_cell(self, item_no: int, field_name: str, value: float) -> AllocationResult:
        """
        Grid edit of one line. The value is clamped to the line balance and
        to the header amount still available before the engine recalculates.
        With a zero header total manual entry is not allowed and the line is
        set to zero.
        """
        if field_name not in ALLOC_FIELD_NAMES:
            return self._apply(AllocationResult(self._header))

        line = self._header.line(item_no)
        if line is None:
            return self._apply(edit_allocation(
                self._header, item_no, field_name, value, self.profile, self.decimals
            ))
        if float(value) == line.alloc_amt:
            return self._apply(AllocationResult(self._header))

        warnings: List[str] = []
        if self._header.tot_amt == 0:
            warnings.append(MSG_ZERO_TOTAL_MANUAL)
            clamped = 0.0
        else:
            clamped, w = clamp_to_balance(value, line.doc_bal_amt)
            if w:
                warnings.append(w)
            clamped, w = cap_to_remaining(clamped, self._header, item_no, self.profile, self.decimals)
            if w:
                warnings.append(w)

        result = edit_allocation(
            self._header, item_no, field_name, clamped, self.profile, self.decimals
        )
        return self._apply(AllocationResult(result.header, warnings + result.warnings))

    # ---- output -----------------------------------------------------------

    def to_payload(self) -> Dict[str, Any]:
        return self._header.to_payload()
