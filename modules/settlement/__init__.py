# modules/settlement/__init__.py
"""
Settlement allocation for AP document set-off and AR receipts.

The engine (lines, strategies, aggregation, engine, session) has no Qt
dependency; model/view/controller are imported from their own modules.
"""
from .calculations import DecimalSettings, math_round
from .lines import OutstandingDocumentLine, SettlementHeader
from .profiles import AP_DOCSETOFF, AR_RECEIPT, AllocationProfile, get_profile
from .engine import (
    STATE_ALLOCATED,
    STATE_UNALLOCATED,
    AllocationResult,
    allocation_state,
    append_lines,
    auto_allocate,
    edit_allocation,
    new_settlement,
    remove_lines,
    reset_allocation,
)
from .session import AllocationSession

__all__ = [
    "DecimalSettings",
    "math_round",
    "OutstandingDocumentLine",
    "SettlementHeader",
    "AllocationProfile",
    "AP_DOCSETOFF",
    "AR_RECEIPT",
    "get_profile",
    "AllocationResult",
    "STATE_ALLOCATED",
    "STATE_UNALLOCATED",
    "allocation_state",
    "new_settlement",
    "auto_allocate",
    "edit_allocation",
    "reset_allocation",
    "append_lines",
    "remove_lines",
    "AllocationSession",
]
