"""
settlement/profiles.py

Per-settlement-type behaviour switches. The AP set-off and AR receipt screens
share one engine; everything that differs between them lives here.
"""
from __future__ import annotations

from dataclasses import dataclass

from constants import SETTLEMENT_AP_DOCSETOFF, SETTLEMENT_AR_RECEIPT
from .strategies import (
    STRATEGY_CREDITS_FIRST_SEQUENTIAL,
    STRATEGY_LARGEST_GROUP_FIRST,
    get_strategy,
)

# How header allocation totals are summed from the lines
SUM_NET = "net"                      # every allocation, signed
SUM_PRIMARY_SIDE = "primary_side"  # |allocations| on the side that consumes the amount (set-off)

# How the header balance total is derived from line balances
BALANCE_NET = "net"                  # plain sum of balances
BALANCE_LOWEST_SIDE = "lowest_side"  # min(|negatives|, positives): most that can be set off


@dataclass(frozen=True)
class AllocationProfile:
    settlement_type: str
    label: str
    strategy: str
    sum_policy: str = SUM_NET
    balance_policy: str = BALANCE_NET
    use_lowest_balance: bool = False        # AP lines store min(totAmt, balAmt) as balance
    reconcile_local_residual: bool = False  # absorb sub-cent local residual into a line

    def proportional_strategy(self):
        return get_strategy(self.strategy)


AP_DOCSETOFF = AllocationProfile(
    settlement_type=SETTLEMENT_AP_DOCSETOFF,
    label="AP Document Set-Off",
    strategy=STRATEGY_LARGEST_GROUP_FIRST,
    sum_policy=SUM_PRIMARY_SIDE,
    balance_policy=BALANCE_LOWEST_SIDE,
    use_lowest_balance=True,
)

AR_RECEIPT = AllocationProfile(
    settlement_type=SETTLEMENT_AR_RECEIPT,
    label="AR Receipt",
    strategy=STRATEGY_CREDITS_FIRST_SEQUENTIAL,
    reconcile_local_residual=True,
)

PROFILES: dict[str, AllocationProfile] = {
    AP_DOCSETOFF.settlement_type: AP_DOCSETOFF,
    AR_RECEIPT.settlement_type: AR_RECEIPT,
}


def get_profile(settlement_type: str) -> AllocationProfile:
    """Profile for a settlement type; ValueError if unknown."""
    p = PROFILES.get((settlement_type or "").strip().lower())
    if p is None:
        raise ValueError(
            "settlement_type must be one of: " + ", ".join(sorted(PROFILES))
        )
    return p
