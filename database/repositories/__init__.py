# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from database.repositories import (
        SettlementsRepo, SettlementSummary, SettlementsDomainError,
    )
"""

# --------------- Settlements ---------------
from .settlements_repo import (
    SettlementsRepo,
    SettlementSummary,
    DomainError as SettlementsDomainError,
)

__all__ = [
    "SettlementsRepo",
    "SettlementSummary",
    "SettlementsDomainError",
]
