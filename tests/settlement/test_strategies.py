import pytest

from modules.settlement.lines import OutstandingDocumentLine
from modules.settlement.strategies import (
    STRATEGY_CREDITS_FIRST_SEQUENTIAL,
    STRATEGY_LARGEST_GROUP_FIRST,
    CreditsFirstSequential,
    FullAllocation,
    LargestGroupFirst,
    get_strategy,
)


@pytest.fixture()
def lines(record):
    def _lines(*balances):
        return [
            OutstandingDocumentLine.from_outstanding(record(str(i), b), i)
            for i, b in enumerate(balances, start=1)
        ]
    return _lines


def test_full_allocation_settles_every_balance(lines, dec):
    assert FullAllocation().allocate(lines(1000, -200, 0), 0, dec) == [1000.0, -200.0, 0.0]


# ---- AP: largest group first ----

def test_largest_group_single_sided(lines, dec):
    assert LargestGroupFirst().allocate(lines(800, 500), 1000, dec) == [800.0, 200.0]


def test_largest_group_settles_minor_side_in_full(lines, dec):
    assert LargestGroupFirst().allocate(lines(600, -200, 300), 500, dec) == [500.0, -200.0, 0.0]


def test_largest_group_tie_goes_to_positive_side(lines, dec):
    assert LargestGroupFirst().allocate(lines(300, -300), 100, dec) == [100.0, -300.0]


def test_largest_group_negative_primary(lines, dec):
    assert LargestGroupFirst().allocate(lines(100, -400, -200), 300, dec) == [100.0, -300.0, 0.0]


# ---- AR: credits first, sequential ----

def test_credits_first_frees_receipt_amount(lines, dec):
    assert CreditsFirstSequential().allocate(lines(1000, -300), 500, dec) == [800.0, -300.0]


def test_credits_first_keeps_display_order(lines, dec):
    assert CreditsFirstSequential().allocate(lines(200, 300, -100), 250, dec) == [200.0, 150.0, -100.0]


def test_credits_first_never_exceeds_balance(lines, dec):
    assert CreditsFirstSequential().allocate(lines(100, 0), 500, dec) == [100.0, 0.0]


def test_get_strategy_by_name():
    assert get_strategy(STRATEGY_LARGEST_GROUP_FIRST).name == STRATEGY_LARGEST_GROUP_FIRST
    assert get_strategy(STRATEGY_CREDITS_FIRST_SEQUENTIAL).name == STRATEGY_CREDITS_FIRST_SEQUENTIAL
    with pytest.raises(ValueError):
        get_strategy("fifo")
