from dataclasses import replace

import pytest

from modules.settlement.clamps import (
    MSG_EXCEEDS_BALANCE,
    cap_to_remaining,
    clamp_to_balance,
)


@pytest.mark.parametrize(
    "value, balance, expected, warns",
    [
        (150, 100, 100.0, False),
        (60, 100, 60.0, False),
        (-50, -30, -30.0, False),
        (0, 100, 0.0, False),
        (-5, 100, 0.0, True),
        (5, -100, 0.0, True),
        (5, 0, 0.0, True),
    ],
)
def test_clamp_to_balance(value, balance, expected, warns):
    v, w = clamp_to_balance(value, balance)
    assert v == expected
    assert (w == MSG_EXCEEDS_BALANCE) is warns


def test_cap_positive_allocation_at_remaining(make_header, ar, dec):
    h = make_header(ar, [100, 200], tot_amt=50)
    v, w = cap_to_remaining(100, h, 1, ar, dec)
    assert v == 50.0
    assert "50.00" in w


def test_no_cap_without_header_total(make_header, ar, dec):
    h = make_header(ar, [100, 200])
    assert cap_to_remaining(100, h, 1, ar, dec) == (100.0, None)


def test_credit_not_capped_under_net_policy(make_header, ar, dec):
    h = make_header(ar, [500, -300], tot_amt=200)
    assert cap_to_remaining(-300, h, 2, ar, dec) == (-300.0, None)


def test_credit_notes_capped_when_they_are_the_primary_side(make_header, ap, dec):
    h = make_header(ap, [100, -300, -200], tot_amt=200)
    v, w = cap_to_remaining(-300, h, 2, ap, dec)
    assert v == -200.0
    assert w is not None
    assert cap_to_remaining(100, h, 1, ap, dec) == (100.0, None)


def test_primary_side_counts_other_allocations(make_header, ap, dec):
    h = make_header(ap, [100, -300, -200], tot_amt=250)
    h = replace(h, data_details=(
        replace(h.data_details[0], alloc_amt=100.0),
        replace(h.data_details[1], alloc_amt=-250.0),
        h.data_details[2],
    ))
    v, w = cap_to_remaining(-200, h, 3, ap, dec)
    assert v == 0.0
    assert w is not None
