from dataclasses import FrozenInstanceError

import pytest

from modules.settlement.line_calculator import calculate_line
from modules.settlement.lines import OutstandingDocumentLine


def _line(record, bal, rate):
    return OutstandingDocumentLine.from_outstanding(record("1", bal, rate=rate), 1)


def test_fx_difference_at_settlement_rate(record, dec):
    ln = _line(record, 1000, 1.10)
    out = calculate_line(ln, 100, 1.05, dec)

    assert out.alloc_amt == 100.0
    assert out.doc_alloc_amt == 100.0
    assert out.alloc_local_amt == 105.0
    assert out.doc_alloc_local_amt == 110.0
    assert out.cent_diff == 5.0
    assert out.exh_gain_loss == out.cent_diff


def test_credit_line_keeps_sign(record, dec):
    ln = _line(record, -300, 1.2)
    out = calculate_line(ln, -50, 1.0, dec)

    assert out.alloc_local_amt == -50.0
    assert out.doc_alloc_local_amt == -60.0
    assert out.cent_diff == -10.0
    assert out.exh_gain_loss == -10.0


def test_amount_is_rounded_and_source_untouched(record, dec):
    ln = _line(record, 500, 1.0)
    out = calculate_line(ln, 10.005, 1.0, dec)

    assert out.alloc_amt == 10.01
    assert ln.alloc_amt == 0.0
    assert out.document_id == ln.document_id
    assert out.doc_bal_amt == ln.doc_bal_amt
    with pytest.raises(FrozenInstanceError):
        ln.alloc_amt = 1.0
