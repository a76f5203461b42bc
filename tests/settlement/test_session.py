import logging

import pytest

from modules.settlement.clamps import MSG_AUTO_ZERO, MSG_EXCEEDS_BALANCE
from modules.settlement.engine import STATE_ALLOCATED, STATE_UNALLOCATED
from modules.settlement.lines import SettlementHeader
from modules.settlement.session import MSG_ZERO_TOTAL_MANUAL, AllocationSession


@pytest.fixture()
def ar_session(ar, dec, record):
    s = AllocationSession(ar, dec)
    s.add_selected_transactions([record("A", 100), record("B", 200), record("C", 50)])
    s.set_header_amounts(tot_amt=250, exh_rate=1.0)
    return s


def test_header_amounts_derive_local_total(ar, dec):
    s = AllocationSession(ar, dec)
    s.set_header_amounts(tot_amt=100, exh_rate=1.5)
    assert s.header.tot_local_amt == 150.0
    s.set_header_amounts(tot_local_amt=149.99)
    assert s.header.tot_local_amt == 149.99


def test_state_follows_allocation(ar_session):
    assert ar_session.state == STATE_UNALLOCATED
    ar_session.auto_allocate()
    assert ar_session.state == STATE_ALLOCATED
    assert ar_session.is_allocated
    ar_session.reset_allocation()
    assert ar_session.state == STATE_UNALLOCATED


def test_edit_is_clamped_to_balance(ar_session):
    ar_session.edit_cell(1, "alloc_amt", 150)
    assert ar_session.header.line(1).alloc_amt == 100.0


def test_edit_is_capped_then_zeroed(ar_session):
    ar_session.edit_cell(2, "alloc_amt", 200)
    result = ar_session.edit_cell(1, "alloc_amt", 100)
    assert ar_session.header.line(1).alloc_amt == 50.0
    assert "50.00" in result.warnings[0]

    result = ar_session.edit_cell(3, "alloc_amt", 30)
    assert ar_session.header.line(3).alloc_amt == 0.0
    assert result.warnings == [MSG_AUTO_ZERO]
    assert ar_session.header.un_alloc_tot_amt == 0.0


def test_edit_against_balance_sign_is_zeroed(ar_session):
    result = ar_session.edit_cell(1, "alloc_amt", -10)
    assert ar_session.header.line(1).alloc_amt == 0.0
    assert MSG_EXCEEDS_BALANCE in result.warnings


def test_manual_edit_needs_header_total(ar, dec, record, caplog):
    s = AllocationSession(ar, dec)
    s.add_selected_transactions([record("A", 100)])
    with caplog.at_level(logging.WARNING):
        result = s.edit_cell(1, "alloc_amt", 40)
    assert result.warnings == [MSG_ZERO_TOTAL_MANUAL]
    assert s.header.line(1).alloc_amt == 0.0
    assert s.last_warnings == [MSG_ZERO_TOTAL_MANUAL]
    assert "Cannot manually allocate" in caplog.text


def test_ap_set_off_nets_to_zero(ap, dec, record):
    s = AllocationSession(ap, dec)
    s.add_selected_transactions([record("INV", 300), record("CN", -300)])
    s.set_header_amounts(tot_amt=300)
    s.auto_allocate()

    assert [ln.alloc_amt for ln in s.lines] == [300.0, -300.0]
    assert s.set_off_total == 0.0
    assert s.header.alloc_tot_amt == 300.0
    assert s.header.un_alloc_tot_amt == 0.0


def test_load_rejects_other_settlement_type(ar, dec):
    s = AllocationSession(ar, dec)
    with pytest.raises(ValueError):
        s.load(SettlementHeader(settlement_type="ap_docsetoff"))


def test_new_discards_document(ar_session):
    ar_session.new(document_no="RCT-2")
    assert ar_session.lines == ()
    assert ar_session.header.document_no == "RCT-2"


def test_payload_is_camel_case(ar_session):
    ar_session.auto_allocate()
    payload = ar_session.to_payload()

    assert payload["header"]["totAmt"] == 250.0
    assert payload["header"]["unAllocTotAmt"] == 0.0
    row = payload["data_details"][0]
    assert row["itemNo"] == 1
    assert row["allocAmt"] == 100.0
    assert row["docBalAmt"] == 100.0
