import pytest
from PySide6.QtCore import Qt

from modules.settlement.model import SettlementDetailsModel
from modules.settlement.session import AllocationSession


@pytest.fixture()
def model(qapp, ar, dec, record):
    s = AllocationSession(ar, dec)
    s.add_selected_transactions([record("A", 100), record("B", 200)])
    s.set_header_amounts(tot_amt=250)
    return SettlementDetailsModel(s)


def test_shape_and_headers(model):
    assert model.rowCount() == 2
    assert model.columnCount() == len(SettlementDetailsModel.HEADERS)
    assert model.headerData(SettlementDetailsModel.ALLOC_COL, Qt.Horizontal) == "Alloc Amt"
    assert model.data(model.index(0, 1)) == "INV-A"
    assert model.data(model.index(1, 6)) == "200.00"


def test_only_allocation_column_is_editable(model):
    assert model.flags(model.index(0, SettlementDetailsModel.ALLOC_COL)) & Qt.ItemIsEditable
    assert not model.flags(model.index(0, 6)) & Qt.ItemIsEditable
    assert model.setData(model.index(0, 6), "10") is False


def test_edit_is_clamped_and_signals(qtbot, model):
    idx = model.index(0, SettlementDetailsModel.ALLOC_COL)
    with qtbot.waitSignals([model.dataChanged, model.totals_changed], timeout=1000):
        assert model.setData(idx, "1,500.00") is True

    assert model.data(idx) == "100.00"
    assert model.data(idx, Qt.EditRole) == 100.0
    assert model.session.header.alloc_tot_amt == 100.0


def test_cap_emits_warning(qtbot, model):
    model.setData(model.index(1, SettlementDetailsModel.ALLOC_COL), 200)
    with qtbot.waitSignal(model.warning, timeout=1000) as blocker:
        model.setData(model.index(0, SettlementDetailsModel.ALLOC_COL), 100)

    assert "50.00" in blocker.args[0]
    assert model.line_at(0).alloc_amt == 50.0


def test_unparsable_edit_is_rejected(qtbot, model):
    idx = model.index(0, SettlementDetailsModel.ALLOC_COL)
    with qtbot.waitSignal(model.warning, timeout=1000) as blocker:
        assert model.setData(idx, "abc") is False
    assert "abc" in blocker.args[0]
    assert model.line_at(0).alloc_amt == 0.0


def test_refresh_after_auto_allocate(qtbot, model):
    model.session.auto_allocate()
    with qtbot.waitSignal(model.modelReset, timeout=1000):
        model.refresh()
    assert model.data(model.index(1, SettlementDetailsModel.ALLOC_COL)) == "150.00"
