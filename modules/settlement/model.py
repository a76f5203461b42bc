from __future__ import annotations

from PySide6.QtCore import QAbstractTableModel, QModelIndex, Qt, Signal

from utils.helpers import fmt_money
from utils.validators import try_parse_float
from .session import AllocationSession


class SettlementDetailsModel(QAbstractTableModel):
    """
    Detail grid over an AllocationSession. Only the allocation column is
    editable; edits go through AllocationSession.edit_cell(), which clamps
    the value before the engine recalculates the row and the header.
    """

    HEADERS = [
        "#", "Document No", "Reference", "Curr", "Doc Rate", "Doc Total",
        "Balance", "Alloc Amt", "Alloc Local", "Doc Alloc Local", "Cent Diff", "Gain/Loss",
    ]
    ALLOC_COL = 7
    _NUMERIC_FROM = 4

    warning = Signal(str)
    totals_changed = Signal()

    def __init__(self, session: AllocationSession, parent=None):
        super().__init__(parent)
        self._session = session

    @property
    def session(self) -> AllocationSession:
        return self._session

    def rowCount(self, parent=QModelIndex()):
        if parent.isValid():
            return 0
        return len(self._session.lines)

    def columnCount(self, parent=QModelIndex()):
        return len(self.HEADERS)

    def line_at(self, row: int):
        return self._session.lines[row]

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        ln = self._session.lines[index.row()]
        c = index.column()
        dec = self._session.decimals

        if role == Qt.EditRole and c == self.ALLOC_COL:
            return ln.alloc_amt
        if role == Qt.TextAlignmentRole and c >= self._NUMERIC_FROM:
            return Qt.AlignRight | Qt.AlignVCenter
        if role in (Qt.DisplayRole, Qt.EditRole):
            mapping = [
                ln.item_no,
                ln.document_no,
                ln.reference_no,
                ln.doc_currency_code,
                f"{ln.doc_exh_rate:.{dec.exh_rate_dec}f}",
                fmt_money(ln.doc_tot_amt, dec.amt_dec),
                fmt_money(ln.doc_bal_amt, dec.amt_dec),
                fmt_money(ln.alloc_amt, dec.amt_dec),
                fmt_money(ln.alloc_local_amt, dec.loc_amt_dec),
                fmt_money(ln.doc_alloc_local_amt, dec.loc_amt_dec),
                fmt_money(ln.cent_diff, dec.loc_amt_dec),
                fmt_money(ln.exh_gain_loss, dec.loc_amt_dec),
            ]
            return mapping[c]
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.HEADERS[section]
        return super().headerData(section, orientation, role)

    def flags(self, index):
        if not index.isValid():
            return Qt.NoItemFlags
        f = Qt.ItemIsEnabled | Qt.ItemIsSelectable
        if index.column() == self.ALLOC_COL:
            f |= Qt.ItemIsEditable
        return f

    def setData(self, index, value, role=Qt.EditRole):
        if role != Qt.EditRole or not index.isValid() or index.column() != self.ALLOC_COL:
            return False
        ok, amount = try_parse_float(value)
        if not ok:
            self.warning.emit(f"'{value}' is not a valid amount.")
            return False

        item_no = self.line_at(index.row()).item_no
        result = self._session.edit_cell(item_no, "alloc_amt", amount)
        for w in result.warnings:
            self.warning.emit(w)

        row = index.row()
        self.dataChanged.emit(
            self.index(row, 0), self.index(row, self.columnCount() - 1), [Qt.DisplayRole, Qt.EditRole]
        )
        self.totals_changed.emit()
        return True

    def refresh(self):
        """Reload after a whole-document action (auto-allocate, reset, add, remove)."""
        self.beginResetModel()
        self.endResetModel()
        self.totals_changed.emit()
