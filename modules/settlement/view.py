from PySide6.QtWidgets import (
    QWidget,
    QVBoxLayout,
    QHBoxLayout,
    QPushButton,
    QLabel,
)

from widgets.table_view import TableView
from utils.helpers import fmt_money


class SettlementDetailsView(QWidget):
    """
    Settlement entry screen:
      - Toolbar: Auto Alloc, Reset Alloc, Remove, Save
      - Totals: allocated, balance, unallocated, gain/loss, set-off net
      - Detail grid (allocation column editable)
    """

    def __init__(self, title: str = "", parent=None):
        super().__init__(parent)
        root = QVBoxLayout(self)

        if title:
            root.addWidget(QLabel(f"<b>{title}</b>"))

        # ---- Toolbar ------------------------------------------------------
        bar = QHBoxLayout()
        self.btn_auto_alloc = QPushButton("Auto Alloc")
        self.btn_auto_alloc.setToolTip("Auto allocate amounts")
        self.btn_reset_alloc = QPushButton("Reset Alloc")
        self.btn_reset_alloc.setToolTip("Reset all allocations")
        self.btn_remove = QPushButton("Remove")
        self.btn_save = QPushButton("Save")
        for b in (self.btn_auto_alloc, self.btn_reset_alloc, self.btn_remove, self.btn_save):
            bar.addWidget(b)
        bar.addStretch(1)
        root.addLayout(bar)

        # ---- Totals -------------------------------------------------------
        totals = QHBoxLayout()
        self.lbl_alloc_total = QLabel()
        self.lbl_balance = QLabel()
        self.lbl_unallocated = QLabel()
        self.lbl_gain_loss = QLabel()
        self.lbl_set_off = QLabel()
        for lbl in (
            self.lbl_alloc_total,
            self.lbl_balance,
            self.lbl_unallocated,
            self.lbl_gain_loss,
            self.lbl_set_off,
        ):
            totals.addWidget(lbl)
        totals.addStretch(1)
        root.addLayout(totals)

        # ---- Grid ---------------------------------------------------------
        self.table = TableView()
        self.table.setSortingEnabled(False)  # display order is the allocation order
        root.addWidget(self.table, 1)

        self.lbl_status = QLabel()
        self.lbl_status.setStyleSheet("color: #991B1B;")
        root.addWidget(self.lbl_status)

        self.set_allocated(False)

    def set_totals(self, header, set_off_total: float, places: int = 2) -> None:
        self.lbl_alloc_total.setText(f"Total Alloc: {fmt_money(header.alloc_tot_amt, places)}")
        self.lbl_balance.setText(f"Balance Amt: {fmt_money(header.bal_tot_amt, places)}")
        self.lbl_unallocated.setText(f"Unallocated: {fmt_money(header.un_alloc_tot_amt, places)}")
        self.lbl_gain_loss.setText(f"Gain/Loss: {fmt_money(header.exh_gain_loss, places)}")
        self.lbl_set_off.setText(f"SetOff Amt: {fmt_money(set_off_total, places)}")

    def set_allocated(self, allocated: bool) -> None:
        self.btn_reset_alloc.setEnabled(bool(allocated))

    def set_has_lines(self, has_lines: bool) -> None:
        self.btn_auto_alloc.setEnabled(bool(has_lines))
        self.btn_remove.setEnabled(bool(has_lines))

    def show_status(self, text: str) -> None:
        self.lbl_status.setText(text or "")
