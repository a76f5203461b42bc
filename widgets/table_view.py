from PySide6.QtWidgets import QAbstractItemView, QTableView

class TableView(QTableView):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setSortingEnabled(True)
        self.setAlternatingRowColors(True)
        self.setSelectionBehavior(QTableView.SelectRows)
        self.setSelectionMode(QTableView.ExtendedSelection)
        self.setEditTriggers(
            QAbstractItemView.DoubleClicked
            | QAbstractItemView.EditKeyPressed
            | QAbstractItemView.AnyKeyPressed
        )
        self.horizontalHeader().setStretchLastSection(True)

    def selected_rows(self) -> list[int]:
        sm = self.selectionModel()
        if sm is None:
            return []
        return sorted({i.row() for i in sm.selectedRows()})
