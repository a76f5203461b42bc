from PySide6.QtWidgets import (
    QApplication,
    QMainWindow,
    QWidget,
    QHBoxLayout,
    QListWidget,
    QListWidgetItem,
    QStackedWidget,
    QSizePolicy,
)
from PySide6.QtCore import Qt
import sys

from config import LOG_PATH
from constants import APP_NAME, SETTLEMENT_AP_DOCSETOFF, SETTLEMENT_AR_RECEIPT
from database import get_connection
from modules.base_module import BaseModule
from modules.settlement.controller import SettlementController
from utils.loggers import get_logger


class MainWindow(QMainWindow):
    def __init__(self, conn):
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.setWindowFlag(Qt.WindowMinimizeButtonHint, True)
        self.setWindowFlag(Qt.WindowMaximizeButtonHint, True)
        self.setMinimumSize(820, 520)

        self.conn = conn

        # ---- Central layout: left nav + stacked pages ----
        central = QWidget(self)
        layout = QHBoxLayout(central)
        self.setCentralWidget(central)

        self.nav = QListWidget()
        self.nav.setFixedWidth(120)
        self.nav.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Expanding)
        self.stack = QStackedWidget()
        layout.addWidget(self.nav)
        layout.addWidget(self.stack, 1)

        self.modules: list[tuple[str, BaseModule]] = []
        self.nav.currentRowChanged.connect(self.stack.setCurrentIndex)

        for settlement_type in (SETTLEMENT_AP_DOCSETOFF, SETTLEMENT_AR_RECEIPT):
            self.add_module(SettlementController(conn, settlement_type))
        self.nav.setCurrentRow(0)

    def add_module(self, module: BaseModule):
        page = module.get_widget()
        self.nav.addItem(QListWidgetItem(module.title))
        self.stack.addWidget(page)
        self.modules.append((module.title, module))


def main():
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    app.setApplicationName(APP_NAME)

    for name in ("settlement", "modules", "database"):
        get_logger(name, log_file=LOG_PATH)
    log = get_logger("settlement")

    conn = get_connection()
    log.info("Database ready at %s", conn.execute("PRAGMA database_list").fetchone()[2])

    win = MainWindow(conn)
    win.resize(1100, 640)
    win.show()
    try:
        sys.exit(app.exec())
    finally:
        conn.close()


if __name__ == "__main__":
    main()
