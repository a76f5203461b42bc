from __future__ import annotations

import logging
import sqlite3
from typing import Any, Dict, Iterable, Optional

from PySide6.QtWidgets import QWidget

from modules.base_module import BaseModule
from database.repositories.settlements_repo import DomainError, SettlementsRepo
from utils.ui_helpers import confirm, error, info
from .calculations import DecimalSettings
from .engine import AllocationResult
from .model import SettlementDetailsModel
from .profiles import get_profile
from .session import AllocationSession
from .view import SettlementDetailsView

_log = logging.getLogger(__name__)


class SettlementController(BaseModule):
    """
    One settlement entry screen (AP set-off or AR receipt).

    Key behavior:
      - Auto Alloc / Reset Alloc / Remove act on the whole document through
        the AllocationSession; the grid is reloaded afterwards.
      - Grid edits go through SettlementDetailsModel.setData (clamped there).
      - Warnings are shown in the status line, never as modal dialogs.
      - Save persists via SettlementsRepo; DomainError is surfaced as an error box.
    """

    def __init__(
        self,
        conn: sqlite3.Connection,
        settlement_type: str,
        decimals: Optional[DecimalSettings] = None,
    ):
        super().__init__()
        self.conn = conn
        self.profile = get_profile(settlement_type)
        self.title = self.profile.label
        self.session = AllocationSession(self.profile, decimals)
        self.repo = SettlementsRepo(conn)
        self.settlement_id: Optional[int] = None

        self.view = SettlementDetailsView(title=self.profile.label)
        self.model = SettlementDetailsModel(self.session, self.view)
        self.view.table.setModel(self.model)
        self._wire()
        self._sync()

    # ------------------------------------------------------------------ #
    # BaseModule API
    # ------------------------------------------------------------------ #

    def get_widget(self) -> QWidget:
        return self.view

    # ------------------------------------------------------------------ #
    # Wiring
    # ------------------------------------------------------------------ #

    def _wire(self):
        self.view.btn_auto_alloc.clicked.connect(self._on_auto_alloc)
        self.view.btn_reset_alloc.clicked.connect(self._on_reset_alloc)
        self.view.btn_remove.clicked.connect(self._on_remove)
        self.view.btn_save.clicked.connect(self._on_save)
        self.model.warning.connect(self._show_warning)
        self.model.totals_changed.connect(self._sync)

    def _sync(self):
        self.view.set_totals(
            self.session.header, self.session.set_off_total, self.session.decimals.amt_dec
        )
        self.view.set_allocated(self.session.is_allocated)
        self.view.set_has_lines(bool(self.session.lines))

    def _show_warning(self, text: str):
        self.view.show_status(text)

    def _after(self, result: AllocationResult) -> AllocationResult:
        self.view.show_status("\n".join(result.warnings))
        self.model.refresh()
        return result

    # ------------------------------------------------------------------ #
    # Form / lookup entry points
    # ------------------------------------------------------------------ #

    def new_document(self, **header_fields: Any) -> AllocationResult:
        self.settlement_id = None
        return self._after(self.session.new(**header_fields))

    def set_header_amounts(self, **amounts: Any) -> AllocationResult:
        return self._after(self.session.set_header_amounts(**amounts))

    def add_selected_transactions(self, records: Iterable[Dict[str, Any]]) -> AllocationResult:
        return self._after(self.session.add_selected_transactions(records))

    def open(self, settlement_id: int) -> bool:
        header = self.repo.get(settlement_id)
        if header is None:
            error(self.view, "Settlement", f"Settlement #{settlement_id} was not found.")
            return False
        self.session.load(header)
        self.settlement_id = settlement_id
        self._after(AllocationResult(header))
        return True

    # ------------------------------------------------------------------ #
    # Toolbar actions
    # ------------------------------------------------------------------ #

    def _on_auto_alloc(self):
        self._after(self.session.auto_allocate())

    def _on_reset_alloc(self):
        self._after(self.session.reset_allocation())

    def _on_remove(self):
        rows = self.view.table.selected_rows()
        if not rows:
            self.view.show_status("Select line(s) to remove.")
            return
        if self.session.is_allocated and not confirm(
            self.view,
            "Remove lines",
            "Removing lines clears every allocation on this settlement. Continue?",
        ):
            return
        item_nos = [self.model.line_at(r).item_no for r in rows]
        self._after(self.session.remove_lines(item_nos))

    def _on_save(self):
        try:
            with self.conn:
                self.settlement_id = self.repo.save(
                    self.session.header, settlement_id=self.settlement_id
                )
        except DomainError as e:
            _log.warning("Save rejected: %s", e)
            error(self.view, "Cannot save", str(e))
            return
        info(self.view, "Saved", f"Settlement #{self.settlement_id} saved.")
