from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, fields
from typing import Optional

from constants import SETTLEMENT_TYPES
from modules.settlement.lines import OutstandingDocumentLine, SettlementHeader

_log = logging.getLogger(__name__)


# Domain-level error the controller can surface directly (e.g., error box)
class DomainError(Exception):
    pass


@dataclass
class SettlementSummary:
    settlement_id: int
    settlement_type: str
    document_no: str
    tot_amt: float
    alloc_tot_amt: float
    un_alloc_tot_amt: float
    line_count: int
    updated_at: str | None


_HEADER_COLS = [
    f.name for f in fields(SettlementHeader) if f.name != "data_details"
]
_LINE_COLS = [f.name for f in fields(OutstandingDocumentLine)]


class SettlementsRepo:
    """
    Persistence for settlement documents (header + detail lines).

    - save() replaces the whole document: header row updated in place and
      lines rewritten, so item numbers stay exactly as the session had them.
    - No commit here; caller controls the transaction boundary.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _validate(header: SettlementHeader) -> None:
        if header.settlement_type not in SETTLEMENT_TYPES:
            raise DomainError(f"Unknown settlement type: {header.settlement_type!r}.")
        if not header.data_details:
            raise DomainError("A settlement needs at least one document line.")
        item_nos = header.item_nos()
        if len(set(item_nos)) != len(item_nos):
            raise DomainError("Item numbers must be unique within a settlement.")
        doc_ids = [ln.document_id for ln in header.data_details]
        if len(set(doc_ids)) != len(doc_ids):
            raise DomainError("A document can only be selected once per settlement.")

    def _insert_lines(self, settlement_id: int, header: SettlementHeader) -> None:
        cols = ", ".join(["settlement_id", *_LINE_COLS])
        marks = ", ".join("?" for _ in range(len(_LINE_COLS) + 1))
        self.conn.executemany(
            f"INSERT INTO settlement_lines ({cols}) VALUES ({marks})",
            [
                (settlement_id, *(getattr(ln, c) for c in _LINE_COLS))
                for ln in header.data_details
            ],
        )

    # ---- Queries ----------------------------------------------------------

    def get(self, settlement_id: int) -> SettlementHeader | None:
        h = self.conn.execute(
            f"SELECT {', '.join(_HEADER_COLS)} FROM settlement_headers WHERE settlement_id=?",
            (settlement_id,),
        ).fetchone()
        if h is None:
            return None
        rows = self.conn.execute(
            f"SELECT {', '.join(_LINE_COLS)} FROM settlement_lines "
            "WHERE settlement_id=? ORDER BY item_no",
            (settlement_id,),
        ).fetchall()
        lines = tuple(
            OutstandingDocumentLine(**dict(zip(_LINE_COLS, r))) for r in rows
        )
        return SettlementHeader(**dict(zip(_HEADER_COLS, h)), data_details=lines)

    def list_settlements(self, settlement_type: Optional[str] = None) -> list[SettlementSummary]:
        sql = (
            "SELECT h.settlement_id, h.settlement_type, h.document_no, h.tot_amt, "
            "       h.alloc_tot_amt, h.un_alloc_tot_amt, "
            "       (SELECT COUNT(*) FROM settlement_lines l "
            "         WHERE l.settlement_id = h.settlement_id) AS line_count, "
            "       h.updated_at "
            "FROM settlement_headers h "
        )
        params: tuple = ()
        if settlement_type is not None:
            sql += "WHERE h.settlement_type = ? "
            params = (settlement_type,)
        sql += "ORDER BY h.settlement_id DESC"
        rows = self.conn.execute(sql, params).fetchall()
        return [SettlementSummary(*r) for r in rows]

    # ---- Mutations --------------------------------------------------------

    def save(self, header: SettlementHeader, settlement_id: Optional[int] = None) -> int:
        """
        Insert a new settlement, or replace an existing one when
        settlement_id is given. Returns the settlement_id.
        """
        self._validate(header)
        values = [getattr(header, c) for c in _HEADER_COLS]

        if settlement_id is None:
            cols = ", ".join(_HEADER_COLS)
            marks = ", ".join("?" for _ in _HEADER_COLS)
            cur = self.conn.execute(
                f"INSERT INTO settlement_headers ({cols}) VALUES ({marks})", values
            )
            settlement_id = int(cur.lastrowid)
        else:
            sets = ", ".join(f"{c}=?" for c in _HEADER_COLS)
            cur = self.conn.execute(
                f"UPDATE settlement_headers SET {sets}, updated_at=CURRENT_TIMESTAMP "
                "WHERE settlement_id=?",
                (*values, settlement_id),
            )
            if cur.rowcount == 0:
                raise DomainError(f"Settlement #{settlement_id} does not exist.")
            self.conn.execute(
                "DELETE FROM settlement_lines WHERE settlement_id=?", (settlement_id,)
            )

        self._insert_lines(settlement_id, header)
        _log.info(
            "Saved %s settlement #%s with %d line(s)",
            header.settlement_type, settlement_id, len(header.data_details),
        )
        return settlement_id

    def delete(self, settlement_id: int) -> bool:
        cur = self.conn.execute(
            "DELETE FROM settlement_headers WHERE settlement_id=?", (settlement_id,)
        )
        return cur.rowcount > 0
