from pathlib import Path
import logging
import sqlite3
import sys

_log = logging.getLogger(__name__)

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== SETTLEMENTS ======================== */

/* -------- header: one AP set-off or AR receipt document -------- */
CREATE TABLE IF NOT EXISTS settlement_headers (
    settlement_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    settlement_type        TEXT NOT NULL CHECK (settlement_type IN ('ap_docsetoff','ar_receipt')),
    document_id            TEXT NOT NULL DEFAULT '0',
    document_no            TEXT NOT NULL DEFAULT '',
    tot_amt                REAL NOT NULL DEFAULT 0,
    tot_local_amt          REAL NOT NULL DEFAULT 0,
    exh_rate               REAL NOT NULL DEFAULT 1 CHECK (exh_rate > 0),
    pay_exh_rate           REAL NOT NULL DEFAULT 1,
    bal_tot_amt            REAL NOT NULL DEFAULT 0,
    alloc_tot_amt          REAL NOT NULL DEFAULT 0,
    alloc_tot_local_amt    REAL NOT NULL DEFAULT 0,
    un_alloc_tot_amt       REAL NOT NULL DEFAULT 0,
    un_alloc_tot_local_amt REAL NOT NULL DEFAULT 0,
    exh_gain_loss          REAL NOT NULL DEFAULT 0,
    created_at             TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    updated_at             TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_settlement_headers_type
ON settlement_headers(settlement_type);

/* -------- lines: outstanding documents and their allocations -------- */
CREATE TABLE IF NOT EXISTS settlement_lines (
    line_id             INTEGER PRIMARY KEY AUTOINCREMENT,
    settlement_id       INTEGER NOT NULL,
    item_no             INTEGER NOT NULL CHECK (item_no > 0),
    document_id         TEXT NOT NULL,
    document_no         TEXT NOT NULL DEFAULT '',
    reference_no        TEXT NOT NULL DEFAULT '',
    transaction_id      INTEGER NOT NULL DEFAULT 0,
    doc_currency_id     INTEGER NOT NULL DEFAULT 0,
    doc_currency_code   TEXT NOT NULL DEFAULT '',
    doc_exh_rate        REAL NOT NULL DEFAULT 1,
    doc_account_date    DATE,
    doc_due_date        DATE,
    doc_tot_amt         REAL NOT NULL DEFAULT 0,
    doc_tot_local_amt   REAL NOT NULL DEFAULT 0,
    doc_bal_amt         REAL NOT NULL DEFAULT 0,
    doc_bal_local_amt   REAL NOT NULL DEFAULT 0,
    alloc_amt           REAL NOT NULL DEFAULT 0,
    alloc_local_amt     REAL NOT NULL DEFAULT 0,
    doc_alloc_amt       REAL NOT NULL DEFAULT 0,
    doc_alloc_local_amt REAL NOT NULL DEFAULT 0,
    cent_diff           REAL NOT NULL DEFAULT 0,
    exh_gain_loss       REAL NOT NULL DEFAULT 0,
    edit_version        INTEGER NOT NULL DEFAULT 0,
    UNIQUE (settlement_id, item_no),
    UNIQUE (settlement_id, document_id),
    FOREIGN KEY (settlement_id) REFERENCES settlement_headers(settlement_id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_settlement_lines_settlement
ON settlement_lines(settlement_id);

/* allocation never crosses zero against the balance */
DROP TRIGGER IF EXISTS trg_settlement_lines_alloc_sign;
CREATE TRIGGER trg_settlement_lines_alloc_sign
BEFORE INSERT ON settlement_lines
FOR EACH ROW
WHEN NEW.alloc_amt <> 0 AND (NEW.alloc_amt > 0) <> (NEW.doc_bal_amt > 0)
BEGIN
    SELECT RAISE(ABORT, 'allocation sign must match the document balance');
END;
"""


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply the (idempotent) schema on an open connection."""
    conn.executescript(SQL)


def init_schema(db_path: Path | str = "settlements.db") -> None:
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    with sqlite3.connect(db_path) as conn:
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        apply_schema(conn)
        conn.commit()
    _log.info("DB schema applied to %s", db_path)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else Path(__file__).resolve().parents[1] / "data" / "settlements.db"
    init_schema(target)
