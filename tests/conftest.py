# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - pytest-qt owns QApplication (use qapp/qtbot fixtures)
# - Each test gets its own in-memory SQLite DB with the schema applied
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON
# - Provide decimal settings, profiles and sample outstanding records
# - Silence benign Qt signal warnings
# ---------------------------------------------------------------------

from __future__ import annotations

import re
import sqlite3

import pytest
from PySide6 import QtCore

from database.schema import apply_schema
from modules.settlement.calculations import DecimalSettings
from modules.settlement.engine import append_lines, new_settlement
from modules.settlement.profiles import AP_DOCSETOFF, AR_RECEIPT


# ---------- Qt: let pytest-qt own the app ----------
@pytest.fixture(scope="session")
def app(qapp):  # alias to match code that expects an `app` fixture
    return qapp


# ---------- Silence benign Qt warnings ----------
_BENIGN_QT_PATTERNS = [
    r"^QObject::connect: .* already connected",
    r"^QObject::disconnect: Unexpected null parameter",
    r"^QBasicTimer::stop: Failed\. Platform timer not running\.",
]

@pytest.fixture(autouse=True, scope="session")
def _silence_benign_qt():
    """Filter common harmless Qt messages during tests."""
    rx = [re.compile(p) for p in _BENIGN_QT_PATTERNS]

    def handler(msg_type, context, message):
        text = str(message)
        if any(r.search(text) for r in rx):
            return
        print(text)

    original = QtCore.qInstallMessageHandler(handler)
    try:
        yield
    finally:
        QtCore.qInstallMessageHandler(original)


# ---------- Per-test in-memory connection ----------
@pytest.fixture()
def conn():
    """Fresh schema per test; rolled back and closed afterwards."""
    con = sqlite3.connect(":memory:")
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys=ON;")
    apply_schema(con)
    try:
        yield con
        con.rollback()
    finally:
        con.close()


# ---------- Engine fixtures ----------
@pytest.fixture()
def dec() -> DecimalSettings:
    return DecimalSettings(amt_dec=2, loc_amt_dec=2, exh_rate_dec=6)


def outstanding(doc_id: str, bal: float, *, tot: float | None = None, rate: float = 1.0, **extra) -> dict:
    """Lookup-style record as returned by the outstanding-transaction search."""
    rec = {
        "documentId": doc_id,
        "documentNo": f"INV-{doc_id}",
        "referenceNo": f"REF-{doc_id}",
        "currencyCode": "USD",
        "exhRate": rate,
        "totAmt": bal if tot is None else tot,
        "balAmt": bal,
    }
    rec.update(extra)
    return rec


def build(profile, balances, dec, *, tot_amt=0.0, exh_rate=1.0, rates=None):
    """Header with one line per balance, unallocated."""
    rates = rates or [1.0] * len(balances)
    header = new_settlement(profile, tot_amt=tot_amt, tot_local_amt=tot_amt * exh_rate, exh_rate=exh_rate)
    records = [outstanding(str(100 + i), b, rate=r) for i, (b, r) in enumerate(zip(balances, rates))]
    return append_lines(header, records, profile, dec).header


@pytest.fixture()
def ap():
    return AP_DOCSETOFF


@pytest.fixture()
def ar():
    return AR_RECEIPT


@pytest.fixture()
def record():
    return outstanding


@pytest.fixture()
def make_header(dec):
    def _make(profile, balances, **kw):
        return build(profile, balances, dec, **kw)
    return _make
