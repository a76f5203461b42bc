import sqlite3
from dataclasses import replace

import pytest

from database import get_connection
from database.repositories.settlements_repo import DomainError, SettlementsRepo
from database.versioning import get_current_version
from constants import SCHEMA_VERSION
from modules.settlement.engine import auto_allocate


@pytest.fixture()
def repo(conn):
    return SettlementsRepo(conn)


@pytest.fixture()
def allocated(make_header, ar, dec):
    return auto_allocate(make_header(ar, [1000, -300], tot_amt=500), ar, dec).header


def _line_count(conn, sid):
    return conn.execute(
        "SELECT COUNT(*) FROM settlement_lines WHERE settlement_id=?", (sid,)
    ).fetchone()[0]


def test_save_and_get_round_trip(repo, allocated):
    sid = repo.save(allocated)
    loaded = repo.get(sid)

    assert loaded == allocated
    assert [ln.alloc_amt for ln in loaded.data_details] == [800.0, -300.0]


def test_get_missing_returns_none(repo):
    assert repo.get(12345) is None


def test_save_existing_replaces_lines(conn, repo, allocated, ar, dec):
    sid = repo.save(allocated)
    fewer = allocated.with_lines(allocated.data_details[:1])
    assert repo.save(fewer, settlement_id=sid) == sid

    assert _line_count(conn, sid) == 1
    assert repo.get(sid).item_nos() == [1]


def test_save_unknown_id_raises(repo, allocated):
    with pytest.raises(DomainError):
        repo.save(allocated, settlement_id=999)


def test_list_settlements_filters_by_type(repo, allocated, make_header, ap):
    ar_id = repo.save(allocated)
    ap_id = repo.save(make_header(ap, [100, -50]))

    assert [s.settlement_id for s in repo.list_settlements()] == [ap_id, ar_id]
    rows = repo.list_settlements("ar_receipt")
    assert [s.settlement_id for s in rows] == [ar_id]
    assert rows[0].line_count == 2
    assert rows[0].tot_amt == 500.0


def test_delete_cascades_to_lines(conn, repo, allocated):
    sid = repo.save(allocated)
    assert repo.delete(sid) is True
    assert _line_count(conn, sid) == 0
    assert repo.delete(sid) is False


@pytest.mark.parametrize("problem", ["no_lines", "dup_item", "dup_doc", "bad_type"])
def test_invalid_documents_raise_domain_error(repo, allocated, problem):
    lines = allocated.data_details
    bad = {
        "no_lines": allocated.with_lines(()),
        "dup_item": allocated.with_lines((lines[0], replace(lines[1], item_no=1))),
        "dup_doc": allocated.with_lines((lines[0], replace(lines[1], document_id=lines[0].document_id))),
        "bad_type": replace(allocated, settlement_type="gl_journal"),
    }[problem]
    with pytest.raises(DomainError):
        repo.save(bad)


def test_allocation_against_balance_sign_is_refused(repo, allocated):
    lines = allocated.data_details
    broken = allocated.with_lines((replace(lines[0], alloc_amt=-5.0), lines[1]))
    with pytest.raises(sqlite3.IntegrityError):
        repo.save(broken)


def test_get_connection_applies_schema(tmp_path):
    con = get_connection(tmp_path / "data" / "settlements.db")
    try:
        assert get_current_version(con) == SCHEMA_VERSION
        names = {r[0] for r in con.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        assert {"settlement_headers", "settlement_lines"} <= names
    finally:
        con.close()
