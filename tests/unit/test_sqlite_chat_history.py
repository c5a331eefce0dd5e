"""Unit tests for SQLiteChatHistoryAdapter."""

import sqlite3

from docchat.adapters.outbound.sqlite_chat_history import SQLiteChatHistoryAdapter


def test_init_db(tmp_path):
    """Test database initialization and schema creation."""
    db_file = tmp_path / "history.db"
    _adapter = SQLiteChatHistoryAdapter(db_file)  # noqa: F841 - needed to create DB

    with sqlite3.connect(db_file) as conn:
        cursor = conn.cursor()
        cursor.execute("SELECT name FROM sqlite_master WHERE type='table' AND name='chat_history'")
        result = cursor.fetchone()
        assert result is not None
        assert result[0] == "chat_history"


def test_record_and_list(tmp_path):
    adapter = SQLiteChatHistoryAdapter(tmp_path / "history.db")

    pk = adapter.record("u1", "When are reviews?", "Twice a year.", ["Evaluation Policy"])
    adapter.record("u1", "And bonuses?", "In June.", [])
    adapter.record("u2", "Other user", "Hidden.", [])

    page = adapter.list_history("u1")

    assert pk > 0
    assert page.total == 2
    assert [e.message for e in page.entries] == ["And bonuses?", "When are reviews?"]
    assert page.entries[1].sources == ["Evaluation Policy"]
    assert not page.has_more


def test_pagination(tmp_path):
    adapter = SQLiteChatHistoryAdapter(tmp_path / "history.db")
    for i in range(5):
        adapter.record("u1", f"m{i}", f"r{i}", [])

    page = adapter.list_history("u1", limit=2, offset=1)

    assert [e.message for e in page.entries] == ["m3", "m2"]
    assert page.has_more


def test_keeps_most_recent_entries_per_user(tmp_path):
    adapter = SQLiteChatHistoryAdapter(tmp_path / "history.db", max_entries=3)
    for i in range(5):
        adapter.record("u1", f"m{i}", "r", [])
    adapter.record("u2", "other", "r", [])

    page = adapter.list_history("u1")

    assert page.total == 3
    assert [e.message for e in page.entries] == ["m4", "m3", "m2"]
    assert adapter.list_history("u2").total == 1


def test_unicode_sources_round_trip(tmp_path):
    adapter = SQLiteChatHistoryAdapter(tmp_path / "history.db")
    adapter.record("u1", "規定は？", "回答です。", ["会社規定"])

    entry = adapter.list_history("u1").entries[0]

    assert entry.sources == ["会社規定"]
    assert entry.message == "規定は？"
