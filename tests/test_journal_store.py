"""Tests for the SQLite journal store."""

import pytest

from tradejournal.journal.journal_models import JournalEntry, Trade
from tradejournal.journal.journal_store import JournalStore
from tradejournal.utils.exceptions import JournalEntryNotFoundError, TradeNotFoundError


def _trade(pnl, **fields):
    fields.setdefault("exit_date", "2024-01-02T15:00:00")
    return Trade(symbol="ES", pnl=pnl, **fields)


class TestTrades:
    """Trade CRUD scoped to a user"""

    def test_create_assigns_id_and_date(self, store):
        """The store assigns the id; the display date comes from the exit"""
        created = store.create_trade("user-1", _trade(120, session="London"))
        assert created.id
        assert created.date == "01/02/2024"
        assert created.session == "London"
        assert store.get_trade("user-1", created.id) == created

    def test_list_newest_first(self, store):
        """Trades are listed most recently created first"""
        first = store.create_trade("user-1", _trade(1))
        second = store.create_trade("user-1", _trade(2))
        assert [t.id for t in store.list_trades("user-1")] == [second.id, first.id]

    def test_trades_are_scoped_by_user(self, store):
        """Another user can neither see nor delete the trade"""
        created = store.create_trade("user-1", _trade(1))
        assert store.list_trades("user-2") == []
        assert store.get_trade("user-2", created.id) is None
        assert store.delete_trade("user-2", created.id) is False

    def test_update_merges_patch(self, store):
        """Patched fields change, the rest is kept"""
        created = store.create_trade("user-1", _trade(10, entry_model="Breakout"))
        updated = store.update_trade("user-1", created.id,
                                     {"pnl": -15, "exit_date": "2024-01-09T10:00:00"})
        assert updated.pnl == -15
        assert updated.entry_model == "Breakout"
        assert updated.date == "01/09/2024"
        assert store.get_trade("user-1", created.id).pnl == -15

    def test_update_missing_trade(self, store):
        """Updating an unknown trade raises a 404 error"""
        with pytest.raises(TradeNotFoundError) as exc:
            store.update_trade("user-1", "nope", {"pnl": 1})
        assert exc.value.status_code == 404

    def test_news_survive_storage(self, store):
        """News events round-trip through the JSON column"""
        news = [{"type": "red", "name": "CPI", "time": "08:30"}]
        created = store.create_trade("user-1", _trade(5, news=news))
        assert store.get_trade("user-1", created.id).news[0].name == "CPI"

    def test_delete_removes_linked_journal_entries(self, store):
        """Deleting a trade deletes the entries linked to it"""
        trade = store.create_trade("user-1", _trade(5))
        store.add_journal_entry("user-1", JournalEntry(title="linked", trade_id=trade.id))
        store.add_journal_entry("user-1", JournalEntry(title="loose"))

        assert store.delete_trade("user-1", trade.id) is True
        assert store.get_trade("user-1", trade.id) is None
        assert [e.title for e in store.list_journal_entries("user-1")] == ["loose"]

    def test_data_persists_across_instances(self, tmp_path):
        """A second store on the same file sees earlier writes"""
        path = str(tmp_path / "nested" / "journal.db")
        first = JournalStore(db_path=path)
        created = first.create_trade("user-1", _trade(42))
        first.close()

        second = JournalStore(db_path=path)
        assert second.get_trade("user-1", created.id).pnl == 42
        second.close()


class TestJournalEntries:
    """Journal entry CRUD"""

    def test_add_and_filter_by_trade(self, store):
        """Entries can be listed per linked trade"""
        store.add_journal_entry("user-1", JournalEntry(title="a", trade_id="t1",
                                                       screenshots=["s1.png"]))
        store.add_journal_entry("user-1", JournalEntry(title="b"))
        linked = store.list_journal_entries("user-1", trade_id="t1")
        assert [e.title for e in linked] == ["a"]
        assert linked[0].screenshots == ["s1.png"]

    def test_update_entry(self, store):
        """id and created_at cannot be patched"""
        entry = store.add_journal_entry("user-1", JournalEntry(title="draft"))
        updated = store.update_journal_entry("user-1", entry.id,
                                             {"recap": "done", "id": "x", "created_at": "y"})
        assert updated.id == entry.id
        assert updated.created_at == entry.created_at
        assert store.get_journal_entry("user-1", entry.id).recap == "done"

    def test_update_missing_entry(self, store):
        """Updating an unknown entry raises"""
        with pytest.raises(JournalEntryNotFoundError):
            store.update_journal_entry("user-1", "nope", {"title": "x"})

    def test_delete_entry(self, store):
        """Only the owner can delete an entry"""
        entry = store.add_journal_entry("user-1", JournalEntry(title="x"))
        assert store.delete_journal_entry("user-2", entry.id) is False
        assert store.delete_journal_entry("user-1", entry.id) is True
        assert store.list_journal_entries("user-1") == []
