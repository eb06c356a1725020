"""Tests for the Trade / NewsEvent / JournalEntry records."""

import json
from datetime import datetime

import pytest

from tradejournal.journal.journal_models import (
    JournalEntry,
    NewsEvent,
    Trade,
    format_display_date,
    parse_timestamp,
    parse_trade_date,
)


class TestDateParsing:
    """Timestamp parsing and display dates"""

    def test_iso_with_zulu_becomes_naive_utc(self):
        """A trailing Z is read as UTC"""
        assert parse_timestamp("2024-01-02T14:30:00Z") == datetime(2024, 1, 2, 14, 30)

    def test_offset_is_converted_to_utc(self):
        """Offsets are converted and dropped"""
        assert parse_timestamp("2024-01-02T09:30:00-05:00") == datetime(2024, 1, 2, 14, 30)

    def test_display_format(self):
        """MM/DD/YYYY strings parse too"""
        assert parse_timestamp("01/15/2024") == datetime(2024, 1, 15)

    def test_unparseable(self):
        """Garbage and empty values give None"""
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None

    def test_trade_date_falls_back_to_now(self):
        """An unparseable trade date becomes the current time"""
        before = datetime.now()
        assert parse_trade_date("garbage") >= before

    def test_format_display_date(self):
        """ISO timestamps render as MM/DD/YYYY"""
        assert format_display_date("2024-03-07T10:00:00") == "03/07/2024"


class TestTrade:
    """In-memory trade records"""

    def test_defaults(self):
        """Missing P&L is 0 and the date comes from the exit"""
        trade = Trade(pnl=None, exit_date="2024-01-05T16:00:00")
        assert trade.pnl == 0.0
        assert trade.date == "01/05/2024"
        assert trade.news == []

    @pytest.mark.parametrize("pnl", [float("inf"), float("-inf"), float("nan"), "abc"])
    def test_non_numeric_pnl_becomes_zero(self, pnl):
        """P&L that is not a finite number is stored as 0"""
        assert Trade(pnl=pnl).pnl == 0.0

    def test_date_prefers_exit_then_entry(self):
        """Display date uses the exit date, else the entry date"""
        trade = Trade(entry_date="2024-01-04T09:00:00", exit_date="2024-01-05T09:00:00")
        assert trade.date == "01/05/2024"
        assert Trade(entry_date="2024-01-04T09:00:00").date == "01/04/2024"

    def test_news_dicts_become_events(self):
        """News dicts are turned into NewsEvent, unknown keys dropped"""
        trade = Trade(news=[{"type": "red", "name": "CPI", "time": "08:30", "extra": 1}])
        assert trade.news == [NewsEvent(type="red", name="CPI", time="08:30")]

    def test_to_dict_uses_iso_dates(self):
        """to_dict writes ISO timestamps that from_dict reads back"""
        trade = Trade(symbol="ES", pnl=10, entry_date=datetime(2024, 1, 2, 9, 30))
        d = trade.to_dict()
        assert d["entry_date"] == "2024-01-02T09:30:00"
        assert d["exit_date"] is None
        assert Trade.from_dict(d).entry_date == datetime(2024, 1, 2, 9, 30)

    def test_apply_patch_keeps_identity_and_rederives_date(self):
        """Patching never changes the id and follows new dates"""
        trade = Trade(id="t1", date="01/02/2024", pnl=5, exit_date="2024-01-02T10:00:00")
        patched = trade.apply_patch({"id": "other", "pnl": 50,
                                     "exit_date": "2024-01-09T10:00:00"})
        assert patched.id == "t1"
        assert patched.pnl == 50
        assert patched.date == "01/09/2024"
        assert trade.pnl == 5

    def test_apply_patch_without_dates_keeps_display_date(self):
        """Patching other fields leaves the display date alone"""
        trade = Trade(id="t1", date="01/02/2024", pnl=5)
        assert trade.apply_patch({"symbol": "NQ"}).date == "01/02/2024"


class TestTradeRecords:
    """Conversion to and from storage rows"""

    def test_to_record_flattens(self):
        """Side, price, total, notes and news JSON are derived"""
        trade = Trade(symbol="NQ", pnl=-25, trade_type="long", exit_price=17000.0,
                      mistakes_made="chased", lessons_learned="wait",
                      news=[NewsEvent(type="red", name="CPI", time="08:30")])
        record = trade.to_record("user-1")
        assert record["user_id"] == "user-1"
        assert record["side"] == "buy"
        assert record["price"] == 17000.0
        assert record["total"] == 25
        assert record["notes"] == "chased wait"
        assert json.loads(record["news"]) == [{"type": "red", "name": "CPI", "time": "08:30"}]

    def test_from_record_derives_date_from_created_at(self):
        """Rows without trade dates use the creation time"""
        trade = Trade.from_record({"id": "t1", "symbol": "ES", "pnl": None,
                                   "created_at": "2024-02-01T12:00:00"})
        assert trade.date == "02/01/2024"
        assert trade.pnl == 0.0

    def test_from_record_side_fallback(self):
        """Trade type falls back to the stored side"""
        assert Trade.from_record({"side": "buy"}).trade_type == "long"
        assert Trade.from_record({"side": "sell"}).trade_type == "short"

    def test_from_record_tolerates_bad_news_json(self):
        """Corrupt news JSON reads as no news"""
        trade = Trade.from_record({"id": "t1", "news": "{not json",
                                   "exit_date": "2024-01-02T10:00:00"})
        assert trade.news == []


class TestJournalEntry:
    """Journal entry records"""

    def test_defaults(self):
        """New entries get an id, no screenshots and today's date"""
        entry = JournalEntry(title="Monday recap")
        assert entry.id
        assert entry.screenshots == []
        assert datetime.strptime(entry.date, "%m/%d/%Y")

    def test_from_dict_ignores_unknown_keys(self):
        """Storage-only keys such as user_id are dropped"""
        entry = JournalEntry.from_dict({"title": "x", "user_id": "u", "trade_id": "t1"})
        assert entry.trade_id == "t1"
