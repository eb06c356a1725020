"""
Trade Journal Storage
=====================

  journal_models.py - Trade, NewsEvent and JournalEntry records
  journal_store.py  - SQLite-backed per-user storage
"""

from tradejournal.journal.journal_models import (
    Trade,
    NewsEvent,
    JournalEntry,
    TradeType,
    TradingSession,
    OrderType,
    NewsImpact,
)

from tradejournal.journal.journal_store import JournalStore

__all__ = [
    "Trade", "NewsEvent", "JournalEntry",
    "TradeType", "TradingSession", "OrderType", "NewsImpact",
    "JournalStore",
]
