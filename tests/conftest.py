"""
Shared fixtures for the trade journal tests.

`make_trade` builds in-memory Trade records with sensible defaults so each
test only spells out the fields it cares about. Storage-backed fixtures use
a per-test SQLite file (the store keeps one connection per thread, so an
in-memory database would not be visible to the TestClient worker threads).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Callable

import pytest

from tradejournal.api.service import JournalService, UserContext
from tradejournal.journal.journal_models import Trade
from tradejournal.journal.journal_store import JournalStore


# ─────────────────────────────────────────────────────────
# Trade factories
# ─────────────────────────────────────────────────────────

@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    def _make(pnl: float = 0.0, date: str = "01/02/2024", **fields: Any) -> Trade:
        fields.setdefault("symbol", "ES")
        return Trade(pnl=pnl, date=date, **fields)
    return _make


@pytest.fixture
def sample_trades(make_trade) -> list[Trade]:
    """Five trades over four days (Tue 01/02/2024 .. Fri 01/05/2024)."""
    return [
        make_trade(100, "01/02/2024", session="London",
                   entry_date=datetime(2024, 1, 2, 9, 30), exit_date=datetime(2024, 1, 2, 11, 30),
                   reward_to_risk_ratio=2.0),
        make_trade(-50, "01/02/2024", session="NY AM",
                   entry_date=datetime(2024, 1, 2, 14, 0), exit_date=datetime(2024, 1, 2, 15, 0),
                   reward_to_risk_ratio=1.0),
        make_trade(200, "01/03/2024", session="London", reward_to_risk_ratio=3.0),
        make_trade(0, "01/04/2024"),
        make_trade(-100, "01/05/2024", session="London"),
    ]


# ─────────────────────────────────────────────────────────
# Storage / service
# ─────────────────────────────────────────────────────────

@pytest.fixture
def store(tmp_path):
    s = JournalStore(db_path=str(tmp_path / "journal.db"))
    yield s
    s.close()


@pytest.fixture
def service(store) -> JournalService:
    return JournalService(store, trading_days=252)


@pytest.fixture
def ctx() -> UserContext:
    return UserContext(user_id="user-1", email="trader@example.com")


@pytest.fixture
def other_ctx() -> UserContext:
    return UserContext(user_id="user-2")
