"""
Journal Storage Engine - SQLite-backed trade and journal storage
================================================================

Tables:
  trades           - one row per logged trade, scoped by user_id
  journal_entries  - written recaps, optionally linked to a trade

Every read and write is scoped to a user. Deleting a trade removes the
journal entries linked to it in the same transaction.
"""

from __future__ import annotations
import json
import os
import sqlite3
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Optional, List, Dict, Any, Iterator

from tradejournal.journal.journal_models import JournalEntry, Trade
from tradejournal.utils.exceptions import (
    JournalEntryNotFoundError,
    StorageError,
    TradeNotFoundError,
)
from tradejournal.utils.logger import get_logger

logger = get_logger(__name__)

_TRADE_COLUMNS = (
    "user_id", "symbol", "side", "quantity", "price", "fee", "total", "status",
    "notes", "pnl", "entry_date", "exit_date", "trade_type", "session",
    "timeframe", "entry_price", "exit_price", "stop_loss", "take_profit",
    "order_type", "risk_per_trade", "reward_to_risk_ratio", "entry_model",
    "news", "mistakes_made", "lessons_learned", "trade_rating",
)


class JournalStore:
    """
    SQLite trade + journal store.
    One connection per thread; safe to share across FastAPI worker threads.
    """

    def __init__(self, db_path: str = "data/journal.db"):
        self._db_path = db_path
        os.makedirs(os.path.dirname(db_path) or ".", exist_ok=True)
        self._local = threading.local()
        self._init_db()
        logger.info("journal_store_initialized", db_path=db_path)

    def _get_conn(self) -> sqlite3.Connection:
        if not hasattr(self._local, "conn") or self._local.conn is None:
            self._local.conn = sqlite3.connect(self._db_path, timeout=10)
            self._local.conn.row_factory = sqlite3.Row
            self._local.conn.execute("PRAGMA journal_mode=WAL")
            self._local.conn.execute("PRAGMA synchronous=NORMAL")
        return self._local.conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._get_conn()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("journal_store_error", error=str(e))
            raise StorageError(str(e)) from e

    def _init_db(self):
        with self._transaction() as conn:
            conn.executescript("""
                CREATE TABLE IF NOT EXISTS trades (
                    id                   TEXT PRIMARY KEY,
                    user_id              TEXT NOT NULL,
                    symbol               TEXT DEFAULT '',
                    side                 TEXT DEFAULT 'buy',
                    quantity             REAL DEFAULT 1,
                    price                REAL DEFAULT 0,
                    fee                  REAL DEFAULT 0,
                    total                REAL DEFAULT 0,
                    status               TEXT DEFAULT 'closed',
                    notes                TEXT,
                    created_at           TEXT DEFAULT '',
                    updated_at           TEXT DEFAULT '',
                    pnl                  REAL,
                    entry_date           TEXT,
                    exit_date            TEXT,
                    trade_type           TEXT,
                    session              TEXT,
                    timeframe            TEXT,
                    entry_price          REAL,
                    exit_price           REAL,
                    stop_loss            REAL,
                    take_profit          REAL,
                    order_type           TEXT,
                    risk_per_trade       REAL,
                    reward_to_risk_ratio REAL,
                    entry_model          TEXT,
                    news                 TEXT,
                    mistakes_made        TEXT,
                    lessons_learned      TEXT,
                    trade_rating         INTEGER
                );

                CREATE TABLE IF NOT EXISTS journal_entries (
                    id          TEXT PRIMARY KEY,
                    user_id     TEXT NOT NULL,
                    trade_id    TEXT,
                    title       TEXT DEFAULT '',
                    recap       TEXT DEFAULT '',
                    thumbnail   TEXT,
                    screenshots TEXT DEFAULT '[]',
                    date        TEXT DEFAULT '',
                    created_at  TEXT DEFAULT ''
                );

                CREATE INDEX IF NOT EXISTS idx_trades_user ON trades(user_id);
                CREATE INDEX IF NOT EXISTS idx_trades_created ON trades(created_at);
                CREATE INDEX IF NOT EXISTS idx_je_user ON journal_entries(user_id);
                CREATE INDEX IF NOT EXISTS idx_je_trade ON journal_entries(trade_id);
            """)

    def close(self):
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            conn.close()
            self._local.conn = None

    # ─── TRADES ─────────────────────────────────────────────────

    def list_trades(self, user_id: str) -> List[Trade]:
        """All trades of a user, most recently created first."""
        conn = self._get_conn()
        rows = conn.execute(
            "SELECT * FROM trades WHERE user_id = ? ORDER BY created_at DESC, rowid DESC",
            (user_id,)).fetchall()
        return [Trade.from_record(dict(r)) for r in rows]

    def get_trade(self, user_id: str, trade_id: str) -> Optional[Trade]:
        row = self._get_trade_row(user_id, trade_id)
        return Trade.from_record(row) if row else None

    def _get_trade_row(self, user_id: str, trade_id: str) -> Optional[Dict[str, Any]]:
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM trades WHERE id = ? AND user_id = ?",
                           (trade_id, user_id)).fetchone()
        return dict(row) if row else None

    def create_trade(self, user_id: str, trade: Trade) -> Trade:
        """Insert a trade; the store assigns the id and creation time."""
        record = trade.to_record(user_id)
        record["id"] = str(uuid.uuid4())
        record["created_at"] = record["updated_at"] = datetime.now().isoformat()

        columns = ("id", "created_at", "updated_at") + _TRADE_COLUMNS
        placeholders = ", ".join("?" for _ in columns)
        with self._transaction() as conn:
            conn.execute(
                f"INSERT INTO trades ({', '.join(columns)}) VALUES ({placeholders})",
                [record[c] for c in columns])
        logger.info("trade_created", trade_id=record["id"], user_id=user_id,
                    symbol=record["symbol"], pnl=record["pnl"])
        return Trade.from_record(record)

    def update_trade(self, user_id: str, trade_id: str, patch: Dict[str, Any]) -> Trade:
        """Merge `patch` over the stored trade and persist the result."""
        row = self._get_trade_row(user_id, trade_id)
        if not row:
            raise TradeNotFoundError(trade_id)

        updated = Trade.from_record(row).apply_patch(patch)
        record = updated.to_record(user_id)
        record["updated_at"] = datetime.now().isoformat()

        columns = ("updated_at",) + _TRADE_COLUMNS
        assignments = ", ".join(f"{c} = ?" for c in columns)
        with self._transaction() as conn:
            conn.execute(
                f"UPDATE trades SET {assignments} WHERE id = ? AND user_id = ?",
                [record[c] for c in columns] + [trade_id, user_id])
        logger.info("trade_updated", trade_id=trade_id, fields=sorted(patch))
        return Trade.from_record({**row, **record})

    def delete_trade(self, user_id: str, trade_id: str) -> bool:
        """Delete a trade and its linked journal entries. False if not found."""
        with self._transaction() as conn:
            linked = conn.execute(
                "DELETE FROM journal_entries WHERE trade_id = ? AND user_id = ?",
                (trade_id, user_id)).rowcount
            deleted = conn.execute(
                "DELETE FROM trades WHERE id = ? AND user_id = ?",
                (trade_id, user_id)).rowcount
        if not deleted:
            logger.warning("trade_delete_missing", trade_id=trade_id, user_id=user_id)
            return False
        logger.info("trade_deleted", trade_id=trade_id, linked_entries=linked)
        return True

    # ─── JOURNAL ENTRIES ────────────────────────────────────────

    def list_journal_entries(self, user_id: str, trade_id: str = "") -> List[JournalEntry]:
        conn = self._get_conn()
        sql = "SELECT * FROM journal_entries WHERE user_id = ?"
        params: list = [user_id]
        if trade_id:
            sql += " AND trade_id = ?"
            params.append(trade_id)
        rows = conn.execute(sql + " ORDER BY created_at DESC, rowid DESC", params).fetchall()
        return [self._row_to_entry(dict(r)) for r in rows]

    def get_journal_entry(self, user_id: str, entry_id: str) -> Optional[JournalEntry]:
        conn = self._get_conn()
        row = conn.execute("SELECT * FROM journal_entries WHERE id = ? AND user_id = ?",
                           (entry_id, user_id)).fetchone()
        return self._row_to_entry(dict(row)) if row else None

    def add_journal_entry(self, user_id: str, entry: JournalEntry) -> JournalEntry:
        with self._transaction() as conn:
            conn.execute("""
                INSERT INTO journal_entries
                (id, user_id, trade_id, title, recap, thumbnail, screenshots, date, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (entry.id, user_id, entry.trade_id, entry.title, entry.recap,
                  entry.thumbnail, json.dumps(entry.screenshots), entry.date,
                  entry.created_at))
        logger.info("journal_entry_created", entry_id=entry.id, trade_id=entry.trade_id)
        return entry

    def update_journal_entry(self, user_id: str, entry_id: str,
                             patch: Dict[str, Any]) -> JournalEntry:
        entry = self.get_journal_entry(user_id, entry_id)
        if not entry:
            raise JournalEntryNotFoundError(entry_id)
        merged = entry.to_dict()
        merged.update({k: v for k, v in patch.items()
                       if k in JournalEntry.__dataclass_fields__ and k not in ("id", "created_at")})
        updated = JournalEntry.from_dict(merged)
        with self._transaction() as conn:
            conn.execute("""
                UPDATE journal_entries
                SET trade_id = ?, title = ?, recap = ?, thumbnail = ?, screenshots = ?, date = ?
                WHERE id = ? AND user_id = ?
            """, (updated.trade_id, updated.title, updated.recap, updated.thumbnail,
                  json.dumps(updated.screenshots), updated.date, entry_id, user_id))
        return updated

    def delete_journal_entry(self, user_id: str, entry_id: str) -> bool:
        with self._transaction() as conn:
            deleted = conn.execute("DELETE FROM journal_entries WHERE id = ? AND user_id = ?",
                                   (entry_id, user_id)).rowcount
        return bool(deleted)

    @staticmethod
    def _row_to_entry(row: Dict[str, Any]) -> JournalEntry:
        try:
            screenshots = json.loads(row.get("screenshots") or "[]")
        except (TypeError, ValueError):
            logger.warning("journal_screenshots_unparseable", entry_id=row.get("id"))
            screenshots = []
        row["screenshots"] = screenshots if isinstance(screenshots, list) else []
        return JournalEntry.from_dict(row)
