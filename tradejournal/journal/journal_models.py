"""
Journal Data Models
===================

Trade         - one logged trade, the only record the metrics engine reads
NewsEvent     - economic-calendar event attached to a trade
JournalEntry  - free-form recap, optionally linked to a trade

All models are dataclasses with to_dict()/from_dict(). Trades are also
converted to and from flat SQLite rows (to_record()/from_record()).
Stored timestamps are ISO-8601 strings; the display date is MM/DD/YYYY.
"""

from __future__ import annotations
import json
import math
import uuid
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List

from tradejournal.utils.logger import get_logger

logger = get_logger(__name__)

DISPLAY_DATE_FORMAT = "%m/%d/%Y"
MISSING_LABEL = "N/A"


# ── Enums ────────────────────────────────────────────────────

class TradeType(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradingSession(str, Enum):
    ASIA = "Asia"
    LONDON = "London"
    NY_AM = "NY AM"
    NY_PM = "NY PM"


class OrderType(str, Enum):
    MARKET = "Market"
    LIMIT = "Limit"
    STOP = "Stop"


class NewsImpact(str, Enum):
    RED = "red"
    ORANGE = "orange"
    YELLOW = "yellow"
    GREY = "grey"
    NO_NEWS = "no-news"


# ── Date helpers ─────────────────────────────────────────────

def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a datetime or ISO-8601 string. Aware values become naive UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        try:
            dt = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            try:
                dt = datetime.strptime(value.strip(), DISPLAY_DATE_FORMAT)
            except ValueError:
                return None
    else:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt


def parse_trade_date(value: Any) -> datetime:
    """Parse a trade display date; anything unparseable falls back to now."""
    dt = parse_timestamp(value)
    return dt if dt is not None else datetime.now()


def format_display_date(value: Any) -> str:
    return parse_trade_date(value).strftime(DISPLAY_DATE_FORMAT)


def _isoformat(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRADES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass
class NewsEvent:
    """Scheduled news around the trade, tagged by impact folder colour."""
    type: Optional[str] = None       # NewsImpact value
    name: Optional[str] = None
    time: Optional[str] = None       # HH:MM as entered by the trader

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "NewsEvent":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})


@dataclass
class Trade:
    """
    A single logged trade.

    `date` is the display date (MM/DD/YYYY) the dashboard groups by. It is
    derived once, when the trade is read from storage, from the exit date,
    else the entry date, else the creation time.
    """
    id: str = ""
    date: str = ""
    symbol: str = ""
    pnl: float = 0.0

    # ── Timing ──
    entry_date: Optional[datetime] = None
    exit_date: Optional[datetime] = None
    session: Optional[str] = None          # TradingSession value
    timeframe: Optional[str] = None

    # ── Execution ──
    trade_type: Optional[str] = None       # TradeType value
    entry_price: Optional[float] = None
    exit_price: Optional[float] = None
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    order_type: Optional[str] = None       # OrderType value
    risk_per_trade: Optional[float] = None
    reward_to_risk_ratio: Optional[float] = None

    # ── Journal metadata ──
    entry_model: Optional[str] = None
    news: List[NewsEvent] = field(default_factory=list)
    mistakes_made: Optional[str] = None
    lessons_learned: Optional[str] = None
    trade_rating: Optional[int] = None

    def __post_init__(self):
        self.pnl = _optional_float(self.pnl) or 0.0
        self.entry_date = parse_timestamp(self.entry_date)
        self.exit_date = parse_timestamp(self.exit_date)
        self.news = [n if isinstance(n, NewsEvent) else NewsEvent.from_dict(n)
                     for n in (self.news or []) if isinstance(n, (NewsEvent, dict))]
        if not self.date:
            self.date = format_display_date(self.exit_date or self.entry_date)

    @property
    def has_duration(self) -> bool:
        return self.entry_date is not None and self.exit_date is not None

    def to_dict(self) -> dict:
        d = asdict(self)
        d["entry_date"] = _isoformat(self.entry_date)
        d["exit_date"] = _isoformat(self.exit_date)
        return d

    @classmethod
    def from_dict(cls, d: dict) -> "Trade":
        return cls(**{k: v for k, v in d.items() if k in cls.__dataclass_fields__})

    def apply_patch(self, patch: Dict[str, Any]) -> "Trade":
        """Return a copy with `patch` merged over this trade's fields."""
        updates = {k: v for k, v in patch.items()
                   if k in self.__dataclass_fields__ and k not in ("id", "date")}
        updated = replace(self, **updates)
        # The display date follows the (possibly new) exit/entry dates.
        if "exit_date" in updates or "entry_date" in updates:
            updated.date = format_display_date(updated.exit_date or updated.entry_date)
        return updated

    # ── Storage rows ──

    def to_record(self, user_id: str) -> Dict[str, Any]:
        """Flatten into a `trades` table row."""
        notes = f"{self.mistakes_made or ''} {self.lessons_learned or ''}".strip()
        return {
            "user_id": user_id,
            "symbol": self.symbol or "UNKNOWN",
            "side": "buy" if self.trade_type == TradeType.LONG.value else "sell",
            "quantity": 1,
            "price": self.entry_price or self.exit_price or 0,
            "fee": 0,
            "total": abs(self.pnl or 0),
            "status": "closed",
            "notes": notes or None,
            "pnl": self.pnl,
            "entry_date": _isoformat(self.entry_date),
            "exit_date": _isoformat(self.exit_date),
            "trade_type": self.trade_type,
            "session": self.session,
            "timeframe": self.timeframe,
            "entry_price": self.entry_price,
            "exit_price": self.exit_price,
            "stop_loss": self.stop_loss,
            "take_profit": self.take_profit,
            "order_type": self.order_type,
            "risk_per_trade": self.risk_per_trade,
            "reward_to_risk_ratio": self.reward_to_risk_ratio,
            "entry_model": self.entry_model,
            "news": json.dumps([n.to_dict() for n in self.news]) if self.news else None,
            "mistakes_made": self.mistakes_made,
            "lessons_learned": self.lessons_learned,
            "trade_rating": self.trade_rating,
        }

    @classmethod
    def from_record(cls, row: Dict[str, Any]) -> "Trade":
        """Build a Trade from a stored row, deriving the display date."""
        news: List[dict] = []
        if row.get("news"):
            try:
                news = json.loads(row["news"])
            except (TypeError, ValueError):
                logger.warning("trade_news_unparseable", trade_id=row.get("id"))

        trade_type = row.get("trade_type") or (
            TradeType.LONG.value if row.get("side") == "buy" else TradeType.SHORT.value)

        return cls(
            id=row.get("id") or "",
            date=format_display_date(
                row.get("exit_date") or row.get("entry_date") or row.get("created_at")),
            symbol=row.get("symbol") or "",
            pnl=row.get("pnl") or 0.0,
            entry_date=row.get("entry_date"),
            exit_date=row.get("exit_date"),
            trade_type=trade_type,
            session=row.get("session"),
            timeframe=row.get("timeframe"),
            entry_price=row.get("entry_price"),
            exit_price=row.get("exit_price"),
            stop_loss=row.get("stop_loss"),
            take_profit=row.get("take_profit"),
            order_type=row.get("order_type"),
            risk_per_trade=row.get("risk_per_trade"),
            reward_to_risk_ratio=row.get("reward_to_risk_ratio"),
            entry_model=row.get("entry_model"),
            news=news if isinstance(news, list) else [],
            mistakes_made=row.get("mistakes_made"),
            lessons_learned=row.get("lessons_learned"),
            trade_rating=row.get("trade_rating"),
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# JOURNAL ENTRIES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass
class JournalEntry:
    """Written recap of a trading day or a single trade."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    title: str = ""
    recap: str = ""
    thumbnail: Optional[str] = None
    screenshots: List[str] = field(default_factory=list)
    date: str = field(default_factory=lambda: datetime.now().strftime(DISPLAY_DATE_FORMAT))
    trade_id: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: dict) -> "JournalEntry":
        valid = {k: v for k, v in d.items() if k in cls.__dataclass_fields__}
        return cls(**valid)
