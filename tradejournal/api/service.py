from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Optional, Sequence

from tradejournal.analytics.edge import (
    build_calendar_month,
    compute_edge_stats,
    export_statistical_edge_csv,
)
from tradejournal.analytics.filters import (
    ALL_MODELS,
    NO_NEWS,
    available_news_events,
    entry_models,
    filter_by_date_range,
    filter_by_model,
    filter_by_news,
    normalize_news_selection,
)
from tradejournal.analytics.metrics import compute_metrics, format_metrics, sort_by_date
from tradejournal.journal.journal_models import JournalEntry, Trade
from tradejournal.journal.journal_store import JournalStore
from tradejournal.utils.config import get_settings
from tradejournal.utils.exceptions import (
    JournalEntryNotFoundError,
    TradeNotFoundError,
    ValidationError,
)
from tradejournal.utils.logger import get_logger, summarize_payload

logger = get_logger(__name__)


@dataclass(frozen=True)
class UserContext:
    """Identity of the caller, as asserted by the upstream auth service."""
    user_id: str
    email: str = ""


def json_safe(value: Any) -> Any:
    """Replace non-finite floats (an unbounded profit factor) with None."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


class JournalService:
    def __init__(self, store: JournalStore, trading_days: Optional[int] = None) -> None:
        self._store = store
        self._trading_days = trading_days or get_settings().trading_days_per_year

    # ─── Trades ─────────────────────────────────────────────────

    def _chronological_trades(self, ctx: UserContext) -> list[Trade]:
        # The store returns newest first; flip to creation order, then sort by day.
        return sort_by_date(list(reversed(self._store.list_trades(ctx.user_id))))

    def list_trades(self, ctx: UserContext) -> list[dict[str, Any]]:
        return [t.to_dict() for t in self._store.list_trades(ctx.user_id)]

    def add_trade(self, ctx: UserContext, data: dict[str, Any]) -> dict[str, Any]:
        logger.debug("trade_add_requested", user_id=ctx.user_id, payload=summarize_payload(data))
        trade = Trade.from_dict({k: v for k, v in data.items() if k not in ("id", "date")})
        return self._store.create_trade(ctx.user_id, trade).to_dict()

    def update_trade(self, ctx: UserContext, trade_id: str, updates: dict[str, Any]) -> dict[str, Any]:
        return self._store.update_trade(ctx.user_id, trade_id, updates).to_dict()

    def delete_trade(self, ctx: UserContext, trade_id: str) -> None:
        if not self._store.delete_trade(ctx.user_id, trade_id):
            raise TradeNotFoundError(trade_id)

    # ─── Dashboard & Analytics ──────────────────────────────────

    def get_dashboard(self, ctx: UserContext, from_date: Optional[date] = None,
                      to_date: Optional[date] = None) -> dict[str, Any]:
        if from_date and to_date and from_date > to_date:
            raise ValidationError("from_date must not be after to_date")
        trades = filter_by_date_range(self._chronological_trades(ctx), from_date, to_date)
        metrics = compute_metrics(trades, trading_days=self._trading_days)
        logger.debug("dashboard_computed", user_id=ctx.user_id, trades=len(trades))
        result = json_safe(metrics.to_dict())
        result["display"] = format_metrics(metrics)
        return result

    def get_entry_models(self, ctx: UserContext) -> list[str]:
        return entry_models(self._store.list_trades(ctx.user_id))

    def get_edge_stats(self, ctx: UserContext, model: str = "") -> dict[str, Any]:
        trades = self._store.list_trades(ctx.user_id)
        if not model:
            models = entry_models(trades)
            model = models[0] if models else ""
        selected = [t for t in trades if model and t.entry_model == model]
        stats = compute_edge_stats(selected)
        return {"model": model, "stats": stats.to_dict(), "display": stats.display()}

    def get_news_events(self, ctx: UserContext) -> list[str]:
        return available_news_events(self._store.list_trades(ctx.user_id))

    def get_news_stats(self, ctx: UserContext, selected: Sequence[str]) -> dict[str, Any]:
        # A request carries no earlier pick, so event labels win over "No News".
        selection = normalize_news_selection([NO_NEWS], selected)
        trades = filter_by_news(self._store.list_trades(ctx.user_id), selection)
        stats = compute_edge_stats(trades)
        return {
            "selected": selection,
            "stats": stats.to_dict(),
            "display": stats.display(),
            "trades": [t.to_dict() for t in trades],
        }

    def get_statistical_edge(self, ctx: UserContext, model: str = ALL_MODELS) -> dict[str, Any]:
        trades = filter_by_model(self._store.list_trades(ctx.user_id), model)
        return {"model": model or ALL_MODELS, "trades": [t.to_dict() for t in trades]}

    def export_statistical_edge(self, ctx: UserContext, model: str = ALL_MODELS) -> str:
        return export_statistical_edge_csv(self._store.list_trades(ctx.user_id), model)

    def get_calendar(self, ctx: UserContext, year: int, month: int) -> dict[str, Any]:
        if not 1 <= month <= 12:
            raise ValidationError(f"month must be between 1 and 12, got {month}")
        return build_calendar_month(self._store.list_trades(ctx.user_id), year, month)

    # ─── Journal ────────────────────────────────────────────────

    def list_journal_entries(self, ctx: UserContext, trade_id: str = "") -> list[dict[str, Any]]:
        return [e.to_dict() for e in self._store.list_journal_entries(ctx.user_id, trade_id)]

    def _check_linked_trade(self, ctx: UserContext, trade_id: Optional[str]) -> None:
        if trade_id and not self._store.get_trade(ctx.user_id, trade_id):
            raise TradeNotFoundError(trade_id)

    def add_journal_entry(self, ctx: UserContext, data: dict[str, Any]) -> dict[str, Any]:
        self._check_linked_trade(ctx, data.get("trade_id"))
        entry = JournalEntry.from_dict({k: v for k, v in data.items()
                                        if v is not None and k not in ("id", "created_at")})
        return self._store.add_journal_entry(ctx.user_id, entry).to_dict()

    def update_journal_entry(self, ctx: UserContext, entry_id: str,
                             updates: dict[str, Any]) -> dict[str, Any]:
        self._check_linked_trade(ctx, updates.get("trade_id"))
        return self._store.update_journal_entry(ctx.user_id, entry_id, updates).to_dict()

    def delete_journal_entry(self, ctx: UserContext, entry_id: str) -> None:
        if not self._store.delete_journal_entry(ctx.user_id, entry_id):
            raise JournalEntryNotFoundError(entry_id)
