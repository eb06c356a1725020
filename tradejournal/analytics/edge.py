"""
Edge Analysis - per-model statistics, trading calendar, CSV export
==================================================================

Helpers behind the edge-builder, news-correlation and statistical-edge
views. They work on already filtered trade lists (see analytics.filters).
"""

from __future__ import annotations
import calendar
from dataclasses import dataclass, asdict
from datetime import date, datetime
from typing import List, Dict, Any, Optional, Sequence

import pandas as pd

from tradejournal.journal.journal_models import MISSING_LABEL, NewsImpact, Trade
from tradejournal.analytics.filters import filter_by_model, ALL_MODELS

CSV_COLUMNS = ["Trade ID", "Market / Asset", "Model", "Session", "R/R",
               "Entry Time", "Duration", "News", "Profit"]


def duration_minutes(trade: Trade) -> Optional[int]:
    """Whole minutes between entry and exit, truncated; None without both dates."""
    if not trade.has_duration:
        return None
    return int((trade.exit_date - trade.entry_date).total_seconds() / 60)


@dataclass
class EdgeStats:
    total_trades: int = 0
    avg_rr: Optional[float] = None
    max_rr: Optional[float] = None
    avg_duration_minutes: Optional[float] = None
    most_common_entry_time: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)

    def display(self) -> Dict[str, str]:
        return {
            "avg_rr": f"{self.avg_rr:.2f}R" if self.avg_rr is not None else MISSING_LABEL,
            "max_rr": f"{self.max_rr:.2f}R" if self.max_rr is not None else MISSING_LABEL,
            "avg_duration": (f"{round(self.avg_duration_minutes)} min"
                             if self.avg_duration_minutes is not None else MISSING_LABEL),
            "avg_entry_time": self.most_common_entry_time or MISSING_LABEL,
        }


def compute_edge_stats(trades: Sequence[Trade]) -> EdgeStats:
    """R:R, holding time and typical entry time of a trade selection."""
    if not trades:
        return EdgeStats()

    ratios = [t.reward_to_risk_ratio for t in trades
              if t.reward_to_risk_ratio is not None and t.reward_to_risk_ratio > 0]
    durations = [d for d in (duration_minutes(t) for t in trades) if d is not None]

    # Mode of HH:MM entry times; the first time seen wins a tie.
    frequency: Dict[str, int] = {}
    for t in trades:
        if t.entry_date:
            key = f"{t.entry_date.hour:02d}:{t.entry_date.minute:02d}"
            frequency[key] = frequency.get(key, 0) + 1
    most_common, max_count = None, 0
    for key, count in frequency.items():
        if count > max_count:
            most_common, max_count = key, count

    return EdgeStats(
        total_trades=len(trades),
        avg_rr=sum(ratios) / len(ratios) if ratios else None,
        max_rr=max(ratios) if ratios else None,
        avg_duration_minutes=sum(durations) / len(durations) if durations else None,
        most_common_entry_time=most_common,
    )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRADING CALENDAR
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def pnl_by_calendar_day(trades: Sequence[Trade]) -> Dict[str, Dict[str, float]]:
    """{'YYYY-MM-DD': {'pnl', 'trades'}} keyed on exit date, else entry date."""
    days: Dict[str, Dict[str, float]] = {}
    for t in trades:
        when = t.exit_date or t.entry_date
        if not when:
            continue
        key = when.strftime("%Y-%m-%d")
        bucket = days.setdefault(key, {"pnl": 0.0, "trades": 0})
        bucket["pnl"] += t.pnl
        bucket["trades"] += 1
    return days


def build_calendar_month(trades: Sequence[Trade], year: int, month: int) -> Dict[str, Any]:
    """Sunday-first month grid with leading blank cells and per-day P&L."""
    by_day = pnl_by_calendar_day(trades)
    first = date(year, month, 1)
    _, days_in_month = calendar.monthrange(year, month)
    leading = (first.weekday() + 1) % 7

    cells: List[Dict[str, Any]] = [
        {"day": None, "date": None, "pnl": 0.0, "trades": 0} for _ in range(leading)
    ]
    month_pnl = 0.0
    month_trades = 0
    for day in range(1, days_in_month + 1):
        key = date(year, month, day).isoformat()
        data = by_day.get(key, {"pnl": 0.0, "trades": 0})
        month_pnl += data["pnl"]
        month_trades += data["trades"]
        cells.append({"day": day, "date": key, "pnl": data["pnl"], "trades": data["trades"]})

    return {
        "year": year,
        "month": month,
        "title": first.strftime("%B %Y"),
        "days": cells,
        "month_pnl": month_pnl,
        "month_trades": month_trades,
    }


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# STATISTICAL EDGE EXPORT
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _format_entry_time(value: Optional[datetime]) -> str:
    return value.strftime("%I:%M %p") if value else MISSING_LABEL


def _format_news_for_csv(trade: Trade) -> str:
    parts = []
    for event in trade.news:
        if not event.name:
            continue
        impact = event.type or NewsImpact.GREY.value
        when = f"({event.time})" if event.time else ""
        parts.append(f"{impact} folder news : {event.name} {when}")
    return ", ".join(parts) or MISSING_LABEL


def statistical_edge_rows(trades: Sequence[Trade], model: str = ALL_MODELS) -> List[Dict[str, Any]]:
    """
    Table rows for the statistical-edge view. Trade IDs count down from the
    size of the unfiltered list, so the newest trade gets the highest number.
    """
    selected = filter_by_model(trades, model)
    positions = {id(t): i for i, t in enumerate(trades)}
    rows = []
    for t in selected:
        minutes = duration_minutes(t)
        rows.append({
            "Trade ID": len(trades) - positions[id(t)],
            "Market / Asset": t.symbol,
            "Model": t.entry_model or MISSING_LABEL,
            "Session": t.session or MISSING_LABEL,
            "R/R": t.reward_to_risk_ratio if t.reward_to_risk_ratio else MISSING_LABEL,
            "Entry Time": _format_entry_time(t.entry_date),
            "Duration": f"{minutes} min" if minutes is not None else MISSING_LABEL,
            "News": _format_news_for_csv(t),
            "Profit": f"{'+' if t.pnl >= 0 else ''}{t.pnl:.2f}",
        })
    return rows


def export_statistical_edge_csv(trades: Sequence[Trade], model: str = ALL_MODELS) -> str:
    rows = statistical_edge_rows(trades, model)
    if not rows:
        return ""
    return pd.DataFrame(rows, columns=CSV_COLUMNS).to_csv(index=False)
