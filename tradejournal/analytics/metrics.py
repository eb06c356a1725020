"""
Trading Performance Metrics Engine
==================================

Turns a list of trades into every number the dashboard shows:
  - Net P&L, win rate, profit factor, average win / loss, average R:R
  - Max drawdown, volatility, Sharpe ratio
  - Win / loss streaks
  - Day-level aggregates (win days, average daily P&L, profit consistency)
  - Session aggregates, holding time, best session / weekday
  - Daily, cumulative and performance series for charts

Every function is pure: the input list is never mutated (sorting happens on
a copy), nothing is cached between calls, and no function raises on empty
input. Zero denominators resolve to 0 or UNBOUNDED, never NaN.
"""

from __future__ import annotations
import math
from dataclasses import dataclass, field, asdict
from typing import List, Dict, Any, Sequence

import numpy as np

from tradejournal.journal.journal_models import MISSING_LABEL, Trade, parse_trade_date

TRADING_DAYS_PER_YEAR = 252
UNBOUNDED = math.inf

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


@dataclass
class Streak:
    current: int = 0
    max: int = 0


@dataclass
class WinDays:
    win_days: int = 0
    total_days: int = 0
    percentage: float = 0.0


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CORE P&L METRICS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def net_pnl(trades: Sequence[Trade]) -> float:
    return float(sum(t.pnl for t in trades))


def win_rate(trades: Sequence[Trade]) -> float:
    """Percentage of trades with positive P&L."""
    if not trades:
        return 0.0
    wins = sum(1 for t in trades if t.pnl > 0)
    return wins / len(trades) * 100


def gross_profit(trades: Sequence[Trade]) -> float:
    return float(sum(t.pnl for t in trades if t.pnl > 0))


def gross_loss(trades: Sequence[Trade]) -> float:
    """Absolute sum of the losing trades."""
    return abs(float(sum(t.pnl for t in trades if t.pnl < 0)))


def profit_factor(trades: Sequence[Trade]) -> float:
    profit = gross_profit(trades)
    loss = gross_loss(trades)
    if loss > 0:
        return profit / loss
    return UNBOUNDED if profit > 0 else 0.0


def average_win(trades: Sequence[Trade]) -> float:
    wins = [t.pnl for t in trades if t.pnl > 0]
    return sum(wins) / len(wins) if wins else 0.0


def average_loss(trades: Sequence[Trade]) -> float:
    """Mean of the strictly losing trades (a negative number)."""
    losses = [t.pnl for t in trades if t.pnl < 0]
    return sum(losses) / len(losses) if losses else 0.0


def average_win_loss_ratio(trades: Sequence[Trade]) -> float:
    avg_win = average_win(trades)
    avg_loss = abs(average_loss(trades))
    if avg_loss > 0:
        return avg_win / avg_loss
    return UNBOUNDED if avg_win > 0 else 0.0


def average_reward_to_risk(trades: Sequence[Trade]) -> float:
    ratios = [t.reward_to_risk_ratio for t in trades
              if t.reward_to_risk_ratio is not None and t.reward_to_risk_ratio > 0]
    return sum(ratios) / len(ratios) if ratios else 0.0


def largest_win(trades: Sequence[Trade]) -> float:
    return max([t.pnl for t in trades] + [0.0])


def largest_loss(trades: Sequence[Trade]) -> float:
    return min([t.pnl for t in trades] + [0.0])


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# RISK METRICS
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def sort_by_date(trades: Sequence[Trade]) -> List[Trade]:
    """Chronological copy of `trades`; equal dates keep their input order."""
    return sorted(trades, key=lambda t: parse_trade_date(t.date))


def max_drawdown(trades: Sequence[Trade]) -> float:
    """
    Largest peak-to-trough decline of cumulative P&L, as % of the peak.
    Points are skipped while the peak is not positive.
    """
    peak = 0.0
    running = 0.0
    max_dd = 0.0
    for t in sort_by_date(trades):
        running += t.pnl
        if running > peak:
            peak = running
        if peak <= 0:
            continue
        dd = (peak - running) / peak * 100
        max_dd = max(max_dd, dd)
    return max_dd


def _population_std(values: Sequence[float]) -> float:
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=float)))


def volatility(trades: Sequence[Trade]) -> float:
    """Population stddev of per-trade P&L as a percentage of the mean."""
    if len(trades) < 2:
        return 0.0
    pnls = [t.pnl for t in trades]
    mean = sum(pnls) / len(pnls)
    if mean == 0:
        return 0.0
    return _population_std(pnls) / mean * 100


def _annualized_sharpe(values: Sequence[float], trading_days: int) -> float:
    if not values:
        return 0.0
    std = _population_std(values)
    if std == 0:
        return 0.0
    mean = sum(values) / len(values)
    return mean / std * math.sqrt(trading_days)


def sharpe_ratio(trades: Sequence[Trade], trading_days: int = TRADING_DAYS_PER_YEAR) -> float:
    """Per-trade Sharpe ratio, annualized by `trading_days`."""
    return _annualized_sharpe([t.pnl for t in trades], trading_days)


def daily_sharpe_ratio(trades: Sequence[Trade], trading_days: int = TRADING_DAYS_PER_YEAR) -> float:
    """Sharpe ratio over per-day P&L sums instead of individual trades."""
    return _annualized_sharpe(list(daily_pnl_by_date(trades).values()), trading_days)


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CONSISTENCY
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def win_streak(trades: Sequence[Trade]) -> Streak:
    streak = Streak()
    for t in trades:
        if t.pnl > 0:
            streak.current += 1
            streak.max = max(streak.max, streak.current)
        else:
            streak.current = 0
    return streak


def loss_streak(trades: Sequence[Trade]) -> Streak:
    """Breakeven trades (pnl == 0) extend a losing streak."""
    streak = Streak()
    for t in trades:
        if t.pnl <= 0:
            streak.current += 1
            streak.max = max(streak.max, streak.current)
        else:
            streak.current = 0
    return streak


def daily_pnl_by_date(trades: Sequence[Trade]) -> Dict[str, float]:
    """P&L summed per display date string, in first-seen order."""
    by_date: Dict[str, float] = {}
    for t in trades:
        by_date[t.date] = by_date.get(t.date, 0.0) + t.pnl
    return by_date


def win_days(trades: Sequence[Trade]) -> WinDays:
    days = daily_pnl_by_date(trades)
    winning = sum(1 for pnl in days.values() if pnl > 0)
    total = len(days)
    return WinDays(
        win_days=winning,
        total_days=total,
        percentage=winning / total * 100 if total else 0.0,
    )


def average_daily_pnl(trades: Sequence[Trade]) -> float:
    days = daily_pnl_by_date(trades)
    return sum(days.values()) / len(days) if days else 0.0


def profit_consistency(trades: Sequence[Trade]) -> float:
    """Share of trading days that closed green, in percent."""
    return win_days(trades).percentage


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SESSION & TIMING
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def session_pnl(trades: Sequence[Trade]) -> Dict[str, float]:
    by_session: Dict[str, float] = {}
    for t in trades:
        key = t.session or MISSING_LABEL
        by_session[key] = by_session.get(key, 0.0) + t.pnl
    return by_session


def average_holding_time(trades: Sequence[Trade]) -> float:
    """Mean time in hours between entry and exit for trades that have both."""
    timed = [t for t in trades if t.has_duration]
    if not timed:
        return 0.0
    total_hours = sum((t.exit_date - t.entry_date).total_seconds() / 3600 for t in timed)
    return total_hours / len(timed)


def best_time_to_enter(trades: Sequence[Trade]) -> str:
    """Session with the most trades; ties keep the first session seen."""
    counts: Dict[str, int] = {}
    for t in trades:
        key = t.session or MISSING_LABEL
        counts[key] = counts.get(key, 0) + 1

    best, best_count = MISSING_LABEL, 0
    for session, count in counts.items():
        if count > best_count:
            best, best_count = session, count
    return best


def best_day_of_week(trades: Sequence[Trade]) -> str:
    """Weekday with the highest summed P&L; ties keep the first weekday seen."""
    by_day: Dict[str, float] = {}
    for t in trades:
        day = WEEKDAYS[parse_trade_date(t.date).weekday()]
        by_day[day] = by_day.get(day, 0.0) + t.pnl

    best, best_pnl = MISSING_LABEL, -math.inf
    for day, pnl in by_day.items():
        if pnl > best_pnl:
            best, best_pnl = day, pnl
    return best


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# CHART SERIES
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def _sorted_days(trades: Sequence[Trade]):
    days = [(parse_trade_date(d), pnl) for d, pnl in daily_pnl_by_date(trades).items()]
    return sorted(days, key=lambda item: item[0])


def daily_pnl_series(trades: Sequence[Trade]) -> List[Dict[str, Any]]:
    return [{"name": day.strftime("%m/%d/%y"), "pnl": pnl} for day, pnl in _sorted_days(trades)]


def cumulative_pnl_series(trades: Sequence[Trade]) -> List[Dict[str, Any]]:
    """Running total of daily P&L, led by a synthetic zero point."""
    daily = daily_pnl_series(trades)
    if not daily:
        return []
    series = [{"name": "Start", "pnl": 0.0}]
    running = 0.0
    for point in daily:
        running += point["pnl"]
        series.append({"name": point["name"], "pnl": running})
    return series


def performance_series(trades: Sequence[Trade]) -> List[Dict[str, Any]]:
    days = _sorted_days(trades)
    if not days:
        return []
    series = [{"date": "start", "value": 0.0, "cumulative_value": 0.0}]
    running = 0.0
    for day, pnl in days:
        running += pnl
        series.append({"date": day.date().isoformat(), "value": pnl, "cumulative_value": running})
    return series


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# FULL DASHBOARD BUNDLE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass
class DashboardMetrics:
    total_trades: int = 0
    net_pnl: float = 0.0
    win_rate: float = 0.0
    winning_trades: int = 0
    losing_trades: int = 0              # pnl <= 0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    profit_factor: float = 0.0          # UNBOUNDED when nothing was lost
    avg_win: float = 0.0
    avg_loss: float = 0.0
    avg_win_loss_ratio: float = 0.0
    avg_risk_reward: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0

    max_drawdown: float = 0.0           # percent
    volatility: float = 0.0             # percent of mean P&L
    sharpe_ratio: float = 0.0
    daily_sharpe_ratio: float = 0.0

    win_streak: Streak = field(default_factory=Streak)
    loss_streak: Streak = field(default_factory=Streak)
    win_days: WinDays = field(default_factory=WinDays)
    losing_days: int = 0
    avg_daily_pnl: float = 0.0
    profit_consistency: float = 0.0

    avg_holding_time_hours: float = 0.0
    best_time_to_enter: str = MISSING_LABEL
    best_day_of_week: str = MISSING_LABEL

    daily_pnl: List[Dict[str, Any]] = field(default_factory=list)
    cumulative_pnl: List[Dict[str, Any]] = field(default_factory=list)
    performance: List[Dict[str, Any]] = field(default_factory=list)
    session_pnl: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


def compute_metrics(trades: Sequence[Trade],
                    trading_days: int = TRADING_DAYS_PER_YEAR) -> DashboardMetrics:
    """Compute the full dashboard bundle for `trades` (in chronological order)."""
    trades = list(trades)
    days = win_days(trades)
    winners = sum(1 for t in trades if t.pnl > 0)

    return DashboardMetrics(
        total_trades=len(trades),
        net_pnl=net_pnl(trades),
        win_rate=win_rate(trades),
        winning_trades=winners,
        losing_trades=len(trades) - winners,
        gross_profit=gross_profit(trades),
        gross_loss=gross_loss(trades),
        profit_factor=profit_factor(trades),
        avg_win=average_win(trades),
        avg_loss=average_loss(trades),
        avg_win_loss_ratio=average_win_loss_ratio(trades),
        avg_risk_reward=average_reward_to_risk(trades),
        largest_win=largest_win(trades),
        largest_loss=largest_loss(trades),
        max_drawdown=max_drawdown(trades),
        volatility=volatility(trades),
        sharpe_ratio=sharpe_ratio(trades, trading_days),
        daily_sharpe_ratio=daily_sharpe_ratio(trades, trading_days),
        win_streak=win_streak(trades),
        loss_streak=loss_streak(trades),
        win_days=days,
        losing_days=days.total_days - days.win_days,
        avg_daily_pnl=average_daily_pnl(trades),
        profit_consistency=days.percentage,
        avg_holding_time_hours=average_holding_time(trades),
        best_time_to_enter=best_time_to_enter(trades),
        best_day_of_week=best_day_of_week(trades),
        daily_pnl=daily_pnl_series(trades),
        cumulative_pnl=cumulative_pnl_series(trades),
        performance=performance_series(trades),
        session_pnl=session_pnl(trades),
    )


# ── Display ──────────────────────────────────────────────────

def _money(value: float) -> str:
    return f"-${abs(value):,.2f}" if value < 0 else f"${value:,.2f}"


def _ratio(value: float) -> str:
    return "∞" if math.isinf(value) else f"{value:.1f}"


def _hours(value: float) -> str:
    """Fractional hours as 'Xh Ym', both parts floored."""
    return f"{math.floor(value)}h {math.floor((value % 1) * 60)}m"


def format_metrics(m: DashboardMetrics) -> Dict[str, str]:
    """Dashboard display strings; the only place UNBOUNDED becomes '∞'."""
    return {
        "net_pnl": _money(m.net_pnl),
        "win_rate": f"{m.win_rate:.1f}%",
        "profit_factor": _ratio(m.profit_factor),
        "avg_win_loss_ratio": _ratio(m.avg_win_loss_ratio),
        "avg_risk_reward": f"1:{m.avg_risk_reward:.2f}" if m.avg_risk_reward > 0 else MISSING_LABEL,
        "avg_win": _money(m.avg_win),
        "avg_loss": _money(abs(m.avg_loss)),
        "largest_win": _money(m.largest_win),
        "largest_loss": _money(abs(m.largest_loss)),
        "max_drawdown": f"-{m.max_drawdown:.2f}%",
        "volatility": f"{m.volatility:.1f}%",
        "sharpe_ratio": f"{m.sharpe_ratio:.1f}",
        "daily_sharpe_ratio": f"{m.daily_sharpe_ratio:.1f}",
        "consecutive_wins": f"{m.win_streak.current} (Max: {m.win_streak.max})",
        "consecutive_losses": f"{m.loss_streak.current} (Max: {m.loss_streak.max})",
        "win_days": f"{m.win_days.win_days}/{m.win_days.total_days} ({m.win_days.percentage:.1f}%)",
        "avg_daily_pnl": _money(m.avg_daily_pnl),
        "profit_consistency": f"{m.profit_consistency:.1f}%",
        "avg_holding_time": _hours(m.avg_holding_time_hours),
        "best_time_to_enter": m.best_time_to_enter,
        "best_day_of_week": m.best_day_of_week,
    }
