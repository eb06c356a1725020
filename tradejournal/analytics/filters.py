"""Trade-list filters used ahead of the metrics engine."""

from __future__ import annotations
from datetime import date, datetime
from typing import List, Optional, Sequence, Union

from tradejournal.journal.journal_models import NewsEvent, NewsImpact, Trade, parse_trade_date

NO_NEWS = "No News"
ALL_MODELS = "all"

DateBound = Optional[Union[date, datetime]]


def _as_date(value: Union[date, datetime]) -> date:
    return value.date() if isinstance(value, datetime) else value


def filter_by_date_range(trades: Sequence[Trade], from_date: DateBound = None,
                         to_date: DateBound = None) -> List[Trade]:
    """Trades whose display date falls within [from_date, to_date]; bounds are optional."""
    lower = _as_date(from_date) if from_date else None
    upper = _as_date(to_date) if to_date else None
    if lower is None and upper is None:
        return list(trades)

    result = []
    for t in trades:
        day = parse_trade_date(t.date).date()
        if lower is not None and day < lower:
            continue
        if upper is not None and day > upper:
            continue
        result.append(t)
    return result


# ── Entry models ──

def entry_models(trades: Sequence[Trade]) -> List[str]:
    models: List[str] = []
    for t in trades:
        if t.entry_model and t.entry_model not in models:
            models.append(t.entry_model)
    return models


def filter_by_model(trades: Sequence[Trade], model: str = ALL_MODELS) -> List[Trade]:
    if not model or model == ALL_MODELS:
        return list(trades)
    return [t for t in trades if t.entry_model == model]


# ── News correlation ──

def news_event_label(event: NewsEvent) -> str:
    """'Red Folder: CPI (08:30)'. Empty when the event lacks a name or time."""
    if not event.name or not event.time:
        return ""
    impact = event.type or NewsImpact.GREY.value
    return f"{impact[:1].upper()}{impact[1:]} Folder: {event.name} ({event.time})"


def available_news_events(trades: Sequence[Trade]) -> List[str]:
    labels: List[str] = [NO_NEWS]
    for t in trades:
        for event in t.news:
            label = news_event_label(event)
            if label and label not in labels:
                labels.append(label)
    return labels


def normalize_news_selection(previous: Sequence[str], selection: Sequence[str]) -> List[str]:
    """
    'No News' is exclusive: choosing it clears every other pick, and picking
    any event while it is selected drops it.
    """
    if NO_NEWS in selection and NO_NEWS not in previous:
        return [NO_NEWS]
    if NO_NEWS in selection and len(selection) > 1:
        return [s for s in selection if s != NO_NEWS]
    return list(selection)


def filter_by_news(trades: Sequence[Trade], selected: Sequence[str]) -> List[Trade]:
    """
    Trades tagged with every selected event, or without news for 'No News'.
    'No News' is ignored when any event is selected alongside it.
    """
    if not selected:
        return []
    events = [s for s in selected if s != NO_NEWS]
    if not events:
        return [t for t in trades if not t.news]

    result = []
    for t in trades:
        if not t.news:
            continue
        labels = {news_event_label(e) for e in t.news}
        if all(s in labels for s in events):
            result.append(t)
    return result
