"""Pydantic request schemas for the journal API."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from tradejournal.journal.journal_models import NewsImpact, OrderType, TradeType, TradingSession


class NewsEventIn(BaseModel):
    type: Optional[NewsImpact] = None
    name: Optional[str] = Field(default=None, max_length=120)
    time: Optional[str] = Field(default=None, max_length=16)


class _TradeFields(BaseModel):
    entry_date: Optional[datetime] = None
    exit_date: Optional[datetime] = None
    trade_type: Optional[TradeType] = None
    session: Optional[TradingSession] = None
    timeframe: Optional[str] = Field(default=None, max_length=16)
    entry_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    exit_price: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    stop_loss: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    take_profit: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    order_type: Optional[OrderType] = None
    risk_per_trade: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    reward_to_risk_ratio: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    entry_model: Optional[str] = Field(default=None, max_length=80)
    mistakes_made: Optional[str] = None
    lessons_learned: Optional[str] = None
    trade_rating: Optional[int] = Field(default=None, ge=0, le=5)

    @model_validator(mode="after")
    def _validate_dates(self):
        if self.entry_date and self.exit_date:
            # Mixed naive/aware pairs are normalized later and not compared here.
            same_kind = (self.entry_date.tzinfo is None) == (self.exit_date.tzinfo is None)
            if same_kind and self.exit_date < self.entry_date:
                raise ValueError("exit_date must not be before entry_date")
        return self


class TradeCreate(_TradeFields):
    symbol: str = Field(default="", max_length=40)
    pnl: float = Field(default=0.0, allow_inf_nan=False)
    news: list[NewsEventIn] = Field(default_factory=list)

    @field_validator("symbol")
    @classmethod
    def _trim_symbol(cls, value: str) -> str:
        return value.strip().upper()


class TradeUpdate(_TradeFields):
    symbol: Optional[str] = Field(default=None, max_length=40)
    pnl: Optional[float] = Field(default=None, allow_inf_nan=False)
    news: Optional[list[NewsEventIn]] = None

    @field_validator("symbol")
    @classmethod
    def _trim_symbol(cls, value: Optional[str]) -> Optional[str]:
        return value.strip().upper() if value is not None else value


class JournalEntryCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    recap: str = ""
    thumbnail: Optional[str] = None
    screenshots: list[str] = Field(default_factory=list)
    date: Optional[str] = None
    trade_id: Optional[str] = None

    @field_validator("title")
    @classmethod
    def _trim_title(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text


class JournalEntryUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    recap: Optional[str] = None
    thumbnail: Optional[str] = None
    screenshots: Optional[list[str]] = None
    date: Optional[str] = None
    trade_id: Optional[str] = None
