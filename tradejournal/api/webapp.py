from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import Depends, FastAPI, Header, Query, Request
from fastapi.responses import JSONResponse, Response

from tradejournal.api.schemas import (
    JournalEntryCreate,
    JournalEntryUpdate,
    TradeCreate,
    TradeUpdate,
)
from tradejournal.api.service import JournalService, UserContext
from tradejournal.journal.journal_store import JournalStore
from tradejournal.utils.config import get_settings
from tradejournal.utils.exceptions import AuthenticationError, JournalError
from tradejournal.utils.logger import get_logger

logger = get_logger(__name__)

app = FastAPI(title=get_settings().app_name, version="1.0")

_service: Optional[JournalService] = None


def get_service() -> JournalService:
    global _service
    if _service is None:
        settings = get_settings()
        _service = JournalService(JournalStore(db_path=settings.db_path),
                                  trading_days=settings.trading_days_per_year)
    return _service


def get_user_context(
    x_user_id: str = Header(default=""),
    x_user_email: str = Header(default=""),
) -> UserContext:
    # Sign-in happens upstream; the proxy forwards the verified identity.
    if not x_user_id.strip():
        raise AuthenticationError()
    return UserContext(user_id=x_user_id.strip(), email=x_user_email.strip().lower())


@app.exception_handler(JournalError)
async def journal_error_handler(request: Request, exc: JournalError) -> JSONResponse:
    status = exc.status_code or 500
    log = logger.error if status >= 500 else logger.warning
    log("journal_request_failed", path=request.url.path, category=exc.category.value,
        error=exc.message)
    return JSONResponse({"error": exc.message, "category": exc.category.value},
                        status_code=status)


@app.get("/api/health")
def health() -> dict[str, Any]:
    return {"status": "ok"}


# ────────────────────────────────────────────────────────────
# Trades
# ────────────────────────────────────────────────────────────

@app.get("/api/trades")
def list_trades(ctx: UserContext = Depends(get_user_context),
                svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    trades = svc.list_trades(ctx)
    return {"trades": trades, "total": len(trades)}


@app.post("/api/trades", status_code=201)
def create_trade(body: TradeCreate,
                 ctx: UserContext = Depends(get_user_context),
                 svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.add_trade(ctx, body.model_dump(mode="json"))


@app.put("/api/trades/{trade_id}")
def update_trade(trade_id: str, body: TradeUpdate,
                 ctx: UserContext = Depends(get_user_context),
                 svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.update_trade(ctx, trade_id, body.model_dump(mode="json", exclude_unset=True))


@app.delete("/api/trades/{trade_id}")
def delete_trade(trade_id: str,
                 ctx: UserContext = Depends(get_user_context),
                 svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    svc.delete_trade(ctx, trade_id)
    return {"deleted": True, "trade_id": trade_id}


# ────────────────────────────────────────────────────────────
# Dashboard & Analytics
# ────────────────────────────────────────────────────────────

@app.get("/api/dashboard")
def dashboard(from_date: Optional[date] = None, to_date: Optional[date] = None,
              ctx: UserContext = Depends(get_user_context),
              svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.get_dashboard(ctx, from_date=from_date, to_date=to_date)


@app.get("/api/edge/models")
def edge_models(ctx: UserContext = Depends(get_user_context),
                svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return {"models": svc.get_entry_models(ctx)}


@app.get("/api/edge")
def edge_stats(model: str = "",
               ctx: UserContext = Depends(get_user_context),
               svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.get_edge_stats(ctx, model=model)


@app.get("/api/news/events")
def news_events(ctx: UserContext = Depends(get_user_context),
                svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return {"events": svc.get_news_events(ctx)}


@app.get("/api/news")
def news_stats(selected: list[str] = Query(default=[]),
               ctx: UserContext = Depends(get_user_context),
               svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.get_news_stats(ctx, selected)


@app.get("/api/statistical-edge")
def statistical_edge(model: str = "all",
                     ctx: UserContext = Depends(get_user_context),
                     svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.get_statistical_edge(ctx, model=model)


@app.get("/api/statistical-edge/export")
def export_statistical_edge(model: str = "all",
                            ctx: UserContext = Depends(get_user_context),
                            svc: JournalService = Depends(get_service)) -> Response:
    csv_text = svc.export_statistical_edge(ctx, model=model)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="filtered_trades.csv"'},
    )


@app.get("/api/calendar")
def trading_calendar(year: int = Query(ge=1970, le=9999), month: int = Query(ge=1, le=12),
                     ctx: UserContext = Depends(get_user_context),
                     svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.get_calendar(ctx, year, month)


# ────────────────────────────────────────────────────────────
# Journal
# ────────────────────────────────────────────────────────────

@app.get("/api/journal")
def list_journal_entries(trade_id: str = "",
                         ctx: UserContext = Depends(get_user_context),
                         svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    entries = svc.list_journal_entries(ctx, trade_id=trade_id)
    return {"entries": entries, "total": len(entries)}


@app.post("/api/journal", status_code=201)
def create_journal_entry(body: JournalEntryCreate,
                         ctx: UserContext = Depends(get_user_context),
                         svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.add_journal_entry(ctx, body.model_dump())


@app.put("/api/journal/{entry_id}")
def update_journal_entry(entry_id: str, body: JournalEntryUpdate,
                         ctx: UserContext = Depends(get_user_context),
                         svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    return svc.update_journal_entry(ctx, entry_id, body.model_dump(exclude_unset=True))


@app.delete("/api/journal/{entry_id}")
def delete_journal_entry(entry_id: str,
                         ctx: UserContext = Depends(get_user_context),
                         svc: JournalService = Depends(get_service)) -> dict[str, Any]:
    svc.delete_journal_entry(ctx, entry_id)
    return {"deleted": True, "entry_id": entry_id}
