"""JSON read endpoints for the catalog, watchlist, ledger, and refresh status."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from coinfolio.dashboard.serialize import holding_to_dict, to_jsonable, transaction_to_dict

log = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/catalog")
async def get_catalog(request: Request) -> JSONResponse:
    """All tracked coins in stored order."""
    state = request.app.state.portfolio_state
    return JSONResponse(content=to_jsonable(state.catalog()))


@router.get("/watchlist")
async def get_watchlist(request: Request) -> JSONResponse:
    """Favorite coins in watchlist order."""
    state = request.app.state.portfolio_state
    return JSONResponse(content=to_jsonable(state.watchlist()))


@router.get("/holdings")
async def get_holdings(request: Request) -> JSONResponse:
    """Holdings in ledger order with value and profit/loss."""
    state = request.app.state.portfolio_state
    return JSONResponse(content=[holding_to_dict(h) for h in state.holdings()])


@router.get("/transactions")
async def get_transactions(request: Request) -> JSONResponse:
    state = request.app.state.portfolio_state
    return JSONResponse(content=[transaction_to_dict(tx) for tx in state.transactions()])


@router.get("/summary")
async def get_summary(request: Request) -> JSONResponse:
    """Portfolio valuation summary, recomputed on every request."""
    state = request.app.state.portfolio_state
    return JSONResponse(content=to_jsonable(state.get_portfolio_summary()))


@router.get("/status")
async def get_status(request: Request) -> JSONResponse:
    """Refresh scheduler status plus the time of the last applied refresh."""
    state = request.app.state.portfolio_state
    scheduler = request.app.state.scheduler
    status = scheduler.get_status()
    status["last_refresh_at"] = state.last_refresh_at
    return JSONResponse(content=to_jsonable(status))
