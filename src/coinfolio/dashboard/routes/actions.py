"""Command endpoints: watchlist edits, ledger edits, and refresh control.

Every handler dispatches onto PortfolioState, which serializes the write
with the refresh scheduler. Unknown ids are reported as
``{"changed": false}``; out-of-range positions are rejected with 422.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from coinfolio.dashboard.serialize import holding_to_dict, to_jsonable, transaction_to_dict
from coinfolio.exceptions import IndexOutOfRangeError, RefreshFetchError
from coinfolio.models import TradeSide, Transaction

log = structlog.get_logger(__name__)

router = APIRouter()


class ReorderRequest(BaseModel):
    source_indices: list[int] = Field(min_length=1)
    destination: int


class RemoveHoldingsRequest(BaseModel):
    indices: list[int]


class AddHoldingRequest(BaseModel):
    coin_name: str
    coin_symbol: str
    quantity: Decimal = Field(ge=0)
    current_price: Decimal = Field(ge=0)
    cost_basis: Decimal = Field(ge=0)
    image_url: str | None = None
    purchase_date: datetime | None = None
    is_favorite: bool = False
    daily_change: Decimal = Decimal("0")


class ManualTransactionRequest(BaseModel):
    coin_symbol: str
    side: TradeSide
    quantity: Decimal = Field(gt=0)
    price_per_unit: Decimal = Field(ge=0)
    timestamp: datetime | None = None


def _index_error(exc: IndexOutOfRangeError) -> JSONResponse:
    return JSONResponse(
        content={"error": str(exc), "indices": exc.indices, "size": exc.size},
        status_code=422,
    )


# ---------------------------------------------------------------------------
# Watchlist
# ---------------------------------------------------------------------------


@router.post("/coins/{coin_id}/toggle-favorite")
async def toggle_favorite(request: Request, coin_id: str) -> JSONResponse:
    state = request.app.state.portfolio_state
    changed = await state.toggle_favorite(coin_id)
    return JSONResponse(content={"changed": changed, "watchlist": to_jsonable(state.watchlist())})


@router.delete("/watchlist/{coin_id}")
async def remove_from_watchlist(request: Request, coin_id: str) -> JSONResponse:
    state = request.app.state.portfolio_state
    changed = await state.remove_from_watchlist(coin_id)
    return JSONResponse(content={"changed": changed, "watchlist": to_jsonable(state.watchlist())})


@router.post("/watchlist/reorder")
async def reorder_watchlist(request: Request, body: ReorderRequest) -> JSONResponse:
    state = request.app.state.portfolio_state
    try:
        await state.reorder_favorites(body.source_indices, body.destination)
    except IndexOutOfRangeError as e:
        log.info("watchlist_reorder_rejected", error=str(e))
        return _index_error(e)
    return JSONResponse(content={"changed": True, "watchlist": to_jsonable(state.watchlist())})


# ---------------------------------------------------------------------------
# Holdings and transactions
# ---------------------------------------------------------------------------


@router.post("/holdings")
async def add_holding(request: Request, body: AddHoldingRequest) -> JSONResponse:
    state = request.app.state.portfolio_state
    holding = await state.add_holding(**body.model_dump())
    return JSONResponse(content=holding_to_dict(holding), status_code=201)


@router.post("/holdings/remove")
async def remove_holdings(request: Request, body: RemoveHoldingsRequest) -> JSONResponse:
    state = request.app.state.portfolio_state
    try:
        removed = await state.remove_holdings(body.indices)
    except IndexOutOfRangeError as e:
        log.info("holding_removal_rejected", error=str(e))
        return _index_error(e)
    return JSONResponse(content={
        "changed": bool(removed),
        "removed": [h.id for h in removed],
        "total_value": str(state.total_value),
    })


@router.post("/holdings/{holding_id}/toggle-favorite")
async def toggle_holding_favorite(request: Request, holding_id: str) -> JSONResponse:
    state = request.app.state.portfolio_state
    changed = await state.toggle_holding_favorite(holding_id)
    return JSONResponse(content={"changed": changed})


@router.post("/transactions")
async def add_manual_transaction(request: Request, body: ManualTransactionRequest) -> JSONResponse:
    """Record a user-entered transaction. These are the only deletable rows."""
    state = request.app.state.portfolio_state
    fields = body.model_dump(exclude_none=True)
    tx = Transaction(is_manual=True, **fields)
    await state.record_transaction(tx)
    return JSONResponse(content=transaction_to_dict(tx), status_code=201)


@router.delete("/transactions/{tx_id}")
async def delete_manual_transaction(request: Request, tx_id: str) -> JSONResponse:
    state = request.app.state.portfolio_state
    target = next((tx for tx in state.transactions() if tx.id == tx_id and tx.is_manual), None)
    if target is None:
        return JSONResponse(content={"changed": False})
    changed = await state.delete_manual_transaction(target)
    return JSONResponse(content={"changed": changed})


# ---------------------------------------------------------------------------
# Refresh control
# ---------------------------------------------------------------------------


@router.post("/refresh/start")
async def start_refresh(request: Request) -> JSONResponse:
    scheduler = request.app.state.scheduler
    await scheduler.start()
    log.info("auto_refresh_started_via_dashboard")
    return JSONResponse(content=scheduler.get_status())


@router.post("/refresh/stop")
async def stop_refresh(request: Request) -> JSONResponse:
    scheduler = request.app.state.scheduler
    await scheduler.stop()
    log.info("auto_refresh_stopped_via_dashboard")
    return JSONResponse(content=scheduler.get_status())


@router.post("/refresh/now")
async def refresh_now(request: Request) -> JSONResponse:
    """Run one refresh immediately, outside the periodic schedule."""
    state = request.app.state.portfolio_state
    source = request.app.state.data_source
    try:
        await state.refresh(source)
    except RefreshFetchError as e:
        return JSONResponse(content={"error": str(e)}, status_code=502)
    return JSONResponse(content={"refreshed": True, "total_value": str(state.total_value)})
