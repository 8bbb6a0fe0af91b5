"""Tests for the dashboard JSON and command endpoints.

Uses FastAPI's TestClient against an app wired with an in-memory state,
a static data source, and a scheduler with a long interval.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from coinfolio.dashboard.app import create_dashboard_app
from coinfolio.market.catalog import CoinCatalog
from coinfolio.models import TradeSide, Transaction
from coinfolio.portfolio.ledger import HoldingsLedger
from coinfolio.portfolio.transactions import TransactionLog
from coinfolio.refresh.scheduler import RefreshScheduler
from coinfolio.refresh.source import StaticDataSource
from coinfolio.state import PortfolioState


@pytest.fixture
def client(sample_catalog, sample_holdings, make_coin):
    state = PortfolioState(
        catalog=CoinCatalog(sample_catalog),
        ledger=HoldingsLedger(sample_holdings),
        transactions=TransactionLog([
            Transaction(
                id="sys-1", coin_symbol="BTC", side=TradeSide.BUY,
                quantity=Decimal("1"), price_per_unit=Decimal("20000"),
            ),
        ]),
    )
    source = StaticDataSource(
        [make_coin("BTC", price="40000"), make_coin("ETH"), make_coin("SOL")]
    )

    async def _refresh() -> None:
        await state.refresh(source)

    app = create_dashboard_app()
    app.state.portfolio_state = state
    app.state.data_source = source
    app.state.scheduler = RefreshScheduler(action=_refresh, interval=3600.0)

    with TestClient(app) as test_client:
        yield test_client
        test_client.post("/actions/refresh/stop")


def _symbols(rows) -> list[str]:
    return [row["symbol"] for row in rows]


class TestReads:
    def test_catalog_and_watchlist(self, client: TestClient) -> None:
        assert _symbols(client.get("/api/catalog").json()) == ["BTC", "ETH", "SOL"]
        assert _symbols(client.get("/api/watchlist").json()) == ["ETH"]

    def test_holdings_serialized(self, client: TestClient) -> None:
        rows = client.get("/api/holdings").json()
        assert rows[0]["current_value"] == "35000"
        assert rows[0]["profit_loss"] == "15000"
        assert rows[0]["purchase_date"].startswith("2024-01-01")

    def test_summary(self, client: TestClient) -> None:
        summary = client.get("/api/summary").json()
        assert summary["total_value"] == "53000"
        assert summary["holdings_count"] == 2

    def test_status(self, client: TestClient) -> None:
        status = client.get("/api/status").json()
        assert status["state"] == "idle"
        assert status["last_refresh_at"] is None


class TestWatchlistActions:
    def test_toggle(self, client: TestClient) -> None:
        body = client.post("/actions/coins/btc/toggle-favorite").json()
        assert body["changed"] is True
        assert _symbols(body["watchlist"]) == ["ETH", "BTC"]

    def test_toggle_unknown(self, client: TestClient) -> None:
        resp = client.post("/actions/coins/doge/toggle-favorite")
        assert resp.status_code == 200
        assert resp.json()["changed"] is False

    def test_remove_idempotent(self, client: TestClient) -> None:
        assert client.delete("/actions/watchlist/eth").json()["changed"] is True
        assert client.delete("/actions/watchlist/eth").json()["changed"] is False

    def test_reorder(self, client: TestClient) -> None:
        client.post("/actions/coins/sol/toggle-favorite")
        resp = client.post(
            "/actions/watchlist/reorder",
            json={"source_indices": [1], "destination": 0},
        )
        assert resp.status_code == 200
        assert _symbols(resp.json()["watchlist"]) == ["SOL", "ETH"]

    def test_reorder_out_of_range(self, client: TestClient) -> None:
        resp = client.post(
            "/actions/watchlist/reorder",
            json={"source_indices": [2], "destination": 0},
        )
        assert resp.status_code == 422
        assert resp.json()["size"] == 1
        assert _symbols(client.get("/api/catalog").json()) == ["BTC", "ETH", "SOL"]


class TestLedgerActions:
    def test_add_holding(self, client: TestClient) -> None:
        resp = client.post("/actions/holdings", json={
            "coin_name": "Solana",
            "coin_symbol": "SOL",
            "quantity": "100",
            "current_price": "20",
            "cost_basis": "2000",
        })
        assert resp.status_code == 201
        assert resp.json()["is_favorite"] is False
        assert client.get("/api/summary").json()["total_value"] == "55000"

    def test_add_holding_with_favorite_and_daily_change(self, client: TestClient) -> None:
        resp = client.post("/actions/holdings", json={
            "coin_name": "Solana",
            "coin_symbol": "SOL",
            "quantity": "100",
            "current_price": "20",
            "cost_basis": "2000",
            "is_favorite": True,
            "daily_change": "1.5",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["is_favorite"] is True
        assert body["daily_change"] == "1.5"
        assert client.get("/api/holdings").json()[-1]["is_favorite"] is True

    def test_add_holding_negative_quantity(self, client: TestClient) -> None:
        resp = client.post("/actions/holdings", json={
            "coin_name": "Solana",
            "coin_symbol": "SOL",
            "quantity": "-1",
            "current_price": "20",
            "cost_basis": "0",
        })
        assert resp.status_code == 422

    def test_remove_holdings(self, client: TestClient) -> None:
        body = client.post("/actions/holdings/remove", json={"indices": [0]}).json()
        assert body["removed"] == ["h-btc"]
        assert body["total_value"] == "18000"

    def test_remove_holdings_out_of_range(self, client: TestClient) -> None:
        resp = client.post("/actions/holdings/remove", json={"indices": [0, 5]})
        assert resp.status_code == 422
        assert len(client.get("/api/holdings").json()) == 2

    def test_toggle_holding_favorite(self, client: TestClient) -> None:
        assert client.post("/actions/holdings/h-eth/toggle-favorite").json()["changed"] is True
        assert client.get("/api/holdings").json()[1]["is_favorite"] is True

    def test_manual_transaction_roundtrip(self, client: TestClient) -> None:
        created = client.post("/actions/transactions", json={
            "coin_symbol": "ETH",
            "side": "buy",
            "quantity": "2",
            "price_per_unit": "1800",
        }).json()
        assert created["is_manual"] is True
        assert created["total_value"] == "3600"

        assert client.delete(f"/actions/transactions/{created['id']}").json()["changed"] is True
        assert [tx["id"] for tx in client.get("/api/transactions").json()] == ["sys-1"]

    def test_system_transaction_not_deletable(self, client: TestClient) -> None:
        assert client.delete("/actions/transactions/sys-1").json()["changed"] is False
        assert len(client.get("/api/transactions").json()) == 1


class TestRefreshActions:
    def test_start_stop(self, client: TestClient) -> None:
        assert client.post("/actions/refresh/start").json()["state"] == "running"
        assert client.post("/actions/refresh/start").json()["state"] == "running"
        assert client.post("/actions/refresh/stop").json()["state"] == "idle"
        assert client.post("/actions/refresh/stop").json()["state"] == "idle"

    def test_refresh_now_keeps_favorites(self, client: TestClient) -> None:
        client.post("/actions/coins/btc/toggle-favorite")
        body = client.post("/actions/refresh/now").json()
        assert body["refreshed"] is True

        assert _symbols(client.get("/api/watchlist").json()) == ["ETH", "BTC"]
        btc = client.get("/api/catalog").json()[-1]
        assert btc["price"] == "40000"
        assert client.get("/api/status").json()["last_refresh_at"] is not None

    def test_refresh_now_keeps_added_holding(self, client: TestClient) -> None:
        client.post("/actions/holdings", json={
            "coin_name": "Solana",
            "coin_symbol": "SOL",
            "quantity": "100",
            "current_price": "20",
            "cost_basis": "2000",
        })
        client.post("/actions/refresh/now")
        holdings = client.get("/api/holdings").json()
        assert [h["coin_symbol"] for h in holdings] == ["BTC", "ETH", "SOL"]
        assert client.get("/api/summary").json()["total_value"] == "55000"
