"""Entry point for the portfolio tracker.

Wires all components together, optionally embeds the FastAPI dashboard,
and starts the periodic refresh. When the dashboard is enabled (default),
the scheduler and the dashboard share a single asyncio event loop via
uvicorn's programmatic API and FastAPI's lifespan context manager. That
shared loop is the single writer for all portfolio state.

Component wiring order (in _build_components):
1. PortfolioDataSource (sample data)
2. PortfolioState (catalog, ledger, transaction log)
3. RefreshScheduler (periodic state.refresh)
"""

import asyncio
import signal
from contextlib import asynccontextmanager
from typing import Any

import uvicorn
from fastapi import FastAPI

from coinfolio.config import AppSettings
from coinfolio.exceptions import RefreshFetchError
from coinfolio.logging import get_logger, setup_logging
from coinfolio.refresh.scheduler import RefreshScheduler
from coinfolio.refresh.source import PortfolioDataSource, StaticDataSource, sample_data_source
from coinfolio.state import PortfolioState


def _build_components(
    settings: AppSettings,
    source: PortfolioDataSource | None = None,
) -> dict[str, Any]:
    """Build the data source, state owner, and scheduler from settings.

    Does NOT load data or start the scheduler -- that happens in
    _start_components().

    Args:
        settings: Application-wide settings.
        source: Data source override; defaults to the sample source or an
            empty one depending on ``settings.seed.sample_data``.

    Returns:
        Dict mapping component names to instances.
    """
    if source is None:
        if settings.seed.sample_data:
            source = sample_data_source(settings.seed.default_favorites)
        else:
            source = StaticDataSource([], [])

    state = PortfolioState()

    async def _refresh() -> None:
        await state.refresh(source)

    scheduler = RefreshScheduler(
        action=_refresh,
        interval=settings.refresh.interval_seconds,
    )

    return {
        "data_source": source,
        "portfolio_state": state,
        "scheduler": scheduler,
    }


async def _start_components(settings: AppSettings, components: dict[str, Any]) -> None:
    """Load initial data and start auto-refresh if configured."""
    logger = get_logger("coinfolio.main")
    try:
        await components["portfolio_state"].refresh(components["data_source"])
    except RefreshFetchError:
        # Start empty; the scheduler retries on its next tick.
        logger.warning("initial_load_failed", exc_info=True)

    if settings.refresh.auto_start:
        await components["scheduler"].start()


def _setup_signal_handlers(stop_event: asyncio.Event) -> None:
    """Register SIGINT/SIGTERM to request a graceful shutdown."""
    logger = get_logger("coinfolio.main")
    loop = asyncio.get_running_loop()

    def _graceful_handler() -> None:
        logger.info("graceful_shutdown_signal")
        stop_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _graceful_handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage component lifecycle within the FastAPI application.

    On startup: stores components on app.state, loads initial data, starts
    the refresh scheduler. On shutdown: stops the scheduler.
    """
    logger = get_logger("coinfolio.main")
    settings = app.state.settings
    components = app.state.components

    app.state.portfolio_state = components["portfolio_state"]
    app.state.scheduler = components["scheduler"]
    app.state.data_source = components["data_source"]

    await _start_components(settings, components)
    logger.info("lifespan_started", auto_refresh=settings.refresh.auto_start)

    yield

    await components["scheduler"].stop()
    logger.info("coinfolio_stopped")


async def run() -> None:
    """Run the portfolio tracker.

    With the dashboard enabled, uvicorn serves the API and the lifespan
    manages startup/shutdown. With it disabled, the scheduler runs headless
    until SIGINT/SIGTERM.
    """
    settings = AppSettings()

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("coinfolio.main")

    components = _build_components(settings)

    if settings.dashboard.enabled:
        from coinfolio.dashboard.app import create_dashboard_app

        app = create_dashboard_app(lifespan=lifespan)
        app.state.settings = settings
        app.state.components = components

        logger.info(
            "starting_with_dashboard",
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            refresh_interval=settings.refresh.interval_seconds,
        )

        config = uvicorn.Config(
            app,
            host=settings.dashboard.host,
            port=settings.dashboard.port,
            log_level="warning",
        )
        server = uvicorn.Server(config)
        await server.serve()
    else:
        stop_event = asyncio.Event()
        _setup_signal_handlers(stop_event)

        logger.info(
            "starting_without_dashboard",
            refresh_interval=settings.refresh.interval_seconds,
        )

        await _start_components(settings, components)
        try:
            await stop_event.wait()
        finally:
            await components["scheduler"].stop()
            logger.info("coinfolio_stopped")


def main() -> None:
    """Synchronous entry point."""
    asyncio.run(run())


if __name__ == "__main__":
    main()
