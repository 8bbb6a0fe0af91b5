"""Refresh layer -- data sources and the periodic refresh scheduler."""

from coinfolio.refresh.scheduler import RefreshScheduler, SchedulerState
from coinfolio.refresh.source import PortfolioDataSource, StaticDataSource, sample_data_source

__all__ = [
    "PortfolioDataSource",
    "RefreshScheduler",
    "SchedulerState",
    "StaticDataSource",
    "sample_data_source",
]
