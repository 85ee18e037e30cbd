"""
Wrapped-Asset Index Oracle - Smoothed Exchange-Rate Module

This module turns a stream of raw vault exchange rates into a trusted price:
- HistoricalSeries: Append-only log of range-checked samples
- SwingGuard: Rejects samples that swing too far from the last accepted one
- Averager: Rolling average with an initialization phase
- PriceEngine: Update orchestration, price composition and administration
- IndexKeeper: Periodic update loop
- RateSource / AccessGate: External collaborators
"""

from .AccessGate import AccessGate, Whitelist
from .EngineConfig import EngineConfig
from .errors import (
    ArithmeticOverflowError,
    ConstructionError,
    EmptySeriesError,
    OracleError,
    RateSourceError,
    UnauthorizedError,
    ZeroSupplyError,
)
from .events import AnomalyDetected, AverageUpdated, ConfigChanged
from .HistoricalSeries import BASE, HistoricalSeries, Sample
from .IndexKeeper import IndexKeeper
from .PriceEngine import PriceEngine
from .RateSource import ContractRateSource, HttpRateSource, RateSource
from .SwingGuard import SwingDecision, SwingGuard

__all__ = [
    "AccessGate",
    "AnomalyDetected",
    "ArithmeticOverflowError",
    "AverageUpdated",
    "BASE",
    "ConfigChanged",
    "ConstructionError",
    "ContractRateSource",
    "EmptySeriesError",
    "EngineConfig",
    "HistoricalSeries",
    "HttpRateSource",
    "IndexKeeper",
    "OracleError",
    "PriceEngine",
    "RateSource",
    "RateSourceError",
    "Sample",
    "SwingDecision",
    "SwingGuard",
    "UnauthorizedError",
    "Whitelist",
    "ZeroSupplyError",
]
