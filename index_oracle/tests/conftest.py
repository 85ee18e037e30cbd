"""Shared fixtures for index oracle tests."""

from __future__ import annotations

import itertools
from typing import Callable

import pytest

from index_oracle.src.AccessGate import Whitelist
from index_oracle.src.EngineConfig import EngineConfig
from index_oracle.src.events import OracleEvent
from index_oracle.src.HistoricalSeries import BASE
from index_oracle.src.PriceEngine import PriceEngine
from index_oracle.src.RateSource import RateSource

OWNER = "0x" + "11" * 20
KEEPER = "0x" + "22" * 20
STRANGER = "0x" + "33" * 20

START_TIME = 1_700_000_000
PERIOD = 3600


class StubRateSource(RateSource):
    """In-memory rate source whose figures tests can change between calls."""

    def __init__(
        self,
        total_assets: int = BASE,
        total_supply: int = BASE,
        total_aum: int = BASE,
        total_aum_with_fee: int | None = None,
    ) -> None:
        self.assets = total_assets
        self.supply = total_supply
        self.aum = total_aum
        self.aum_with_fee = total_aum if total_aum_with_fee is None else total_aum_with_fee
        self.aum_calls: list[bool] = []
        self.closed = False

    def set_rate(self, rate: int) -> None:
        """Make the exchange rate equal ``rate`` by fixing supply at BASE."""
        self.supply = BASE
        self.assets = rate

    def total_assets(self) -> int:
        return self.assets

    def total_supply(self) -> int:
        return self.supply

    def total_aum(self, include_fee: bool) -> int:
        self.aum_calls.append(include_fee)
        return self.aum_with_fee if include_fee else self.aum

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def make_source() -> Callable[..., StubRateSource]:
    """Factory for stub rate sources."""
    return StubRateSource


@pytest.fixture
def index_source() -> StubRateSource:
    """Index source reporting an exchange rate of exactly 1.0."""
    return StubRateSource()


@pytest.fixture
def asset_source() -> StubRateSource:
    """Asset source reporting an underlying price of exactly 1.0."""
    return StubRateSource(total_aum=BASE, total_supply=1)


@pytest.fixture
def whitelist() -> Whitelist:
    """Whitelist owned by OWNER with KEEPER as sole member."""
    return Whitelist(OWNER, members=[KEEPER])


@pytest.fixture
def clock() -> Callable[[], float]:
    """Clock advancing by one period on every read."""
    ticks = itertools.count(START_TIME, PERIOD)
    return lambda: float(next(ticks))


@pytest.fixture
def events() -> list[OracleEvent]:
    """Collected engine events."""
    return []


@pytest.fixture
def make_engine(
    index_source: StubRateSource,
    asset_source: StubRateSource,
    whitelist: Whitelist,
    clock: Callable[[], float],
    events: list[OracleEvent],
) -> Callable[..., PriceEngine]:
    """Factory building an engine wired to the default fixtures."""

    def _make(
        config: EngineConfig | None = None,
        include_latest_in_warmup: bool = False,
    ) -> PriceEngine:
        return PriceEngine(
            owner=OWNER,
            index_source=index_source,
            asset_source=asset_source,
            access_gate=whitelist,
            config=config,
            clock=clock,
            listeners=[events.append],
            include_latest_in_warmup=include_latest_in_warmup,
        )

    return _make
