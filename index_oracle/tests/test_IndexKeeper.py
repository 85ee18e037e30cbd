"""Unit tests for IndexKeeper."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest

from index_oracle.src.HistoricalSeries import BASE
from index_oracle.src.IndexKeeper import IndexKeeper
from index_oracle.src.RateSource import ContractRateSource

from conftest import KEEPER, OWNER, STRANGER


def failing_contract_source(function: str) -> ContractRateSource:
    """Contract source whose given view function cannot reach the node."""
    contract = MagicMock()
    contract.address = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
    getattr(contract.functions, function).return_value.call.side_effect = (
        ConnectionError("rpc down")
    )
    return ContractRateSource(contract)


class TestIndexKeeperTick:
    """Test single update ticks."""

    def test_tick_appends_sample(self, make_engine, index_source) -> None:
        """A tick submits one update as the keeper."""
        engine = make_engine()
        keeper = IndexKeeper(engine, KEEPER)
        index_source.set_rate(1001 * BASE // 1000)

        sample = keeper.tick()

        assert sample.value == 1001 * BASE // 1000
        assert engine.series_length() == 2

    def test_tick_without_price(self, make_engine, asset_source) -> None:
        """The update stands even when the price cannot be composed."""
        engine = make_engine()
        keeper = IndexKeeper(engine, KEEPER)
        asset_source.supply = 0

        keeper.tick()

        assert engine.series_length() == 2

    def test_tick_price_rpc_failure(self, make_engine) -> None:
        """An unreachable asset node does not undo the committed update."""
        engine = make_engine()
        engine.set_asset_source(OWNER, failing_contract_source("getAum"))
        keeper = IndexKeeper(engine, KEEPER)

        sample = keeper.tick()

        assert engine.series_length() == 2
        assert engine.last_sample() == sample

    def test_minimum_period(self, make_engine) -> None:
        """The update period is at least one second."""
        keeper = IndexKeeper(make_engine(), KEEPER, update_period=0)
        assert keeper.update_period == 1


class TestIndexKeeperRun:
    """Test the update loop."""

    def test_run_updates_then_sleeps(self, make_engine) -> None:
        """The loop updates once per period until cancelled."""
        engine = make_engine()
        keeper = IndexKeeper(engine, KEEPER, update_period=60)

        with patch(
            "index_oracle.src.IndexKeeper.asyncio.sleep",
            side_effect=[None, asyncio.CancelledError()],
        ) as mock_sleep:
            with pytest.raises(asyncio.CancelledError):
                asyncio.run(keeper.run())

        assert engine.series_length() == 3
        mock_sleep.assert_called_with(60)

    def test_run_survives_failed_update(self, make_engine) -> None:
        """Failed updates are logged and the loop keeps going."""
        engine = make_engine()
        keeper = IndexKeeper(engine, STRANGER, update_period=60)

        with patch(
            "index_oracle.src.IndexKeeper.asyncio.sleep",
            side_effect=[None, asyncio.CancelledError()],
        ) as mock_sleep:
            with pytest.raises(asyncio.CancelledError):
                asyncio.run(keeper.run())

        assert engine.series_length() == 1
        assert mock_sleep.call_count == 2

    def test_run_survives_rpc_failure(self, make_engine) -> None:
        """An unreachable index node is retried on the next period."""
        engine = make_engine()
        engine.set_index_source(OWNER, failing_contract_source("totalSupply"))
        keeper = IndexKeeper(engine, KEEPER, update_period=60)

        with patch(
            "index_oracle.src.IndexKeeper.asyncio.sleep",
            side_effect=[None, asyncio.CancelledError()],
        ) as mock_sleep:
            with pytest.raises(asyncio.CancelledError):
                asyncio.run(keeper.run())

        assert engine.series_length() == 1
        assert mock_sleep.call_count == 2
