"""PriceEngine: Smoothed index updates and composite price reads.

This module holds the only stateful part of the oracle:
- The append-only historical series of accepted exchange-rate samples
- The published average index, recomputed after every update
- Owner-gated configuration and collaborator references

Update flow:
    1. Check the caller against the access gate
    2. Read a fresh exchange rate from the index source
    3. Run the swing guard against the last accepted sample
    4. Append the fresh rate, or the previous value if rejected
    5. Recompute the average and notify listeners

All public operations are serialized by a single lock, and every failure is
raised before the series is touched, so an update either fully happens or
leaves no trace.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import replace
from typing import Any, Callable, Iterable

from . import Averager
from .AccessGate import AccessGate, normalize_identity, require_owner
from .EngineConfig import EngineConfig
from .errors import ConstructionError, UnauthorizedError, ZeroSupplyError
from .events import AverageUpdated, ConfigChanged, EventListener, OracleEvent, emit
from .HistoricalSeries import BASE, HistoricalSeries, Sample
from .RateSource import RateSource
from .SwingGuard import SwingGuard

logger = logging.getLogger(__name__)


class PriceEngine:
    """Maintains the smoothed exchange-rate index and composes the final price.

    :ivar owner: Address allowed to change configuration.
    :ivar index_source: Source of the wrapped-asset exchange rate.
    :ivar asset_source: Source of the underlying asset price.
    :ivar access_gate: Decides who may submit updates.
    :ivar config: Current configuration.
    :ivar include_latest_in_warmup: Use the corrected initialization-phase
        average that includes the newest sample.
    :ivar listeners: Receivers of engine events.
    """

    def __init__(
        self,
        owner: str,
        index_source: RateSource,
        asset_source: RateSource,
        access_gate: AccessGate,
        config: EngineConfig | None = None,
        clock: Callable[[], float] = time.time,
        listeners: Iterable[EventListener] = (),
        include_latest_in_warmup: bool = False,
    ) -> None:
        """Initialize the engine and seed the genesis sample.

        :param owner: Address allowed to change configuration.
        :param index_source: Source of the wrapped-asset exchange rate.
        :param asset_source: Source of the underlying asset price.
        :param access_gate: Decides who may submit updates.
        :param config: Initial configuration (default: EngineConfig()).
        :param clock: Callable returning the current unix time.
        :param listeners: Receivers of engine events.
        :param include_latest_in_warmup: Include the newest sample when
            averaging during the initialization phase.
        :raises ConstructionError: If the seed exchange rate is zero or
            cannot be computed.
        """
        self.owner = normalize_identity(owner)
        self.index_source = index_source
        self.asset_source = asset_source
        self.access_gate = access_gate
        self.config = config or EngineConfig()
        self.clock = clock
        self.listeners: list[EventListener] = list(listeners)
        self.include_latest_in_warmup = include_latest_in_warmup
        self._lock = threading.Lock()

        try:
            seed = self.exchange_rate()
        except ZeroSupplyError as e:
            raise ConstructionError(f"Cannot read seed exchange rate: {e}") from e
        if seed == 0:
            raise ConstructionError("Seed exchange rate is zero")

        self.series = HistoricalSeries(Sample(timestamp=self._now(), value=seed))
        self._average_index = Averager.recompute(
            self.series,
            self.config.window_size,
            include_latest=self.include_latest_in_warmup,
        )

        logger.info(
            f"PriceEngine initialized: seed={seed}, "
            f"window_size={self.config.window_size}, "
            f"max_swing={self.config.max_swing}, "
            f"average_index={self._average_index}"
        )

    def _now(self) -> int:
        return int(self.clock())

    # Reads

    @property
    def average_index(self) -> int:
        """Return the published average index, scaled by BASE."""
        return self._average_index

    @property
    def window_size(self) -> int:
        """Return the configured window size."""
        return self.config.window_size

    @property
    def max_swing(self) -> int:
        """Return the configured maximum swing, as a fraction of BASE."""
        return self.config.max_swing

    def series_length(self) -> int:
        """Return the number of samples recorded so far."""
        with self._lock:
            return self.series.length()

    def historical_index(self, index: int) -> Sample:
        """Return a recorded sample by position.

        :param index: Position in ``[0, series_length())``.
        :raises IndexError: If index is out of range.
        """
        with self._lock:
            return self.series.get(index)

    def last_sample(self) -> Sample:
        """Return the most recently recorded sample."""
        with self._lock:
            return self.series.last()

    def exchange_rate(self) -> int:
        """Read the current exchange rate of the wrapped asset.

        :returns: ``total_assets * BASE // total_supply``.
        :raises ZeroSupplyError: If the index source reports zero supply.
        """
        source = self.index_source
        assets, supply = source.asset_totals()
        if supply == 0:
            raise ZeroSupplyError(f"{source!r} reports zero total supply")
        return assets * BASE // supply

    def get_underlying_price(self) -> int:
        """Read the current price of the underlying asset.

        :returns: ``(total_aum // total_supply) * decimal_adjustment``.
        :raises ZeroSupplyError: If the asset source reports zero supply.
        """
        config = self.config
        source = self.asset_source
        aum, supply = source.aum_totals(config.include_fee)
        if supply == 0:
            raise ZeroSupplyError(f"{source!r} reports zero total supply")
        return (aum // supply) * config.decimal_adjustment

    def get_price(self) -> int:
        """Compose the final price from the average index and underlying price.

        :returns: ``average_index * underlying_price // BASE``.
        :raises ZeroSupplyError: If the asset source reports zero supply.
        """
        with self._lock:
            average = self._average_index
            return average * self.get_underlying_price() // BASE

    # Updates

    def submit_update(self, caller: str) -> Sample:
        """Record a fresh exchange-rate sample and recompute the average.

        Each successful call appends exactly one sample. A rate outside the
        allowed swing is replaced by the previous value and reported as an
        AnomalyDetected event.

        :param caller: Address submitting the update.
        :returns: The appended sample.
        :raises UnauthorizedError: If the access gate rejects the caller.
        :raises ZeroSupplyError: If the index source reports zero supply.
        """
        with self._lock:
            if not self.access_gate.is_authorized(caller):
                raise UnauthorizedError(caller, "submit updates")

            config = self.config
            candidate = self.exchange_rate()
            previous = self.series.last()
            timestamp = self._now()

            decision = SwingGuard(config.max_swing).check(
                previous.value, candidate, timestamp
            )
            sample = Sample(timestamp=timestamp, value=decision.value)

            self.series.append(sample)
            self._average_index = Averager.recompute(
                self.series,
                config.window_size,
                include_latest=self.include_latest_in_warmup,
            )
            average = self._average_index
            length = self.series.length()

        if decision.anomaly is not None:
            logger.warning(
                f"Anomaly: rate {candidate} outside {config.max_swing}/{BASE} "
                f"swing of {previous.value}, keeping previous value"
            )
            self._emit(decision.anomaly)

        logger.info(
            f"Index updated at {timestamp}: sample={sample.value}, "
            f"average_index={average}, length={length}"
        )
        self._emit(AverageUpdated(new_average=average, timestamp=timestamp))
        return sample

    # Administration

    def set_window_size(self, caller: str, window_size: int) -> None:
        """Change the averaging window; applies from the next update.

        :raises UnauthorizedError: If caller is not the owner.
        :raises ValueError: If window_size is less than 1.
        """
        self._update_config(caller, "window_size", window_size)

    def set_max_swing(self, caller: str, max_swing: int) -> None:
        """Change the maximum swing fraction.

        :raises UnauthorizedError: If caller is not the owner.
        :raises ValueError: If max_swing is outside ``[0, BASE]``.
        """
        self._update_config(caller, "max_swing", max_swing)

    def set_decimal_adjustment(self, caller: str, decimal_adjustment: int) -> None:
        """Change the underlying price scale multiplier.

        :raises UnauthorizedError: If caller is not the owner.
        :raises ValueError: If decimal_adjustment is less than 1.
        """
        self._update_config(caller, "decimal_adjustment", decimal_adjustment)

    def set_include_fee(self, caller: str, include_fee: bool) -> None:
        """Change whether pending fees count towards AUM.

        :raises UnauthorizedError: If caller is not the owner.
        """
        self._update_config(caller, "include_fee", include_fee)

    def set_index_source(self, caller: str, source: RateSource) -> None:
        """Repoint the exchange-rate source.

        :raises UnauthorizedError: If caller is not the owner.
        """
        self._update_attr(caller, "index_source", source)

    def set_asset_source(self, caller: str, source: RateSource) -> None:
        """Repoint the underlying asset price source.

        :raises UnauthorizedError: If caller is not the owner.
        """
        self._update_attr(caller, "asset_source", source)

    def set_access_gate(self, caller: str, access_gate: AccessGate) -> None:
        """Replace the access gate for update submitters.

        :raises UnauthorizedError: If caller is not the owner.
        """
        self._update_attr(caller, "access_gate", access_gate)

    def transfer_ownership(self, caller: str, new_owner: str) -> None:
        """Hand configuration rights to another address.

        :raises UnauthorizedError: If caller is not the owner.
        :raises ValueError: If new_owner is not a valid address.
        """
        self._update_attr(caller, "owner", normalize_identity(new_owner))

    def _require_owner(self, caller: str, action: str) -> None:
        require_owner(self.owner, caller, action)

    def _update_config(self, caller: str, name: str, value: Any) -> None:
        with self._lock:
            self._require_owner(caller, f"set {name}")
            old_value = getattr(self.config, name)
            self.config = replace(self.config, **{name: value})
        self._announce(name, old_value, value)

    def _update_attr(self, caller: str, name: str, value: Any) -> None:
        with self._lock:
            self._require_owner(caller, f"set {name}")
            old_value = getattr(self, name)
            setattr(self, name, value)
        self._announce(name, old_value, value)

    def _announce(self, name: str, old_value: Any, new_value: Any) -> None:
        logger.info(f"{name} changed: {old_value!r} -> {new_value!r}")
        self._emit(ConfigChanged(name=name, old_value=old_value, new_value=new_value))

    def _emit(self, event: OracleEvent) -> None:
        emit(self.listeners, event)
