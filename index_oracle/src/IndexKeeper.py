"""IndexKeeper: Periodically submits index updates to the price engine.

The keeper is the whitelisted caller that drives the engine forward. Each tick
performs one complete update and reports the resulting price; ticks are spaced
``update_period`` seconds apart and never overlap.
"""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from .errors import OracleError
from .HistoricalSeries import BASE

if TYPE_CHECKING:
    from .HistoricalSeries import Sample
    from .PriceEngine import PriceEngine

logger = logging.getLogger(__name__)


class IndexKeeper:
    """Drives a PriceEngine on a fixed schedule.

    :ivar engine: Engine to update.
    :ivar keeper_address: Identity used when submitting updates.
    :ivar update_period: Seconds between updates.
    """

    def __init__(
        self,
        engine: PriceEngine,
        keeper_address: str,
        update_period: int = 3600,
    ) -> None:
        """Initialize the keeper.

        :param engine: Engine to update.
        :param keeper_address: Whitelisted address submitting updates.
        :param update_period: Seconds between updates (minimum: 1, default: 3600).
        """
        self.engine = engine
        self.keeper_address = keeper_address
        self.update_period = max(1, update_period)

    def tick(self) -> Sample:
        """Submit one update and log the resulting index and price.

        :returns: The appended sample.
        :raises OracleError: If the update fails.
        """
        sample = self.engine.submit_update(self.keeper_address)
        average = self.engine.average_index

        try:
            price = self.engine.get_price()
        except OracleError as e:
            logger.warning(f"Index updated but price unavailable: {e}")
            return sample

        logger.info(
            f"sample={sample.value / BASE:.6f} "
            f"average={average / BASE:.6f} "
            f"price={price / BASE:.6f} "
            f"(samples={self.engine.series_length()})"
        )
        return sample

    async def run(self) -> None:
        """Run the update loop until cancelled.

        Failed updates are logged and retried on the next period; no state is
        written by a failed update.
        """
        logger.info(
            f"Starting keeper loop for {self.keeper_address} "
            f"every {self.update_period}s"
        )

        while True:
            try:
                self.tick()
            except OracleError as e:
                logger.error(f"Update failed: {e}")
            await asyncio.sleep(self.update_period)
