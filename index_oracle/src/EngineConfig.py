"""EngineConfig: Validated configuration for the price engine."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from .HistoricalSeries import BASE

DEFAULT_WINDOW_SIZE = 24
DEFAULT_MAX_SWING = BASE // 100  # 1%


@dataclass(frozen=True)
class EngineConfig:
    """Configuration read by the engine at the start of every operation.

    :ivar window_size: Number of samples averaged once the series has filled.
    :ivar max_swing: Maximum deviation between consecutive samples, as a
        fraction of BASE.
    :ivar decimal_adjustment: Multiplier applied to ``total_aum // total_supply``
        to bring the underlying price to BASE scale.
    :ivar include_fee: Passed through to ``RateSource.total_aum``.
    """

    window_size: int = DEFAULT_WINDOW_SIZE
    max_swing: int = DEFAULT_MAX_SWING
    decimal_adjustment: int = 1
    include_fee: bool = False

    def __post_init__(self) -> None:
        if self.window_size < 1:
            raise ValueError("window_size must be at least 1")
        if not 0 <= self.max_swing <= BASE:
            raise ValueError(f"max_swing must be between 0 and {BASE}")
        if self.decimal_adjustment < 1:
            raise ValueError("decimal_adjustment must be at least 1")

    @staticmethod
    def percent_to_fraction(percent: float | str) -> int:
        """Convert a percentage into a fraction of BASE.

        Goes through Decimal so that e.g. 0.1 converts exactly. Sub-unit
        remainders are truncated.

        :param percent: Percentage (e.g., 1.0 for 1%).
        :returns: Fraction scaled by BASE.

        .. code-block:: python

            >>> EngineConfig.percent_to_fraction(1.0)
            10000000000000000
        """
        return int(Decimal(str(percent)) * BASE / 100)
