"""HistoricalSeries: Append-only log of accepted rate samples.

Each sample pairs a unix timestamp with a rate scaled by ``BASE`` (10**18).
On-chain the two fields are packed into a single 256-bit slot, so the
timestamp is limited to 32 bits and the value to 224 bits. Those widths are
enforced when a :class:`Sample` is built; nothing is ever truncated.

.. code-block:: python

    >>> series = HistoricalSeries(Sample(timestamp=1_700_000_000, value=10**18))
    >>> series.append(Sample(timestamp=1_700_003_600, value=101 * 10**16))
    >>> len(series)
    2
    >>> series.last().value
    1010000000000000000
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .errors import ArithmeticOverflowError, EmptySeriesError

# Fixed-point scale used for rates, fractions and prices.
BASE = 10**18

TIMESTAMP_BITS = 32
VALUE_BITS = 224


@dataclass(frozen=True)
class Sample:
    """A timestamped rate observation.

    :ivar timestamp: Seconds since epoch.
    :ivar value: Rate scaled by BASE.
    :raises ArithmeticOverflowError: If either field is outside its width.
    """

    timestamp: int
    value: int

    def __post_init__(self) -> None:
        _check_width("timestamp", self.timestamp, TIMESTAMP_BITS)
        _check_width("value", self.value, VALUE_BITS)


def _check_width(field: str, value: int, bits: int) -> None:
    if not 0 <= value < 2**bits:
        raise ArithmeticOverflowError(field, value, bits)


class HistoricalSeries:
    """Ordered, append-only sequence of samples, indexed from 0.

    The series is created from its genesis sample and can never be empty
    afterwards. There is no API to remove or replace an entry.

    :ivar genesis: The first sample, used as the trust anchor.
    """

    def __init__(self, genesis: Sample) -> None:
        """Initialize the series with its genesis sample.

        :param genesis: First sample of the series.
        :raises TypeError: If genesis is not a Sample.
        """
        self._samples: list[Sample] = []
        self.append(genesis)

    @property
    def genesis(self) -> Sample:
        """Return the genesis sample."""
        return self._samples[0]

    def append(self, sample: Sample) -> None:
        """Append a sample to the end of the series.

        :param sample: Sample to append. Its fields were range-checked when it
            was built.
        :raises TypeError: If sample is not a Sample.
        """
        if not isinstance(sample, Sample):
            raise TypeError(f"Expected Sample, got {type(sample).__name__}")
        self._samples.append(sample)

    def last(self) -> Sample:
        """Return the most recently appended sample.

        :raises EmptySeriesError: If the series holds no samples.
        """
        if not self._samples:
            raise EmptySeriesError("Historical series is empty")
        return self._samples[-1]

    def length(self) -> int:
        """Return the number of samples."""
        return len(self._samples)

    def get(self, index: int) -> Sample:
        """Return the sample at a position.

        :param index: Position in ``[0, length)``.
        :raises IndexError: If index is out of range.
        """
        if not 0 <= index < len(self._samples):
            raise IndexError(
                f"Index {index} out of range for series of length {len(self._samples)}"
            )
        return self._samples[index]

    def values(self, start: int, stop: int) -> tuple[int, ...]:
        """Return sample values for indices ``[start, stop)``.

        :param start: First index, inclusive.
        :param stop: Last index, exclusive.
        :raises IndexError: If the range falls outside the series.
        """
        if not 0 <= start <= stop <= len(self._samples):
            raise IndexError(
                f"Range [{start}, {stop}) out of bounds for series of "
                f"length {len(self._samples)}"
            )
        return tuple(s.value for s in self._samples[start:stop])

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(tuple(self._samples))
