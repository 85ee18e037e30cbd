"""Averager: Windowed arithmetic mean over the tail of the historical series.

Two phases are selected by ``latest_index = length - 1``:

Initialization (``latest_index <= window_size``)
    Sum of values at indices ``[0, latest_index)`` divided by ``length``.
    The most recent sample is left out of the sum but counted in the divisor.
    This mirrors the deployed feed and is kept as the default; pass
    ``include_latest=True`` for the corrected variant that sums
    ``[0, latest_index]``.

Steady state (``latest_index > window_size``)
    Sum of the ``window_size`` most recent values divided by ``window_size``.

Both phases use truncating integer division.

.. code-block:: python

    >>> series = HistoricalSeries(Sample(0, 10))
    >>> for v in (20, 30):
    ...     series.append(Sample(0, v))
    >>> recompute(series, window_size=5)
    10
    >>> recompute(series, window_size=5, include_latest=True)
    20
"""

from __future__ import annotations

from .HistoricalSeries import HistoricalSeries


def is_warming_up(series: HistoricalSeries, window_size: int) -> bool:
    """Check whether the series is still in its initialization phase.

    :param series: Historical series.
    :param window_size: Configured window size.
    :returns: True while ``length - 1 <= window_size``.
    """
    return series.length() - 1 <= window_size


def recompute(
    series: HistoricalSeries,
    window_size: int,
    *,
    include_latest: bool = False,
) -> int:
    """Compute the moving average for the current series.

    :param series: Historical series, never empty.
    :param window_size: Number of samples averaged once the series has filled.
    :param include_latest: Include the most recent sample during the
        initialization phase.
    :returns: Average value scaled by BASE.
    :raises ValueError: If window_size is less than 1.
    """
    if window_size < 1:
        raise ValueError("window_size must be at least 1")

    length = series.length()
    latest_index = length - 1

    if is_warming_up(series, window_size):
        stop = latest_index + 1 if include_latest else latest_index
        return sum(series.values(0, stop)) // length

    start = latest_index - window_size + 1
    return sum(series.values(start, latest_index + 1)) // window_size
