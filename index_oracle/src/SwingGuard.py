"""SwingGuard: Bounded-swing acceptance check for fresh rate samples.

Algorithm:
    1. allowable = previous * max_swing // BASE
    2. Accept the candidate iff previous - allowable <= candidate <= previous + allowable
    3. On rejection, keep the previous value and report an anomaly

Both bounds are inclusive. A rejection is an expected outcome, not an error.

.. code-block:: python

    >>> guard = SwingGuard(max_swing=10**16)  # 1%
    >>> guard.accept(10**18, 101 * 10**16)
    True
    >>> decision = guard.check(10**18, 2 * 10**18, timestamp=1_700_000_000)
    >>> decision.accepted, decision.value == 10**18
    (False, True)
"""

from __future__ import annotations

from dataclasses import dataclass

from .events import AnomalyDetected
from .HistoricalSeries import BASE


@dataclass(frozen=True)
class SwingDecision:
    """Outcome of a swing check.

    :ivar accepted: Whether the candidate was within bounds.
    :ivar value: Value to record: the candidate if accepted, else the previous value.
    :ivar anomaly: Anomaly record when the candidate was rejected.
    """

    accepted: bool
    value: int
    anomaly: AnomalyDetected | None = None


class SwingGuard:
    """Rejects candidates that deviate too far from the last accepted value.

    :ivar max_swing: Maximum allowed relative deviation as a fraction of BASE.
    """

    def __init__(self, max_swing: int) -> None:
        """Initialize the guard.

        :param max_swing: Maximum deviation as a fraction of BASE (10**16 is 1%).
        :raises ValueError: If max_swing is outside ``[0, BASE]``.
        """
        if not 0 <= max_swing <= BASE:
            raise ValueError(f"max_swing must be between 0 and {BASE}")
        self.max_swing = max_swing

    def bounds(self, previous: int) -> tuple[int, int]:
        """Return the closed acceptance interval around a previous value.

        :param previous: Last accepted value.
        :returns: Tuple of (lower, upper) bounds, both inclusive.
        """
        allowable = previous * self.max_swing // BASE
        return previous - allowable, previous + allowable

    def accept(self, previous: int, candidate: int) -> bool:
        """Check whether a candidate lies within the allowed swing.

        :param previous: Last accepted value.
        :param candidate: Freshly observed rate.
        :returns: True if the candidate is within bounds.
        """
        lower, upper = self.bounds(previous)
        return lower <= candidate <= upper

    def check(self, previous: int, candidate: int, timestamp: int) -> SwingDecision:
        """Decide which value to record for a fresh observation.

        :param previous: Last accepted value.
        :param candidate: Freshly observed rate.
        :param timestamp: Time of the observation, carried into the anomaly record.
        :returns: SwingDecision with the value to record.
        """
        if self.accept(previous, candidate):
            return SwingDecision(accepted=True, value=candidate)

        return SwingDecision(
            accepted=False,
            value=previous,
            anomaly=AnomalyDetected(
                previous_value=previous,
                rejected_candidate=candidate,
                timestamp=timestamp,
            ),
        )
