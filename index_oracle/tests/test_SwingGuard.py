"""Unit tests for SwingGuard."""

import pytest

from index_oracle.src.events import AnomalyDetected
from index_oracle.src.HistoricalSeries import BASE
from index_oracle.src.SwingGuard import SwingDecision, SwingGuard

ONE_PERCENT = BASE // 100


class TestSwingGuardInit:
    """Test SwingGuard initialization."""

    def test_stores_max_swing(self) -> None:
        """max_swing should be stored as given."""
        assert SwingGuard(ONE_PERCENT).max_swing == ONE_PERCENT

    def test_zero_and_full_allowed(self) -> None:
        """Both ends of [0, BASE] are valid."""
        assert SwingGuard(0).max_swing == 0
        assert SwingGuard(BASE).max_swing == BASE

    def test_invalid_max_swing(self) -> None:
        """Values outside [0, BASE] should raise ValueError."""
        with pytest.raises(ValueError, match="max_swing"):
            SwingGuard(-1)
        with pytest.raises(ValueError, match="max_swing"):
            SwingGuard(BASE + 1)


class TestSwingGuardBounds:
    """Test the inclusive acceptance interval."""

    def test_bounds(self) -> None:
        """1% of 1000 gives [990, 1010]."""
        assert SwingGuard(ONE_PERCENT).bounds(1000) == (990, 1010)

    def test_lower_boundary_inclusive(self) -> None:
        """A candidate exactly at the lower bound is accepted."""
        assert SwingGuard(ONE_PERCENT).accept(1000, 990)

    def test_upper_boundary_inclusive(self) -> None:
        """A candidate exactly at the upper bound is accepted."""
        assert SwingGuard(ONE_PERCENT).accept(1000, 1010)

    def test_one_below_lower_rejected(self) -> None:
        """One unit below the lower bound is rejected."""
        assert not SwingGuard(ONE_PERCENT).accept(1000, 989)

    def test_one_above_upper_rejected(self) -> None:
        """One unit above the upper bound is rejected."""
        assert not SwingGuard(ONE_PERCENT).accept(1000, 1011)

    def test_allowable_truncates(self) -> None:
        """1% of 999 truncates to 9, so 1009 is out of bounds."""
        guard = SwingGuard(ONE_PERCENT)
        assert guard.bounds(999) == (990, 1008)
        assert guard.accept(999, 1008)
        assert not guard.accept(999, 1009)

    def test_fixed_point_scale(self) -> None:
        """Bounds work with BASE-scaled rates."""
        guard = SwingGuard(ONE_PERCENT)
        assert guard.accept(BASE, 101 * BASE // 100)
        assert not guard.accept(BASE, 101 * BASE // 100 + 1)
        assert guard.accept(BASE, 99 * BASE // 100)
        assert not guard.accept(BASE, 99 * BASE // 100 - 1)

    def test_zero_swing_only_exact(self) -> None:
        """With no allowed swing only the previous value passes."""
        guard = SwingGuard(0)
        assert guard.accept(1000, 1000)
        assert not guard.accept(1000, 1001)

    def test_large_values_do_not_wrap(self) -> None:
        """Products beyond 256 bits are computed exactly."""
        previous = 2**224 - 1
        guard = SwingGuard(BASE)
        assert guard.bounds(previous) == (0, 2 * previous)


class TestSwingGuardCheck:
    """Test SwingDecision outcomes."""

    def test_accepted_decision(self) -> None:
        """Accepted candidates are recorded as-is without an anomaly."""
        decision = SwingGuard(ONE_PERCENT).check(1000, 1005, timestamp=42)
        assert decision == SwingDecision(accepted=True, value=1005)
        assert decision.anomaly is None

    def test_rejected_decision(self) -> None:
        """Rejected candidates fall back to the previous value."""
        decision = SwingGuard(ONE_PERCENT).check(1000, 2000, timestamp=42)

        assert not decision.accepted
        assert decision.value == 1000
        assert decision.anomaly == AnomalyDetected(
            previous_value=1000,
            rejected_candidate=2000,
            timestamp=42,
        )
