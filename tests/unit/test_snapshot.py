"""
Unit Tests for Snapshot Computation

Run with:
    pytest tests/unit/test_snapshot.py -v
"""

from datetime import datetime, timezone

import pytest

from core.schemas import PricePoint
from services.snapshot import change_sign_of, compute_snapshot


AT = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


class TestComputeSnapshot:
    """Tests for compute_snapshot"""

    def test_values_and_positive_change(self):
        """50000 USD * 90 with 1 BTC against 4 000 000 gives +500 000"""
        point = PricePoint(price_usd=50000, volume_units=1)

        snap = compute_snapshot(point, 90, previous_total=4_000_000, computed_at=AT)

        assert snap.market_price_local == 4_500_000
        assert snap.total_value_local == 4_500_000
        assert snap.change_local == 500_000
        assert snap.change_sign == "positive"
        assert snap.computed_at == AT

    def test_first_cycle_has_zero_change(self):
        """Without a previous total the change is 0 and the sign is zero"""
        snap = compute_snapshot(PricePoint(price_usd=50000, volume_units=2), 90)

        assert snap.total_value_local == 9_000_000
        assert snap.change_local == 0
        assert snap.change_sign == "zero"

    def test_negative_change(self):
        """A lower total than before is negative"""
        snap = compute_snapshot(PricePoint(price_usd=40000, volume_units=1), 90, previous_total=4_000_000)

        assert snap.change_local == -400_000
        assert snap.change_sign == "negative"

    def test_unchanged_total_is_zero(self):
        """An identical total gives a zero change"""
        snap = compute_snapshot(PricePoint(price_usd=50000, volume_units=1), 90, previous_total=4_500_000)

        assert snap.change_local == 0
        assert snap.change_sign == "zero"

    def test_inputs_are_carried(self):
        """The snapshot records the inputs it was computed from"""
        snap = compute_snapshot(PricePoint(price_usd=43000.5, volume_units=1.25), 91.5)

        assert snap.price_usd == 43000.5
        assert snap.volume_units == 1.25
        assert snap.rate == 91.5
        assert snap.market_price_local == pytest.approx(43000.5 * 91.5)
        assert snap.total_value_local == pytest.approx(43000.5 * 91.5 * 1.25)

    def test_computed_at_defaults_to_now(self):
        """computed_at is a timezone-aware UTC datetime"""
        snap = compute_snapshot(PricePoint(price_usd=1, volume_units=1), 90)

        assert snap.computed_at.tzinfo is not None


class TestChangeSign:
    """Tests for change_sign_of"""

    @pytest.mark.parametrize("change,expected", [
        (0.01, "positive"),
        (-0.01, "negative"),
        (0.0, "zero"),
        (-0.0, "zero"),
    ])
    def test_sign(self, change, expected):
        assert change_sign_of(change) == expected
