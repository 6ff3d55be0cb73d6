"""
Unit Tests for Time Utilities

Run with:
    pytest tests/unit/test_time_utils.py -v
"""

from datetime import datetime, timezone

import pytest

from core.utils.time import (
    current_utc_timestamp,
    datetime_to_timestamp,
    local_time_string,
    to_utc_datetime,
)


class TestTimestampConversion:
    """Tests for timestamp <-> datetime helpers"""

    def test_milliseconds_are_detected(self):
        assert to_utc_datetime(1704110400000) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_seconds_are_accepted(self):
        assert to_utc_datetime(1704110400) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_negative_timestamp_raises(self):
        with pytest.raises(ValueError):
            to_utc_datetime(-1)

    def test_datetime_to_milliseconds(self):
        dt = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert datetime_to_timestamp(dt, milliseconds=True) == 1704110400000

    def test_naive_datetime_is_utc(self):
        assert datetime_to_timestamp(datetime(2024, 1, 1, 12, 0)) == 1704110400

    def test_current_timestamp_is_milliseconds(self):
        assert current_utc_timestamp(milliseconds=True) > 1e12


class TestLocalTimeString:
    """Tests for local_time_string"""

    def test_naive_datetime_is_formatted_as_is(self):
        assert local_time_string(datetime(2024, 1, 1, 9, 5, 3)) == "09:05:03"

    def test_default_is_now(self):
        text = local_time_string()
        assert len(text) == 8
        assert text[2] == ":" and text[5] == ":"
