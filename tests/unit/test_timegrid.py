"""Test time bucket generation and wall-clock helpers."""
import pytest
from datetime import datetime
from salon_schedule.timegrid import (
    GridConfigurationError,
    build_time_grid,
    format_minutes,
    minutes_since_midnight,
    parse_hhmm,
    snap_to_grid,
)


class TestBuildTimeGrid:
    """Test bucket boundaries."""

    def test_default_business_day(self):
        """08:00-20:00 in 30 minute slots gives 24 buckets."""
        buckets = build_time_grid(480, 1200, 30)

        assert len(buckets) == 24
        assert buckets[0] == 480
        assert buckets[-1] == 1170
        assert all(b < 1200 for b in buckets)

    def test_window_not_multiple_of_slot(self):
        """Last bucket starts before the end even if it overhangs."""
        assert build_time_grid(540, 600, 25) == (540, 565, 590)

    def test_whole_day(self):
        buckets = build_time_grid(0, 1440, 60)
        assert len(buckets) == 24
        assert buckets[-1] == 1380

    def test_repeated_calls_are_memoized(self):
        """Same inputs return the same cached tuple."""
        assert build_time_grid(480, 1200, 30) is build_time_grid(480, 1200, 30)

    @pytest.mark.parametrize("slot", [0, -15])
    def test_non_positive_slot_raises(self, slot):
        with pytest.raises(GridConfigurationError, match="slot_size_minutes"):
            build_time_grid(480, 1200, slot)

    @pytest.mark.parametrize("start,end", [(1200, 480), (600, 600), (-30, 600), (480, 1500)])
    def test_invalid_window_raises(self, start, end):
        with pytest.raises(GridConfigurationError, match="Invalid grid window"):
            build_time_grid(start, end, 30)

    def test_configuration_error_is_value_error(self):
        with pytest.raises(ValueError):
            build_time_grid(480, 1200, 0)


class TestWallClockHelpers:
    """Test formatting and parsing of wall-clock values."""

    def test_format_minutes(self):
        assert format_minutes(570) == "09:30"
        assert format_minutes(0) == "00:00"
        assert format_minutes(1170) == "19:30"

    def test_parse_hhmm(self):
        assert parse_hhmm("09:30") == 570
        assert parse_hhmm("9:30") == 570
        assert parse_hhmm("23:59") == 1439

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "", "12-30"])
    def test_parse_hhmm_rejects_invalid(self, value):
        with pytest.raises(ValueError):
            parse_hhmm(value)

    def test_minutes_since_midnight_transport_format(self):
        assert minutes_since_midnight("2025-01-15 09:30") == 570

    def test_minutes_since_midnight_ignores_offset(self):
        """Offsets are not converted: the time is taken as written."""
        assert minutes_since_midnight("2025-01-15T09:30:00+02:00") == 570
        assert minutes_since_midnight("2025-01-15T09:30:00Z") == 570

    def test_minutes_since_midnight_datetime(self):
        assert minutes_since_midnight(datetime(2025, 1, 15, 14, 5)) == 845


class TestSnapToGrid:
    """Test alignment of typed times to the booking step."""

    def test_nearest_rounds_down(self):
        assert snap_to_grid("09:07") == "09:00"

    def test_nearest_rounds_up(self):
        assert snap_to_grid("09:08") == "09:15"

    def test_tie_goes_up(self):
        assert snap_to_grid("09:05", step_minutes=10) == "09:10"

    def test_aligned_value_unchanged(self):
        assert snap_to_grid("10:30") == "10:30"

    def test_directions(self):
        assert snap_to_grid("09:01", direction="up") == "09:15"
        assert snap_to_grid("09:14", direction="down") == "09:00"

    def test_wraps_past_midnight(self):
        assert snap_to_grid("23:53") == "00:00"

    def test_unknown_direction_raises(self):
        with pytest.raises(ValueError, match="direction"):
            snap_to_grid("09:00", direction="sideways")
