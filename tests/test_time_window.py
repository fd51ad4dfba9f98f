"""Tests for blocked window evaluation."""

from datetime import datetime, time

import pytest

from nextblock.policies import TimeWindow, is_blocked, parse_time_of_day, window_status

DAY_WINDOW = TimeWindow(start=time(9, 0), end=time(17, 0))
NIGHT_WINDOW = TimeWindow(start=time(22, 0), end=time(6, 0))


class TestParseTimeOfDay:
    def test_valid(self) -> None:
        assert parse_time_of_day("09:30") == time(9, 30)

    def test_single_digit_hour(self) -> None:
        assert parse_time_of_day("7:05") == time(7, 5)

    def test_surrounding_whitespace(self) -> None:
        assert parse_time_of_day(" 23:59 ") == time(23, 59)

    @pytest.mark.parametrize("value", ["24:00", "12:60", "noon", "12", "12:00:00", ""])
    def test_invalid(self, value: str) -> None:
        with pytest.raises(ValueError):
            parse_time_of_day(value)


class TestIsBlocked:
    """Day windows: both boundaries exclusive, minute resolution."""

    @pytest.mark.parametrize("now", [time(9, 1), time(12, 0), time(16, 59)])
    def test_inside_window(self, now: time) -> None:
        assert is_blocked(now, DAY_WINDOW)

    @pytest.mark.parametrize("now", [time(9, 0), time(17, 0)])
    def test_boundaries_not_blocked(self, now: time) -> None:
        assert not is_blocked(now, DAY_WINDOW)

    def test_boundary_minute_open_throughout(self) -> None:
        """Seconds are ignored: all of 09:00 is still outside the window."""
        assert not is_blocked(time(9, 0, 45), DAY_WINDOW)
        assert not is_blocked(time(17, 0, 30), DAY_WINDOW)

    @pytest.mark.parametrize("now", [time(0, 0), time(8, 59), time(17, 1), time(20, 0), time(23, 59)])
    def test_outside_window(self, now: time) -> None:
        assert not is_blocked(now, DAY_WINDOW)

    def test_accepts_datetime(self) -> None:
        assert is_blocked(datetime(2024, 3, 4, 12, 0), DAY_WINDOW)
        assert not is_blocked(datetime(2024, 3, 4, 20, 0), DAY_WINDOW)

    def test_same_result_for_same_input(self) -> None:
        now = datetime(2024, 3, 4, 12, 0)
        first = is_blocked(now, DAY_WINDOW)
        second = is_blocked(now, DAY_WINDOW)
        assert first is second is True

    def test_empty_window_never_blocks(self) -> None:
        window = TimeWindow(start=time(9, 0), end=time(9, 0))
        assert not is_blocked(time(9, 0), window)
        assert not is_blocked(time(21, 0), window)


class TestOvernightWindow:
    @pytest.mark.parametrize("now", [time(22, 1), time(23, 59), time(0, 0), time(3, 0), time(5, 59)])
    def test_inside(self, now: time) -> None:
        assert is_blocked(now, NIGHT_WINDOW)

    @pytest.mark.parametrize("now", [time(22, 0), time(6, 0)])
    def test_boundaries_not_blocked(self, now: time) -> None:
        assert not is_blocked(now, NIGHT_WINDOW)

    @pytest.mark.parametrize("now", [time(6, 1), time(12, 0), time(21, 59)])
    def test_outside(self, now: time) -> None:
        assert not is_blocked(now, NIGHT_WINDOW)

    def test_is_overnight(self) -> None:
        assert NIGHT_WINDOW.is_overnight
        assert not DAY_WINDOW.is_overnight


class TestWindowStatus:
    def test_blocked_until_end(self) -> None:
        status = window_status(datetime(2024, 3, 4, 12, 0, 30), DAY_WINDOW)
        assert status.blocked
        assert status.next_change == datetime(2024, 3, 4, 17, 0)

    def test_open_until_start_next_minute(self) -> None:
        status = window_status(datetime(2024, 3, 4, 20, 0), DAY_WINDOW)
        assert not status.blocked
        assert status.next_change == datetime(2024, 3, 5, 9, 1)

    def test_overnight_crosses_date(self) -> None:
        status = window_status(datetime(2024, 3, 4, 23, 0), NIGHT_WINDOW)
        assert status.blocked
        assert status.next_change == datetime(2024, 3, 5, 6, 0)

    def test_empty_window_has_no_change(self) -> None:
        window = TimeWindow(start=time(9, 0), end=time(9, 0))
        status = window_status(datetime(2024, 3, 4, 12, 0), window)
        assert not status.blocked
        assert status.next_change is None

    def test_window_str(self) -> None:
        assert str(DAY_WINDOW) == "09:00-17:00"
