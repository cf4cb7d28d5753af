"""Tests for expanding schedule templates into slots."""

from datetime import date, time

import pytest

from app.db.models import Schedule
from app.services.slot_generator import (
    day_of_week,
    format_slot,
    generate_slots,
    parse_slot,
    slot_end,
)

MONDAY = date(2026, 10, 19)
TUESDAY = date(2026, 10, 20)


def _template(start, end, minutes, break_start=None, break_end=None, dow=1) -> Schedule:
    return Schedule(
        day_of_week=dow,
        start_time=start,
        end_time=end,
        slot_duration_minutes=minutes,
        break_start=break_start,
        break_end=break_end,
    )


class TestDayOfWeek:
    def test_sunday_is_zero(self):
        assert day_of_week(date(2026, 10, 18)) == 0

    def test_saturday_is_six(self):
        assert day_of_week(date(2026, 10, 17)) == 6

    def test_monday_is_one(self):
        assert day_of_week(MONDAY) == 1


class TestGenerateSlots:
    def test_boundary_slot_is_included(self):
        template = _template(time(9, 0), time(9, 40), 20)
        assert generate_slots(template, MONDAY) == [time(9, 0), time(9, 20)]

    def test_slot_overlapping_break_is_excluded(self):
        template = _template(time(9, 0), time(9, 40), 20, time(9, 15), time(9, 25))
        assert generate_slots(template, MONDAY) == [time(9, 20)]

    def test_slot_inside_long_break_is_excluded(self):
        template = _template(time(9, 0), time(11, 0), 15, time(9, 30), time(10, 30))
        assert generate_slots(template, MONDAY) == [
            time(9, 0), time(9, 15), time(10, 30), time(10, 45)
        ]

    def test_trailing_partial_slot_is_dropped(self):
        template = _template(time(9, 0), time(10, 0), 25)
        assert generate_slots(template, MONDAY) == [time(9, 0), time(9, 25)]

    def test_slot_ending_at_break_start_is_kept(self):
        template = _template(time(9, 0), time(11, 0), 30, time(10, 0), time(10, 30))
        assert generate_slots(template, MONDAY) == [time(9, 0), time(9, 30), time(10, 30)]

    def test_break_does_not_shift_later_slots(self):
        # 09:45-10:00 break knocks out 09:40 but 10:00 stays on the 20 minute grid
        template = _template(time(9, 0), time(10, 40), 20, time(9, 45), time(10, 0))
        assert generate_slots(template, MONDAY) == [
            time(9, 0), time(9, 20), time(10, 0), time(10, 20)
        ]

    def test_other_weekday_yields_nothing(self):
        template = _template(time(9, 0), time(12, 0), 15)
        assert generate_slots(template, TUESDAY) == []

    def test_duration_longer_than_window_yields_nothing(self):
        template = _template(time(9, 0), time(9, 30), 45)
        assert generate_slots(template, MONDAY) == []

    def test_is_deterministic(self):
        template = _template(time(8, 0), time(17, 0), 15, time(12, 0), time(13, 0))
        first = generate_slots(template, MONDAY)
        assert first == generate_slots(template, MONDAY)
        assert len(first) == 32
        assert first == sorted(first)

    def test_slots_up_to_end_of_day(self):
        template = _template(time(23, 0), time(23, 59), 29)
        assert generate_slots(template, MONDAY) == [time(23, 0), time(23, 29)]


class TestSlotFormatting:
    @pytest.mark.parametrize("text,value", [("09:05", time(9, 5)), ("23:59", time(23, 59)), ("00:00", time(0, 0))])
    def test_parse_and_format(self, text, value):
        assert parse_slot(text) == value
        assert format_slot(value) == text

    def test_slot_end(self):
        template = _template(time(9, 0), time(10, 0), 20)
        assert slot_end(template, time(9, 40)) == time(10, 0)
