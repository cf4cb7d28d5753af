"""
Expansion of recurring weekly schedule templates into bookable slots.

Everything here is pure: no I/O and no clock access. Times are handled as
minutes since midnight so slot arithmetic never crosses into datetimes.
"""
from datetime import date, datetime, time
from typing import List, Optional, Protocol


class ScheduleTemplate(Protocol):
    day_of_week: int
    start_time: time
    end_time: time
    slot_duration_minutes: int
    break_start: Optional[time]
    break_end: Optional[time]


def day_of_week(on_date: date) -> int:
    # Python weekday() is 0=Monday..6=Sunday, templates use 0=Sunday..6=Saturday
    python_day = on_date.weekday()
    return 0 if python_day == 6 else python_day + 1


def _to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _from_minutes(minutes: int) -> time:
    return time(hour=minutes // 60, minute=minutes % 60)


def format_slot(value: time) -> str:
    return value.strftime("%H:%M")


def parse_slot(value: str) -> time:
    return datetime.strptime(value, "%H:%M").time()


def generate_slots(template: ScheduleTemplate, on_date: date) -> List[time]:
    """
    Return the ordered start times a template offers on ``on_date``.

    Slots step from ``start_time`` by ``slot_duration_minutes`` and stop once
    a slot would run past ``end_time``; a trailing partial slot is dropped.
    A slot is lost to the break when the break begins inside it
    (``start <= break_start < start + duration``) or when the slot lies
    wholly inside ``[break_start, break_end]``. Excluded slots are not
    shifted. A template for another weekday yields an empty list.
    """
    if template.day_of_week != day_of_week(on_date):
        return []

    duration = template.slot_duration_minutes
    if duration <= 0:
        return []

    start = _to_minutes(template.start_time)
    end = _to_minutes(template.end_time)

    break_window = None
    if template.break_start is not None and template.break_end is not None:
        break_window = (_to_minutes(template.break_start), _to_minutes(template.break_end))

    slots = []
    current = start
    while current + duration <= end:
        if not (break_window and _hits_break(current, current + duration, *break_window)):
            slots.append(_from_minutes(current))
        current += duration
    return slots


def _hits_break(slot_start: int, slot_finish: int, break_start: int, break_end: int) -> bool:
    if slot_start <= break_start < slot_finish:
        return True
    return break_start <= slot_start and slot_finish <= break_end


def slot_end(template: ScheduleTemplate, start: time) -> time:
    return _from_minutes(_to_minutes(start) + template.slot_duration_minutes)


def windows_overlap(first: ScheduleTemplate, second: ScheduleTemplate) -> bool:
    return first.start_time < second.end_time and second.start_time < first.end_time
