"""
Recurring on/off rotation arithmetic.

A cycle starts with an arrival day, continues with full days, ends the "on"
stretch with a departure day and is followed by the "off" days at home.
"""

from typing import Optional, Protocol

from .models import RotationStatus, TeamRotation
from .timekeys import DateLike, parse_calendar_date, to_calendar_date, to_pendulum_date


class RotationLookup(Protocol):
    """Callable returning the team-schedule status for a date, or None."""

    def __call__(
        self,
        target_date: DateLike,
        rotation: TeamRotation
    ) -> Optional[RotationStatus]:
        ...


def days_since(start: DateLike, target_date: DateLike) -> Optional[int]:
    """
    Whole days from ``start`` to ``target_date`` (negative if before start).

    Returns None if ``start`` cannot be parsed.
    """
    start_day = parse_calendar_date(start)
    if start_day is None:
        return None
    return to_pendulum_date(start_day).diff(to_pendulum_date(target_date), False).in_days()


def cycle_status(diff_days: int, days_on: int, days_off: int) -> RotationStatus:
    """
    Map a non-negative day offset into the cycle position.

    Example with 3 days on, 2 days off:
    arrival, full, departure, home, home, arrival, ...
    """
    cycle_length = days_on + days_off
    day_in_cycle = diff_days % cycle_length

    if day_in_cycle == 0:
        return RotationStatus.ARRIVAL
    if day_in_cycle < days_on - 1:
        return RotationStatus.FULL
    if day_in_cycle == days_on - 1:
        return RotationStatus.DEPARTURE
    return RotationStatus.HOME


def personal_rotation_status(
    start_date: DateLike,
    target_date: DateLike,
    days_on: Optional[int],
    days_off: Optional[int]
) -> Optional[RotationStatus]:
    """
    Status of a personal rotation on ``target_date``.

    Unset or non-positive day counts fall back to 1. Returns None before the
    rotation starts or if the start date is malformed.
    """
    diff_days = days_since(start_date, target_date)
    if diff_days is None or diff_days < 0:
        return None

    on = days_on if days_on and days_on > 0 else 1
    off = days_off if days_off and days_off > 0 else 1
    return cycle_status(diff_days, on, off)


def rotation_status_for_date(
    target_date: DateLike,
    rotation: TeamRotation
) -> Optional[RotationStatus]:
    """
    Default team-rotation lookup.

    Returns None before ``start_date``, after the optional ``end_date`` and for
    rotations without a positive cycle length.
    """
    if rotation.cycle_length <= 0:
        return None

    diff_days = days_since(rotation.start_date, target_date)
    if diff_days is None or diff_days < 0:
        return None

    end_day = parse_calendar_date(rotation.end_date)
    if end_day is not None and to_calendar_date(target_date) > end_day:
        return None

    return cycle_status(diff_days, rotation.days_on_base, rotation.days_at_home)
