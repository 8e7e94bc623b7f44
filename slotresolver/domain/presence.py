"""
Presence checks built on top of resolved slots.

These answer "is this person here at HH:MM?" for headcounts, and derive an
absence request's approval state from the daily records it covers.
"""

from typing import Iterable, Optional, Sequence

from .blocks import FULL_DAY_STATUSES
from .models import (
    BASE_ALIAS,
    Absence,
    AbsenceStatus,
    AvailabilitySlot,
    BlockType,
    HourlyBlockage,
    OnBaseStatus,
    Person,
    TeamRotation,
    UnavailableBlock,
)
from .resolver import UNAVAILABLE_STATUSES, AvailabilityResolver
from .timekeys import DateLike, parse_calendar_date, time_to_minutes, to_date_key, to_pendulum_date

NOT_DEFINED = "not_defined"
# Blocks with this id prefix are absence blocks even without a type.
ABSENCE_ID_PREFIX = "abs-"
MINUTES_PER_DAY = 24 * 60


def _block_is_active(block: UnavailableBlock) -> bool:
    """Absence blocks count only once approved; other blocks unless rejected."""
    is_absence = (
        block.block_type == BlockType.ABSENCE.value
        or block.id.startswith(ABSENCE_ID_PREFIX)
    )
    if is_absence:
        return block.status in FULL_DAY_STATUSES
    return block.status != AbsenceStatus.REJECTED.value


def _block_covers(block: UnavailableBlock, target_minutes: int) -> bool:
    start = time_to_minutes(block.start)
    end = time_to_minutes(block.end)
    # Blocks ending before they start run past midnight.
    if end < start:
        end += MINUTES_PER_DAY
    return start <= target_minutes < end


def is_status_present(slot: AvailabilitySlot, target_minutes: int) -> bool:
    """
    Check whether a resolved slot counts as present at a minute of the day.

    Args:
        slot: Resolved availability for the day
        target_minutes: Minutes since midnight

    Returns:
        True if the person is on site at that time
    """
    if not slot.is_available:
        return False
    if slot.status in UNAVAILABLE_STATUSES or slot.status == NOT_DEFINED:
        return False
    if slot.v2_sub_state == NOT_DEFINED:
        return False

    if slot.status == OnBaseStatus.ARRIVAL.value and target_minutes < time_to_minutes(slot.start_hour):
        return False
    if slot.status == OnBaseStatus.DEPARTURE.value and target_minutes >= time_to_minutes(slot.end_hour):
        return False

    for block in slot.unavailable_blocks:
        if _block_is_active(block) and _block_covers(block, target_minutes):
            return False

    return True


def is_present_at(
    person: Person,
    target_date: DateLike,
    time_str: str,
    team_rotations: Sequence[TeamRotation] = (),
    absences: Iterable[Absence] = (),
    hourly_blockages: Iterable[HourlyBlockage] = (),
    resolver: Optional[AvailabilityResolver] = None
) -> bool:
    """Resolve the person's slot for the date and check presence at ``time_str``."""
    resolver = resolver or AvailabilityResolver()
    slot = resolver.resolve(
        person,
        target_date,
        team_rotations=team_rotations,
        absences=absences,
        hourly_blockages=hourly_blockages,
    )
    return is_status_present(slot, time_to_minutes(time_str))


def computed_absence_status(person: Person, absence: Optional[Absence]) -> AbsenceStatus:
    """
    Derive an absence request's approval state from the person's daily records.

    An explicit non-pending status is returned as is. Otherwise each day of the
    request is counted as home or on base from its stored entry (days without
    an entry count towards neither).
    """
    if absence is None:
        return AbsenceStatus.PENDING

    if absence.status and absence.status != AbsenceStatus.PENDING.value:
        try:
            return AbsenceStatus(absence.status)
        except ValueError:
            return AbsenceStatus.PENDING

    start = parse_calendar_date(absence.start_date)
    end = parse_calendar_date(absence.end_date)
    if start is None or end is None:
        return AbsenceStatus.PENDING

    total_days = 0
    home_days = 0
    base_days = 0

    current = to_pendulum_date(start)
    while current <= end:
        total_days += 1
        entry = person.daily_availability.get(to_date_key(current))
        current = current.add(days=1)

        if entry is None:
            continue

        if entry.status in ("home", "leave") or entry.is_available is False:
            home_days += 1
        elif entry.status in (BASE_ALIAS, "arrival", "departure") or entry.is_available is True:
            base_days += 1

    if total_days > 0 and home_days == total_days:
        return AbsenceStatus.APPROVED
    if 0 < home_days < total_days:
        return AbsenceStatus.PARTIALLY_APPROVED
    if total_days > 0 and base_days == total_days:
        return AbsenceStatus.REJECTED

    return AbsenceStatus.PENDING
