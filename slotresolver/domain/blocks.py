"""
Collection of unavailable blocks for a person on a single date.
"""

from typing import Iterable, List, Optional

from .models import (
    Absence,
    AbsenceStatus,
    BlockType,
    HourlyBlockage,
    UnavailableBlock,
)
from .timekeys import DAY_END, DAY_START, normalize_time

ABSENCE_REASON_PLACEHOLDER = "Absence"
BLOCKAGE_REASON_PLACEHOLDER = "Blocked"

FULL_DAY_STATUSES = frozenset({
    AbsenceStatus.APPROVED.value,
    AbsenceStatus.PARTIALLY_APPROVED.value,
})


def collect_blocks(
    person_id: str,
    date_key: str,
    absences: Iterable[Absence],
    hourly_blockages: Iterable[HourlyBlockage]
) -> List[UnavailableBlock]:
    """
    Gather all absence and hourly-blockage intervals touching ``date_key``.

    Absence blocks come first, in input order, followed by blockage blocks.
    An absence only uses its own start/end time on its first/last day; the
    days in between span the whole day.
    """
    blocks: List[UnavailableBlock] = []

    for absence in absences:
        if absence.person_id != person_id:
            continue
        if not absence.start_date <= date_key <= absence.end_date:
            continue

        start = DAY_START
        end = DAY_END
        if absence.start_date == date_key and absence.start_time:
            start = normalize_time(absence.start_time, DAY_START)
        if absence.end_date == date_key and absence.end_time:
            end = normalize_time(absence.end_time, DAY_END)

        blocks.append(UnavailableBlock(
            id=absence.id,
            start=start,
            end=end,
            reason=absence.reason or ABSENCE_REASON_PLACEHOLDER,
            block_type=BlockType.ABSENCE.value,
            status=absence.status,
        ))

    for blockage in hourly_blockages:
        if blockage.person_id != person_id:
            continue
        # Stored dates may carry a time component.
        if not (blockage.date == date_key or blockage.date.startswith(date_key)):
            continue

        blocks.append(UnavailableBlock(
            id=blockage.id,
            start=normalize_time(blockage.start_time, DAY_START),
            end=normalize_time(blockage.end_time, DAY_END),
            reason=blockage.reason or BLOCKAGE_REASON_PLACEHOLDER,
            block_type=BlockType.HOURLY_BLOCKAGE.value,
            status=AbsenceStatus.APPROVED.value,
        ))

    return blocks


def is_full_day_absence(block: UnavailableBlock) -> bool:
    """Check if a block covers the whole day and is (partially) approved."""
    return (
        block.start == DAY_START
        and block.end == DAY_END
        and block.status in FULL_DAY_STATUSES
    )


def find_full_day_absence(blocks: Iterable[UnavailableBlock]) -> Optional[UnavailableBlock]:
    """Return the first full-day absence block, if any."""
    for block in blocks:
        if is_full_day_absence(block):
            return block
    return None
