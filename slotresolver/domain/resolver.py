"""
Availability resolution engine.

Resolves a single authoritative slot for one person on one date from
layered, sometimes conflicting sources. This is pure domain logic: no I/O,
no caching, no mutation of inputs.

Precedence (highest first):
1. Manual entry for the date (returns immediately)
2. Algorithmic entry for the date (returns immediately)
3. Approved full-day absence
4. Propagation from the nearest earlier manual entry, then the cached
   last manual status
5. Personal rotation (only while still available)
6. Team rotation (only while still available)
"""

import logging
from dataclasses import replace
from datetime import date
from typing import Iterable, List, NamedTuple, Optional, Sequence

from .blocks import collect_blocks, find_full_day_absence
from .models import (
    BASE_ALIAS,
    Absence,
    AvailabilitySlot,
    DailyAvailabilityEntry,
    HomeStatus,
    HomeStatusType,
    HourlyBlockage,
    OnBaseStatus,
    Person,
    RotationStatus,
    SlotSource,
    TeamRotation,
    UnavailableBlock,
)
from .rotation import RotationLookup, personal_rotation_status, rotation_status_for_date
from .timekeys import (
    DAY_END,
    DAY_START,
    DateLike,
    normalize_end_hour,
    normalize_start_hour,
    to_calendar_date,
    to_date_key,
)

logger = logging.getLogger(__name__)

FULL = OnBaseStatus.FULL.value
HOME = HomeStatus.HOME.value

UNAVAILABLE_STATUSES = frozenset(status.value for status in HomeStatus)

# Prior-day statuses that carry forward as "away" / "present".
HOME_LIKE_STATUSES = frozenset({
    "home", "unavailable", "leave", "gimel", "not_in_shamp",
    "organization_days", "absent", "departure",
})
FULL_LIKE_STATUSES = frozenset({"base", "full", "arrival"})

HOME_TYPE_STATUSES = frozenset(home_type.value for home_type in HomeStatusType)
DEFAULT_HOME_STATUS_TYPE = HomeStatusType.LEAVE_SHAMP.value


class _Propagated(NamedTuple):
    status: str
    is_available: bool
    home_status_type: Optional[str]


def _base_status(entry: DailyAvailabilityEntry, preferred: Optional[str] = None) -> str:
    """Stored status, else one derived from availability; "base" reads as "full"."""
    status = preferred or entry.status or (HOME if entry.is_available is False else FULL)
    if status == BASE_ALIAS:
        return FULL
    return status


def _infer_from_hours(
    entry: DailyAvailabilityEntry,
    end_first: bool = False
) -> Optional[OnBaseStatus]:
    """
    Read an arrival or departure from non-default hours.

    Same-day entries check the start hour first; the prior entry used for
    propagation checks the end hour first.
    """
    has_start = normalize_start_hour(entry.start_hour) != DAY_START
    has_end = normalize_end_hour(entry.end_hour) != DAY_END

    if end_first:
        if has_end:
            return OnBaseStatus.DEPARTURE
        if has_start:
            return OnBaseStatus.ARRIVAL
        return None

    if has_start:
        return OnBaseStatus.ARRIVAL
    if has_end:
        return OnBaseStatus.DEPARTURE
    return None


class AvailabilityResolver:
    """
    Runs the resolution pipeline for one (person, date) pair at a time.

    The team-rotation lookup is injected so callers can plug in their own
    schedule source; it defaults to ``rotation_status_for_date``.
    """

    def __init__(self, rotation_lookup: RotationLookup = rotation_status_for_date):
        self._rotation_lookup = rotation_lookup

    def resolve(
        self,
        person: Person,
        target_date: DateLike,
        team_rotations: Sequence[TeamRotation] = (),
        absences: Iterable[Absence] = (),
        hourly_blockages: Iterable[HourlyBlockage] = ()
    ) -> AvailabilitySlot:
        """
        Resolve the availability slot for ``person`` on ``target_date``.

        Args:
            person: The person to resolve, with their stored daily entries
            target_date: Calendar date (or datetime / ISO string) to resolve
            team_rotations: All known team rotations
            absences: All absence requests (filtered by person and date here)
            hourly_blockages: All hourly blockages (filtered here)

        Returns:
            AvailabilitySlot for that date
        """
        day = to_calendar_date(target_date)
        date_key = to_date_key(day)
        blocks = collect_blocks(person.id, date_key, absences, hourly_blockages)

        entry = person.daily_availability.get(date_key)
        if entry is not None:
            if entry.is_algorithmic:
                return self._resolve_algorithm_entry(entry, blocks)
            return self._resolve_manual_entry(entry, blocks)

        result = self._resolve_without_entry(person, date_key, blocks)
        result = self._apply_personal_rotation(person, day, result)
        return self._apply_team_rotation(person, day, team_rotations, result)

    def _resolve_manual_entry(
        self,
        entry: DailyAvailabilityEntry,
        blocks: List[UnavailableBlock]
    ) -> AvailabilitySlot:
        """A human-entered record for the date wins outright."""
        status = _base_status(entry)

        if status == FULL and entry.is_available is not False:
            inferred = _infer_from_hours(entry)
            if inferred is not None:
                status = inferred.value
        elif entry.is_available is False:
            status = HOME

        return self._slot_from_entry(
            entry,
            status=status,
            source=entry.source or SlotSource.MANUAL.value,
            blocks=blocks,
        )

    def _resolve_algorithm_entry(
        self,
        entry: DailyAvailabilityEntry,
        blocks: List[UnavailableBlock]
    ) -> AvailabilitySlot:
        """
        A system-computed record for the date.

        An explicit arrival/departure sub-state beats any hour-based
        inference. Full-day absences do not change the status here; their
        blocks are still merged into the slot.
        """
        status = _base_status(entry, preferred=entry.v2_state)
        sub_state = entry.v2_sub_state

        if sub_state in (OnBaseStatus.ARRIVAL.value, OnBaseStatus.DEPARTURE.value):
            status = sub_state
        elif status == FULL and entry.is_available is not False:
            inferred = _infer_from_hours(entry)
            if inferred is not None:
                status = inferred.value
        elif entry.is_available is False or status == HOME:
            status = HOME

        return self._slot_from_entry(
            entry,
            status=status,
            source=SlotSource.ALGORITHM.value,
            blocks=blocks,
        )

    @staticmethod
    def _slot_from_entry(
        entry: DailyAvailabilityEntry,
        *,
        status: str,
        source: str,
        blocks: List[UnavailableBlock]
    ) -> AvailabilitySlot:
        if status in UNAVAILABLE_STATUSES:
            is_available = False
        elif entry.is_available is not None:
            is_available = entry.is_available
        else:
            is_available = True

        return AvailabilitySlot(
            is_available=is_available,
            status=status,
            start_hour=normalize_start_hour(entry.start_hour),
            end_hour=normalize_end_hour(entry.end_hour),
            source=source,
            unavailable_blocks=tuple(blocks) + tuple(entry.unavailable_blocks),
            home_status_type=entry.home_status_type,
            actual_arrival_at=entry.actual_arrival_at,
            actual_departure_at=entry.actual_departure_at,
            reported_location_id=entry.reported_location_id,
            reported_location_name=entry.reported_location_name,
            v2_state=entry.v2_state,
            v2_sub_state=entry.v2_sub_state,
        )

    def _resolve_without_entry(
        self,
        person: Person,
        date_key: str,
        blocks: List[UnavailableBlock]
    ) -> AvailabilitySlot:
        """
        Base result when nothing is stored for the date: a full-day absence,
        else whatever the person's history propagates forward.
        """
        if find_full_day_absence(blocks) is not None:
            return AvailabilitySlot(
                is_available=False,
                status=HOME,
                start_hour=DAY_START,
                end_hour=DAY_END,
                source=SlotSource.ABSENCE.value,
                unavailable_blocks=tuple(blocks),
            )

        if person.last_manual_status is not None:
            source = SlotSource.LAST_MANUAL.value
        else:
            source = SlotSource.DEFAULT.value

        propagated = self._propagate_history(person, date_key)
        if propagated is None:
            propagated = _Propagated(FULL, True, None)

        return AvailabilitySlot(
            is_available=propagated.is_available,
            status=propagated.status,
            start_hour=DAY_START,
            end_hour=DAY_END,
            source=source,
            unavailable_blocks=tuple(blocks),
            home_status_type=propagated.home_status_type,
        )

    def _propagate_history(self, person: Person, date_key: str) -> Optional[_Propagated]:
        """
        Carry forward the nearest earlier manual entry, or the cached last
        manual status when there is no such entry.

        Returns None when neither source yields a status.
        """
        prior = person.daily_availability.latest_manual_before(date_key)

        if prior is not None:
            _, entry = prior
            prior_status = _base_status(entry)

            # A departure on the prior day means the person is away today.
            if entry.is_available is not False:
                inferred = _infer_from_hours(entry, end_first=True)
                if inferred is not None:
                    prior_status = inferred.value

            if prior_status in HOME_LIKE_STATUSES:
                if entry.home_status_type:
                    home_status_type = entry.home_status_type
                elif prior_status in HOME_TYPE_STATUSES:
                    home_status_type = prior_status
                else:
                    home_status_type = DEFAULT_HOME_STATUS_TYPE
                return _Propagated(HOME, False, home_status_type)

            if prior_status in FULL_LIKE_STATUSES:
                return _Propagated(FULL, True, None)

            return None

        cached = person.last_manual_status
        if cached is None:
            return None
        if cached.status in UNAVAILABLE_STATUSES:
            return _Propagated(HOME, False, cached.home_status_type or DEFAULT_HOME_STATUS_TYPE)
        if cached.status == BASE_ALIAS:
            return _Propagated(FULL, True, None)
        return None

    def _apply_personal_rotation(
        self,
        person: Person,
        day: date,
        result: AvailabilitySlot
    ) -> AvailabilitySlot:
        """Overlay the person's own on/off cycle while they are still available."""
        rotation = person.personal_rotation
        if rotation is None or not rotation.is_active or not rotation.start_date:
            return result
        if not result.is_available:
            return result

        status = personal_rotation_status(
            rotation.start_date, day, rotation.days_on, rotation.days_off
        )
        if status is None:
            logger.debug(
                "Personal rotation of %s not in effect on %s (start %r)",
                person.id, day, rotation.start_date,
            )
            return result

        return replace(
            result,
            status=status.value,
            is_available=status is not RotationStatus.HOME,
            source=SlotSource.PERSONAL_ROTATION.value,
            home_status_type=None,
        )

    def _apply_team_rotation(
        self,
        person: Person,
        day: date,
        team_rotations: Sequence[TeamRotation],
        result: AvailabilitySlot
    ) -> AvailabilitySlot:
        """Overlay the team schedule; lowest precedence."""
        if not person.team_id or not result.is_available:
            return result

        rotation = next(
            (candidate for candidate in team_rotations if candidate.team_id == person.team_id),
            None,
        )
        if rotation is None:
            return result

        status = self._rotation_lookup(day, rotation)
        if not status:
            return result

        # External lookups may hand back plain string tokens.
        token = getattr(status, "value", status)

        if token in UNAVAILABLE_STATUSES:
            return replace(
                result,
                is_available=False,
                start_hour=DAY_START,
                end_hour=DAY_START,
                status=token,
                source=SlotSource.ROTATION.value,
                home_status_type=None,
            )

        return replace(
            result,
            is_available=True,
            start_hour=DAY_START,
            end_hour=DAY_END,
            status=token,
            source=SlotSource.ROTATION.value,
            home_status_type=None,
        )


def resolve_availability(
    person: Person,
    target_date: DateLike,
    team_rotations: Sequence[TeamRotation] = (),
    absences: Iterable[Absence] = (),
    hourly_blockages: Iterable[HourlyBlockage] = (),
    rotation_lookup: RotationLookup = rotation_status_for_date
) -> AvailabilitySlot:
    """Resolve one slot with a throwaway ``AvailabilityResolver``."""
    resolver = AvailabilityResolver(rotation_lookup=rotation_lookup)
    return resolver.resolve(
        person,
        target_date,
        team_rotations=team_rotations,
        absences=absences,
        hourly_blockages=hourly_blockages,
    )
