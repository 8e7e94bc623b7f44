"""
Application services for resolving attendance across a roster.

The service coordinates loading roster data via a source adapter and
delegates every per-day decision to the domain-level
``AvailabilityResolver``. Keeping the source behind a protocol lets tests
swap in an in-memory roster.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Protocol

from ..domain.exceptions import PersonNotFoundError
from ..domain.models import (
    Absence,
    AvailabilitySlot,
    HourlyBlockage,
    Person,
    TeamRotation,
)
from ..domain.presence import is_status_present
from ..domain.resolver import AvailabilityResolver
from ..domain.timekeys import (
    DateLike,
    normalize_time,
    time_to_minutes,
    to_calendar_date,
    to_date_key,
    to_pendulum_date,
)


class RosterSourceProtocol(Protocol):
    """Protocol describing the roster data the service needs."""

    def get_people(self) -> List[Person]:
        """Return all rostered people."""

    def get_absences(self) -> List[Absence]:
        """Return all absence requests."""

    def get_hourly_blockages(self) -> List[HourlyBlockage]:
        """Return all hourly blockages."""

    def get_team_rotations(self) -> List[TeamRotation]:
        """Return all team rotations."""


@dataclass
class Headcount:
    """Who is present and who is not at a given moment."""
    date_key: str
    at_time: str
    present: List[str] = field(default_factory=list)
    absent: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.present) + len(self.absent)


class AttendanceService:
    """
    Resolves slots for people and date ranges from a roster source.
    """

    def __init__(
        self,
        roster_source: RosterSourceProtocol,
        resolver: Optional[AvailabilityResolver] = None,
    ) -> None:
        self._roster_source = roster_source
        self._resolver = resolver or AvailabilityResolver()

    def find_person(self, person_id: str) -> Person:
        """
        Look up a person by id.

        Raises:
            PersonNotFoundError: If no person has that id
        """
        for person in self._roster_source.get_people():
            if person.id == person_id:
                return person
        raise PersonNotFoundError(f"Unknown person id: '{person_id}'")

    def resolve_person(
        self,
        person_id: str,
        start_date: DateLike,
        days: int = 1,
    ) -> Dict[str, AvailabilitySlot]:
        """
        Resolve consecutive days for one person.

        Returns:
            Mapping of date key to slot, in date order
        """
        person = self.find_person(person_id)
        return self._resolve_days(person, self._date_range(start_date, days))

    def resolve_range(
        self,
        start_date: DateLike,
        days: int = 1,
    ) -> Dict[str, Dict[str, AvailabilitySlot]]:
        """
        Resolve consecutive days for everyone on the roster.

        Returns:
            Mapping of person id to (date key -> slot)
        """
        dates = self._date_range(start_date, days)
        return {
            person.id: self._resolve_days(person, dates)
            for person in self._roster_source.get_people()
        }

    def headcount(self, target_date: DateLike, at_time: str) -> Headcount:
        """
        Split the roster into present and absent people at ``at_time``.

        Raises:
            ValueError: If ``at_time`` is not a time of day
        """
        normalized = normalize_time(at_time, "")
        if not normalized:
            raise ValueError(f"Invalid time of day: {at_time!r} (expected HH:MM)")

        day = to_calendar_date(target_date)
        target_minutes = time_to_minutes(normalized)
        result = Headcount(date_key=to_date_key(day), at_time=normalized)

        for person in self._roster_source.get_people():
            slot = self._resolve_days(person, [day])[result.date_key]
            if is_status_present(slot, target_minutes):
                result.present.append(person.id)
            else:
                result.absent.append(person.id)

        return result

    def _resolve_days(self, person: Person, dates: List[date]) -> Dict[str, AvailabilitySlot]:
        # Narrow the shared collections once per person, not once per day.
        absences = [a for a in self._roster_source.get_absences() if a.person_id == person.id]
        blockages = [b for b in self._roster_source.get_hourly_blockages() if b.person_id == person.id]
        team_rotations = self._roster_source.get_team_rotations()

        return {
            to_date_key(day): self._resolver.resolve(
                person,
                day,
                team_rotations=team_rotations,
                absences=absences,
                hourly_blockages=blockages,
            )
            for day in dates
        }

    @staticmethod
    def _date_range(start_date: DateLike, days: int) -> List[date]:
        if days <= 0:
            raise ValueError("days must be greater than zero")
        start = to_pendulum_date(start_date)
        return [start.add(days=offset) for offset in range(days)]
