"""
Domain models for availability resolution.

Input records (people, daily entries, absences, blockages, rotations) are
read-only snapshots owned by the persistence layer. ``AvailabilitySlot`` is
the derived output.
"""

from bisect import bisect_left
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple


class OnBaseStatus(str, Enum):
    """Statuses of a person who is present for at least part of the day."""
    FULL = "full"
    ARRIVAL = "arrival"
    DEPARTURE = "departure"


class HomeStatus(str, Enum):
    """Statuses of a person who is away for the whole day."""
    HOME = "home"
    UNAVAILABLE = "unavailable"


class RotationStatus(str, Enum):
    """Day positions inside a recurring on/off rotation cycle."""
    ARRIVAL = "arrival"
    FULL = "full"
    DEPARTURE = "departure"
    HOME = "home"


class HomeStatusType(str, Enum):
    """Sub-classification of a day spent away."""
    LEAVE_SHAMP = "leave_shamp"
    GIMEL = "gimel"
    ABSENT = "absent"
    ORGANIZATION_DAYS = "organization_days"
    NOT_IN_SHAMP = "not_in_shamp"


class SlotSource(str, Enum):
    """Which resolution tier produced a slot."""
    MANUAL = "manual"
    ALGORITHM = "algorithm"
    ABSENCE = "absence"
    LAST_MANUAL = "last_manual"
    DEFAULT = "default"
    PERSONAL_ROTATION = "personal_rotation"
    ROTATION = "rotation"


class BlockType(str, Enum):
    """Origin of an unavailable block."""
    ABSENCE = "absence"
    HOURLY_BLOCKAGE = "hourly_blockage"


class AbsenceStatus(str, Enum):
    """Approval state of an absence request."""
    PENDING = "pending"
    APPROVED = "approved"
    PARTIALLY_APPROVED = "partially_approved"
    REJECTED = "rejected"
    CONFLICT = "conflict"


# Legacy alias for "full" still found in stored records.
BASE_ALIAS = "base"


@dataclass(frozen=True)
class UnavailableBlock:
    """
    A time window during which a person is unavailable on a given day.
    """
    id: str
    start: str
    end: str
    reason: Optional[str] = None
    block_type: Optional[str] = None
    status: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize using the wire field names."""
        data: Dict[str, Any] = {"id": self.id, "start": self.start, "end": self.end}
        if self.reason is not None:
            data["reason"] = self.reason
        if self.block_type is not None:
            data["type"] = self.block_type
        if self.status is not None:
            data["status"] = self.status
        return data


@dataclass(frozen=True)
class DailyAvailabilityEntry:
    """
    One stored record for a (person, date) pair.

    Written either by a human (any source other than ``algorithm``) or by the
    scheduling algorithm. ``is_available`` is tri-state: None means unspecified.
    """
    source: Optional[str] = None
    status: Optional[str] = None
    is_available: Optional[bool] = None
    start_hour: Optional[str] = None
    end_hour: Optional[str] = None
    home_status_type: Optional[str] = None
    v2_state: Optional[str] = None
    v2_sub_state: Optional[str] = None
    unavailable_blocks: Tuple[UnavailableBlock, ...] = ()
    actual_arrival_at: Optional[str] = None
    actual_departure_at: Optional[str] = None
    reported_location_id: Optional[str] = None
    reported_location_name: Optional[str] = None

    @property
    def is_algorithmic(self) -> bool:
        """True if the record was computed by the scheduling algorithm."""
        return self.source == SlotSource.ALGORITHM.value


@dataclass(frozen=True)
class Absence:
    """An absence request spanning ``start_date``..``end_date`` (inclusive)."""
    id: str
    person_id: str
    start_date: str
    end_date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None
    status: Optional[str] = None


@dataclass(frozen=True)
class HourlyBlockage:
    """A single-day block; always treated as approved."""
    id: str
    person_id: str
    date: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class PersonalRotation:
    """A repeating on/off cycle unique to one person."""
    is_active: bool = False
    start_date: Optional[str] = None
    days_on: int = 1
    days_off: int = 1


@dataclass(frozen=True)
class TeamRotation:
    """A team-wide on/off schedule anchored at ``start_date``."""
    id: str
    team_id: str
    days_on_base: int
    days_at_home: int
    start_date: str
    end_date: Optional[str] = None

    @property
    def cycle_length(self) -> int:
        return self.days_on_base + self.days_at_home


@dataclass(frozen=True)
class LastManualStatus:
    """Cached status a person was last manually set to, maintained externally."""
    status: str
    home_status_type: Optional[str] = None
    date: Optional[str] = None


class AvailabilityHistory:
    """
    Read-only view of a person's daily entries, ordered by date key.

    Keys are ``YYYY-MM-DD`` strings; sorting them as strings sorts them
    chronologically, which the prior-entry search relies on.
    """

    def __init__(self, entries: Optional[Mapping[str, DailyAvailabilityEntry]] = None):
        self._entries: Dict[str, DailyAvailabilityEntry] = dict(entries or {})
        self._keys: Tuple[str, ...] = tuple(sorted(self._entries))

    def get(self, date_key: str) -> Optional[DailyAvailabilityEntry]:
        """Return the entry stored for an exact date key."""
        return self._entries.get(date_key)

    def keys(self) -> Tuple[str, ...]:
        """All date keys in chronological order."""
        return self._keys

    def items(self) -> List[Tuple[str, DailyAvailabilityEntry]]:
        return [(key, self._entries[key]) for key in self._keys]

    def latest_manual_before(
        self,
        date_key: str
    ) -> Optional[Tuple[str, DailyAvailabilityEntry]]:
        """
        Find the chronologically nearest entry strictly before ``date_key``
        that was not written by the algorithm.

        Returns:
            ``(key, entry)`` or None if no such entry exists
        """
        index = bisect_left(self._keys, date_key) - 1

        while index >= 0:
            key = self._keys[index]
            entry = self._entries[key]
            if not entry.is_algorithmic:
                return key, entry
            index -= 1

        return None

    def __contains__(self, date_key: object) -> bool:
        return date_key in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AvailabilityHistory):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"AvailabilityHistory({len(self._keys)} entries)"


@dataclass
class Person:
    """
    A rostered person as loaded from storage.

    ``daily_availability`` accepts a plain mapping of date key to entry and is
    stored as an ``AvailabilityHistory``.
    """
    id: str
    name: str = ""
    team_id: Optional[str] = None
    daily_availability: AvailabilityHistory = field(default_factory=AvailabilityHistory)
    personal_rotation: Optional[PersonalRotation] = None
    last_manual_status: Optional[LastManualStatus] = None

    def __post_init__(self):
        if not isinstance(self.daily_availability, AvailabilityHistory):
            self.daily_availability = AvailabilityHistory(self.daily_availability)


@dataclass(frozen=True)
class AvailabilitySlot:
    """
    The resolved availability of one person on one date.
    """
    is_available: bool
    status: str
    start_hour: str
    end_hour: str
    source: str
    unavailable_blocks: Tuple[UnavailableBlock, ...] = ()
    home_status_type: Optional[str] = None
    actual_arrival_at: Optional[str] = None
    actual_departure_at: Optional[str] = None
    reported_location_id: Optional[str] = None
    reported_location_name: Optional[str] = None
    v2_state: Optional[str] = None
    v2_sub_state: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize using the presentation field names.

        Optional fields are omitted when unset.
        """
        data: Dict[str, Any] = {
            "isAvailable": self.is_available,
            "status": self.status,
            "startHour": self.start_hour,
            "endHour": self.end_hour,
            "source": self.source,
            "unavailableBlocks": [block.to_dict() for block in self.unavailable_blocks],
        }
        optional = {
            "homeStatusType": self.home_status_type,
            "actual_arrival_at": self.actual_arrival_at,
            "actual_departure_at": self.actual_departure_at,
            "reported_location_id": self.reported_location_id,
            "reported_location_name": self.reported_location_name,
            "v2_state": self.v2_state,
            "v2_sub_state": self.v2_sub_state,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        return data
