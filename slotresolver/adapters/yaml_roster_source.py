"""
File-backed roster source.

Loads people, absences, hourly blockages and team rotations from a YAML
document (JSON works too, being a YAML subset). Field names follow the stored
record format (``dailyAvailability``, ``person_id``, ``start_date``, ...).
"""

import logging
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, TypeVar

import yaml

from ..domain.exceptions import RosterDataError
from ..domain.models import (
    Absence,
    DailyAvailabilityEntry,
    HourlyBlockage,
    LastManualStatus,
    Person,
    PersonalRotation,
    TeamRotation,
    UnavailableBlock,
)
from ..domain.timekeys import to_date_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _text(value: Any) -> Optional[str]:
    """Coerce a scalar to text; YAML turns bare dates into date objects."""
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _required_text(raw: Mapping[str, Any], key: str) -> str:
    value = _text(raw[key])
    if not value:
        raise ValueError(f"'{key}' must not be empty")
    return value


def _time_text(value: Any) -> Optional[str]:
    """
    Coerce a time value to text.

    YAML 1.1 reads an unquoted ``8:30`` as the sexagesimal integer 510.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return f"{value // 60:02d}:{value % 60:02d}"
    return _text(value)


def _optional_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


def _mapping(raw: Any, kind: str) -> Mapping[str, Any]:
    if not isinstance(raw, Mapping):
        raise TypeError(f"{kind} record must be a mapping, got {type(raw).__name__}")
    return raw


def parse_block(raw: Any) -> UnavailableBlock:
    """Parse an entry-local unavailable block."""
    raw = _mapping(raw, "block")
    return UnavailableBlock(
        id=_required_text(raw, "id"),
        start=_time_text(raw.get("start")) or "00:00",
        end=_time_text(raw.get("end")) or "23:59",
        reason=_text(raw.get("reason")),
        block_type=_text(raw.get("type")),
        status=_text(raw.get("status")),
    )


def parse_entry(raw: Any) -> DailyAvailabilityEntry:
    """Parse one ``dailyAvailability`` record."""
    raw = _mapping(raw, "daily availability")
    return DailyAvailabilityEntry(
        source=_text(raw.get("source")),
        status=_text(raw.get("status")),
        is_available=_optional_bool(raw.get("isAvailable")),
        start_hour=_time_text(raw.get("startHour")),
        end_hour=_time_text(raw.get("endHour")),
        home_status_type=_text(raw.get("homeStatusType")),
        v2_state=_text(raw.get("v2_state")),
        v2_sub_state=_text(raw.get("v2_sub_state")),
        unavailable_blocks=tuple(parse_block(block) for block in raw.get("unavailableBlocks") or []),
        actual_arrival_at=_text(raw.get("actual_arrival_at")),
        actual_departure_at=_text(raw.get("actual_departure_at")),
        reported_location_id=_text(raw.get("reported_location_id")),
        reported_location_name=_text(raw.get("reported_location_name")),
    )


def parse_person(raw: Any) -> Person:
    """Parse a person together with their daily entries and rotation data."""
    raw = _mapping(raw, "person")

    history: Dict[str, DailyAvailabilityEntry] = {}
    for key, entry in (raw.get("dailyAvailability") or {}).items():
        history[to_date_key(key)] = parse_entry(entry)

    personal_rotation = None
    rotation_raw = raw.get("personalRotation")
    if rotation_raw:
        rotation_raw = _mapping(rotation_raw, "personal rotation")
        personal_rotation = PersonalRotation(
            is_active=bool(rotation_raw.get("isActive", False)),
            start_date=_text(rotation_raw.get("startDate")),
            days_on=int(rotation_raw.get("daysOn") or 1),
            days_off=int(rotation_raw.get("daysOff") or 1),
        )

    last_manual_status = None
    last_raw = raw.get("lastManualStatus")
    if last_raw:
        last_raw = _mapping(last_raw, "last manual status")
        last_manual_status = LastManualStatus(
            status=_required_text(last_raw, "status"),
            home_status_type=_text(last_raw.get("homeStatusType")),
            date=_text(last_raw.get("date")),
        )

    return Person(
        id=_required_text(raw, "id"),
        name=_text(raw.get("name")) or "",
        team_id=_text(raw.get("teamId")),
        daily_availability=history,
        personal_rotation=personal_rotation,
        last_manual_status=last_manual_status,
    )


def parse_absence(raw: Any) -> Absence:
    raw = _mapping(raw, "absence")
    return Absence(
        id=_required_text(raw, "id"),
        person_id=_required_text(raw, "person_id"),
        start_date=to_date_key(raw["start_date"]),
        end_date=to_date_key(raw["end_date"]),
        start_time=_time_text(raw.get("start_time")),
        end_time=_time_text(raw.get("end_time")),
        reason=_text(raw.get("reason")),
        status=_text(raw.get("status")),
    )


def parse_hourly_blockage(raw: Any) -> HourlyBlockage:
    raw = _mapping(raw, "hourly blockage")
    return HourlyBlockage(
        id=_required_text(raw, "id"),
        person_id=_required_text(raw, "person_id"),
        date=_required_text(raw, "date"),
        start_time=_time_text(raw.get("start_time")),
        end_time=_time_text(raw.get("end_time")),
        reason=_text(raw.get("reason")),
    )


def parse_team_rotation(raw: Any) -> TeamRotation:
    raw = _mapping(raw, "team rotation")
    return TeamRotation(
        id=_required_text(raw, "id"),
        team_id=_required_text(raw, "team_id"),
        days_on_base=int(raw["days_on_base"]),
        days_at_home=int(raw["days_at_home"]),
        start_date=to_date_key(raw["start_date"]),
        end_date=_text(raw.get("end_date")),
    )


class YamlRosterSource:
    """
    Roster source that reads everything from a single YAML document.

    Expected top-level keys: ``people``, ``absences``, ``hourly_blockages``,
    ``team_rotations``. Each is optional. Individual records that fail to
    parse are skipped with a warning.
    """

    def __init__(self, data_file: Path):
        """
        Load the roster document.

        Args:
            data_file: Path to the YAML or JSON roster file

        Raises:
            FileNotFoundError: If the file doesn't exist
            RosterDataError: If the document is not a valid roster mapping
        """
        self.data_file = Path(data_file)
        self._load()

    def _load(self) -> None:
        if not self.data_file.exists():
            raise FileNotFoundError(f"Roster data file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise RosterDataError(f"Invalid YAML in {self.data_file}: {exc}") from exc

        if not isinstance(data, dict):
            raise RosterDataError("Roster file must contain a mapping at the root level.")

        self._people = self._parse_records(data.get("people"), parse_person, "person")
        self._absences = self._parse_records(data.get("absences"), parse_absence, "absence")
        self._hourly_blockages = self._parse_records(
            data.get("hourly_blockages"), parse_hourly_blockage, "hourly blockage"
        )
        self._team_rotations = self._parse_records(
            data.get("team_rotations"), parse_team_rotation, "team rotation"
        )

    def _parse_records(
        self,
        raw_records: Any,
        parser: Callable[[Any], T],
        kind: str
    ) -> List[T]:
        if raw_records is None:
            return []
        if not isinstance(raw_records, list):
            raise RosterDataError(f"Expected a list of {kind} records in {self.data_file}")

        records: List[T] = []
        for index, raw in enumerate(raw_records):
            try:
                records.append(parser(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping invalid %s record #%d in %s: %s", kind, index, self.data_file, exc)
        return records

    def get_people(self) -> List[Person]:
        return list(self._people)

    def get_absences(self) -> List[Absence]:
        return list(self._absences)

    def get_hourly_blockages(self) -> List[HourlyBlockage]:
        return list(self._hourly_blockages)

    def get_team_rotations(self) -> List[TeamRotation]:
        return list(self._team_rotations)
