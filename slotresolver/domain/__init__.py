"""
Domain layer - Pure availability resolution without external dependencies.
"""

from .models import (
    Absence,
    AvailabilityHistory,
    AvailabilitySlot,
    DailyAvailabilityEntry,
    HourlyBlockage,
    LastManualStatus,
    PersonalRotation,
    Person,
    TeamRotation,
    UnavailableBlock,
)
from .resolver import AvailabilityResolver, resolve_availability
from .rotation import rotation_status_for_date

__all__ = [
    "Absence",
    "AvailabilityHistory",
    "AvailabilitySlot",
    "DailyAvailabilityEntry",
    "HourlyBlockage",
    "LastManualStatus",
    "PersonalRotation",
    "Person",
    "TeamRotation",
    "UnavailableBlock",
    "AvailabilityResolver",
    "resolve_availability",
    "rotation_status_for_date",
]
