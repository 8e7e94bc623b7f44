"""
Domain-specific exception hierarchy for the slot resolver application.

The resolution engine itself never raises; these errors belong to the
layers that load data and look up people.
"""


class SlotResolverError(Exception):
    """Base class for all application-level errors."""


class RosterDataError(SlotResolverError):
    """Raised when roster data cannot be read or parsed."""


class PersonNotFoundError(SlotResolverError):
    """Raised when a requested person is not part of the roster."""
