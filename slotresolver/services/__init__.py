"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .attendance import AttendanceService, Headcount, RosterSourceProtocol

__all__ = ["AttendanceService", "Headcount", "RosterSourceProtocol"]
