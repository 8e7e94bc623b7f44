"""
Tests for presence checks and computed absence status.
"""

from datetime import date

import pytest

from slotresolver.domain.models import (
    Absence,
    AbsenceStatus,
    AvailabilitySlot,
    DailyAvailabilityEntry,
    HourlyBlockage,
    Person,
    UnavailableBlock,
)
from slotresolver.domain.presence import computed_absence_status, is_present_at, is_status_present


def _slot(status="full", is_available=True, start="00:00", end="23:59", blocks=(), **kwargs):
    return AvailabilitySlot(
        is_available=is_available,
        status=status,
        start_hour=start,
        end_hour=end,
        source="manual",
        unavailable_blocks=tuple(blocks),
        **kwargs,
    )


class TestIsStatusPresent:
    """Tests for is_status_present."""

    def test_full_day_is_present(self):
        """Test a full day counts at any minute."""
        assert is_status_present(_slot(), 0) is True
        assert is_status_present(_slot(), 23 * 60 + 59) is True

    @pytest.mark.parametrize("status", ["home", "unavailable", "not_defined"])
    def test_away_statuses(self, status):
        """Test away statuses never count as present."""
        assert is_status_present(_slot(status=status), 600) is False

    def test_unavailable_flag(self):
        """Test an unavailable slot is absent whatever its status."""
        assert is_status_present(_slot(is_available=False), 600) is False

    def test_undefined_sub_state(self):
        """Test an undefined algorithmic sub-state is absent."""
        assert is_status_present(_slot(v2_sub_state="not_defined"), 600) is False

    def test_arrival_counts_from_start_hour(self):
        """Test an arrival is absent before and present from the start hour."""
        slot = _slot(status="arrival", start="08:00")

        assert is_status_present(slot, 7 * 60 + 59) is False
        assert is_status_present(slot, 8 * 60) is True

    def test_departure_counts_until_end_hour(self):
        """Test a departure is present before and absent from the end hour."""
        slot = _slot(status="departure", end="16:00")

        assert is_status_present(slot, 15 * 60 + 59) is True
        assert is_status_present(slot, 16 * 60) is False

    def test_approved_absence_block(self):
        """Test an approved absence block makes the person absent inside it."""
        block = UnavailableBlock(id="a1", start="10:00", end="12:00",
                                 block_type="absence", status="approved")
        slot = _slot(blocks=[block])

        assert is_status_present(slot, 11 * 60) is False
        assert is_status_present(slot, 12 * 60) is True

    def test_pending_absence_block_is_ignored(self):
        """Test a pending absence does not affect presence."""
        block = UnavailableBlock(id="a1", start="10:00", end="12:00",
                                 block_type="absence", status="pending")

        assert is_status_present(_slot(blocks=[block]), 11 * 60) is True

    def test_untyped_absence_block_by_id(self):
        """Test an untyped block with an absence id follows absence approval rules."""
        pending = UnavailableBlock(id="abs-7", start="10:00", end="12:00", status="pending")
        approved = UnavailableBlock(id="abs-8", start="10:00", end="12:00", status="approved")

        assert is_status_present(_slot(blocks=[pending]), 11 * 60) is True
        assert is_status_present(_slot(blocks=[approved]), 11 * 60) is False

    def test_untyped_other_block_is_active(self):
        """Test an untyped block without an absence id counts unless rejected."""
        block = UnavailableBlock(id="own-1", start="10:00", end="12:00")

        assert is_status_present(_slot(blocks=[block]), 11 * 60) is False

    def test_hourly_blockage(self):
        """Test a blockage counts unless rejected."""
        active = UnavailableBlock(id="b1", start="10:00", end="12:00",
                                  block_type="hourly_blockage", status="approved")
        rejected = UnavailableBlock(id="b2", start="10:00", end="12:00",
                                    block_type="hourly_blockage", status="rejected")

        assert is_status_present(_slot(blocks=[active]), 11 * 60) is False
        assert is_status_present(_slot(blocks=[rejected]), 11 * 60) is True

    def test_overnight_block(self):
        """Test a block ending before it starts runs past midnight."""
        block = UnavailableBlock(id="b1", start="22:00", end="02:00",
                                 block_type="hourly_blockage", status="approved")

        assert is_status_present(_slot(blocks=[block]), 23 * 60) is False
        assert is_status_present(_slot(blocks=[block]), 21 * 60) is True


class TestIsPresentAt:
    """Tests for is_present_at."""

    def test_blockage_window(self):
        """Test a resolved day with an hourly blockage."""
        person = Person(id="p1")
        blockage = HourlyBlockage(id="b1", person_id="p1", date="2024-01-10",
                                  start_time="12:00", end_time="14:00")

        assert is_present_at(person, date(2024, 1, 10), "09:00", hourly_blockages=[blockage]) is True
        assert is_present_at(person, date(2024, 1, 10), "13:00", hourly_blockages=[blockage]) is False

    def test_arrival_entry(self):
        """Test a manual arrival entry."""
        person = Person(id="p1", daily_availability={
            "2024-01-10": DailyAvailabilityEntry(source="manual", start_hour="08:00"),
        })

        assert is_present_at(person, "2024-01-10", "07:00") is False
        assert is_present_at(person, "2024-01-10", "09:00") is True


class TestComputedAbsenceStatus:
    """Tests for computed_absence_status."""

    def _absence(self, status=None):
        return Absence(id="abs-1", person_id="p1", start_date="2024-01-10",
                       end_date="2024-01-12", status=status)

    def _person(self, entries):
        return Person(id="p1", daily_availability={
            key: DailyAvailabilityEntry(source="manual", **fields)
            for key, fields in entries.items()
        })

    def test_missing_absence_is_pending(self):
        """Test no absence means pending."""
        assert computed_absence_status(Person(id="p1"), None) is AbsenceStatus.PENDING

    def test_explicit_status_is_returned(self):
        """Test an explicit non-pending status is taken as is."""
        result = computed_absence_status(Person(id="p1"), self._absence(status="rejected"))

        assert result is AbsenceStatus.REJECTED

    def test_unknown_status_is_pending(self):
        """Test an unrecognized explicit status reads as pending."""
        result = computed_absence_status(Person(id="p1"), self._absence(status="maybe"))

        assert result is AbsenceStatus.PENDING

    def test_all_days_home_is_approved(self):
        """Test every covered day at home approves the request."""
        person = self._person({
            "2024-01-10": {"status": "home"},
            "2024-01-11": {"status": "leave"},
            "2024-01-12": {"is_available": False},
        })

        assert computed_absence_status(person, self._absence()) is AbsenceStatus.APPROVED

    def test_some_days_home_is_partially_approved(self):
        """Test a mix of home and base days."""
        person = self._person({
            "2024-01-10": {"status": "home"},
            "2024-01-11": {"status": "base"},
        })

        assert computed_absence_status(person, self._absence()) is AbsenceStatus.PARTIALLY_APPROVED

    def test_all_days_on_base_is_rejected(self):
        """Test every covered day on base rejects the request."""
        person = self._person({
            "2024-01-10": {"status": "arrival"},
            "2024-01-11": {"status": "base"},
            "2024-01-12": {"is_available": True},
        })

        assert computed_absence_status(person, self._absence()) is AbsenceStatus.REJECTED

    def test_no_records_is_pending(self):
        """Test days without entries leave the request pending."""
        assert computed_absence_status(Person(id="p1"), self._absence()) is AbsenceStatus.PENDING

    def test_range_across_month_end(self):
        """Test every day of a request spanning a month boundary is counted."""
        absence = Absence(id="abs-2", person_id="p1", start_date="2024-01-31", end_date="2024-02-01")
        person = self._person({
            "2024-01-31": {"status": "home"},
            "2024-02-01": {"status": "home"},
        })

        assert computed_absence_status(person, absence) is AbsenceStatus.APPROVED
