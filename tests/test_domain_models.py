"""
Tests for domain models.
"""

from slotresolver.domain.models import (
    AvailabilityHistory,
    AvailabilitySlot,
    DailyAvailabilityEntry,
    Person,
    TeamRotation,
    UnavailableBlock,
)


def _manual(status="full"):
    return DailyAvailabilityEntry(source="manual", status=status)


def _algorithm(status="full"):
    return DailyAvailabilityEntry(source="algorithm", status=status)


class TestAvailabilityHistory:
    """Tests for the ordered history view."""

    def test_keys_are_sorted(self):
        """Test keys come back in chronological order regardless of input order."""
        history = AvailabilityHistory({
            "2024-01-08": _manual(),
            "2023-12-31": _manual(),
            "2024-01-02": _manual(),
        })

        assert history.keys() == ("2023-12-31", "2024-01-02", "2024-01-08")
        assert list(history) == list(history.keys())
        assert len(history) == 3

    def test_latest_manual_before_skips_algorithm_entries(self):
        """Test the nearest non-algorithmic prior entry is found."""
        history = AvailabilityHistory({
            "2024-01-05": _manual("full"),
            "2024-01-08": _algorithm("home"),
        })

        key, entry = history.latest_manual_before("2024-01-10")

        assert key == "2024-01-05"
        assert entry.status == "full"

    def test_latest_manual_before_is_strict(self):
        """Test an entry on the target date itself is not a prior entry."""
        history = AvailabilityHistory({
            "2024-01-05": _manual("home"),
            "2024-01-10": _manual("full"),
        })

        key, _ = history.latest_manual_before("2024-01-10")

        assert key == "2024-01-05"

    def test_latest_manual_before_none(self):
        """Test None when only later or algorithmic entries exist."""
        history = AvailabilityHistory({
            "2024-01-03": _algorithm(),
            "2024-02-01": _manual(),
        })

        assert history.latest_manual_before("2024-01-10") is None
        assert AvailabilityHistory().latest_manual_before("2024-01-10") is None

    def test_entry_without_source_counts_as_manual(self):
        """Test a record with no source is treated as human-entered."""
        history = AvailabilityHistory({"2024-01-01": DailyAvailabilityEntry(status="home")})

        assert history.latest_manual_before("2024-01-02") is not None


class TestPerson:
    """Tests for Person construction."""

    def test_mapping_is_wrapped_in_history(self):
        """Test a plain dict of entries becomes an AvailabilityHistory."""
        person = Person(id="p1", daily_availability={"2024-01-01": _manual()})

        assert isinstance(person.daily_availability, AvailabilityHistory)
        assert "2024-01-01" in person.daily_availability

    def test_default_history_is_empty(self):
        """Test a person without entries has an empty history."""
        assert len(Person(id="p1").daily_availability) == 0


class TestTeamRotation:
    """Tests for TeamRotation."""

    def test_cycle_length(self):
        """Test the cycle length adds on and off days."""
        rotation = TeamRotation(
            id="r1", team_id="t1", days_on_base=11, days_at_home=3, start_date="2026-01-01"
        )
        assert rotation.cycle_length == 14


class TestAvailabilitySlot:
    """Tests for slot serialization."""

    def test_to_dict_uses_presentation_names(self):
        """Test the output shape and omission of unset optional fields."""
        slot = AvailabilitySlot(
            is_available=False,
            status="home",
            start_hour="00:00",
            end_hour="23:59",
            source="absence",
            unavailable_blocks=(
                UnavailableBlock(id="a1", start="00:00", end="23:59", reason="Absence",
                                 block_type="absence", status="approved"),
            ),
            home_status_type="gimel",
        )

        data = slot.to_dict()

        assert data == {
            "isAvailable": False,
            "status": "home",
            "startHour": "00:00",
            "endHour": "23:59",
            "source": "absence",
            "unavailableBlocks": [
                {"id": "a1", "start": "00:00", "end": "23:59", "reason": "Absence",
                 "type": "absence", "status": "approved"},
            ],
            "homeStatusType": "gimel",
        }
