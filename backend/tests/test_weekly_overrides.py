"""
Weekly override store tests
"""

import pytest
from datetime import date, datetime, timezone

from practice_availability.models.availability import DayOfWeek, TimeSlot
from practice_availability.services.organisation_service import OrganisationSettingsService
from practice_availability.services.weekly_override_service import WeeklyOverrideService
from practice_availability.utils.exceptions import InvalidSlotError


def slots(*pairs):
    return [TimeSlot(start_time=start, end_time=end) for start, end in pairs]


class TestWeeklyOverrideService:
    """Tests for per-week override documents"""

    @pytest.mark.asyncio
    async def test_week_start_normalized_to_monday(self, mock_db, org_id, user_id):
        """Test override dates normalize to the week Monday"""
        service = WeeklyOverrideService(mock_db)
        # Wednesday 2024-01-17 belongs to the week of Monday 2024-01-15
        override = await service.add_weekly_availability_override(
            org_id, user_id, date(2024, 1, 17), {DayOfWeek.FRIDAY: slots(("10:00", "14:00"))}
        )
        assert override.week_start_date == "2024-01-15"
        assert override.week_start == datetime(2024, 1, 15, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_any_day_of_week_finds_same_override(self, mock_db, org_id, user_id):
        """Test any date in the week finds the same override"""
        service = WeeklyOverrideService(mock_db)
        await service.add_weekly_availability_override(
            org_id, user_id, date(2024, 1, 15), {DayOfWeek.MONDAY: []}
        )
        for day in range(15, 22):
            found = await service.get_weekly_availability_override(org_id, user_id, date(2024, 1, day))
            assert found is not None
            assert found.week_start_date == "2024-01-15"

        assert await service.get_weekly_availability_override(org_id, user_id, date(2024, 1, 22)) is None

    @pytest.mark.asyncio
    async def test_empty_day_means_closed(self, mock_db, org_id, user_id):
        """Test an empty override day is stored as closed"""
        service = WeeklyOverrideService(mock_db)
        await service.add_weekly_availability_override(
            org_id, user_id, date(2024, 1, 15), {DayOfWeek.TUESDAY: []}
        )
        found = await service.get_weekly_availability_override(org_id, user_id, date(2024, 1, 15))
        assert found.slots_for(DayOfWeek.TUESDAY) == []
        assert found.slots_for(DayOfWeek.WEDNESDAY) is None

    @pytest.mark.asyncio
    async def test_add_replaces_previous_override(self, mock_db, org_id, user_id):
        """Test a second add replaces the whole override"""
        service = WeeklyOverrideService(mock_db)
        await service.add_weekly_availability_override(
            org_id, user_id, date(2024, 1, 15), {DayOfWeek.MONDAY: slots(("08:00", "10:00"))}
        )
        await service.add_weekly_availability_override(
            org_id, user_id, date(2024, 1, 18), {DayOfWeek.THURSDAY: slots(("12:00", "15:00"))}
        )

        found = await service.get_weekly_availability_override(org_id, user_id, date(2024, 1, 15))
        assert found.slots_for(DayOfWeek.MONDAY) is None
        assert len(found.slots_for(DayOfWeek.THURSDAY)) == 1
        assert await mock_db.weekly_overrides.count_documents() == 1

    @pytest.mark.asyncio
    async def test_invalid_slots_rejected_without_write(self, mock_db, org_id, user_id):
        """Test invalid override slots write nothing"""
        service = WeeklyOverrideService(mock_db)
        with pytest.raises(InvalidSlotError):
            await service.add_weekly_availability_override(
                org_id, user_id, date(2024, 1, 15), {DayOfWeek.MONDAY: slots(("12:00", "09:00"))}
            )
        assert await mock_db.weekly_overrides.count_documents() == 0

    @pytest.mark.asyncio
    async def test_delete_is_idempotent(self, mock_db, org_id, user_id):
        """Test deleting a missing override is not an error"""
        service = WeeklyOverrideService(mock_db)
        await service.add_weekly_availability_override(
            org_id, user_id, date(2024, 1, 15), {DayOfWeek.MONDAY: []}
        )
        assert await service.delete_weekly_availability_override(org_id, user_id, date(2024, 1, 19)) is True
        assert await service.delete_weekly_availability_override(org_id, user_id, date(2024, 1, 19)) is False
        assert await service.get_weekly_availability_override(org_id, user_id, date(2024, 1, 15)) is None

    @pytest.mark.asyncio
    async def test_sunday_week_start(self, mock_db, org_id, user_id):
        """Test overrides keyed by Sunday week start"""
        settings_service = OrganisationSettingsService(mock_db)
        await settings_service.set_scheduling_settings(org_id, "UTC", DayOfWeek.SUNDAY)
        service = WeeklyOverrideService(mock_db, settings_service)

        # Wednesday 2024-01-17 belongs to the week of Sunday 2024-01-14
        override = await service.add_weekly_availability_override(
            org_id, user_id, date(2024, 1, 17), {DayOfWeek.MONDAY: []}
        )
        assert override.week_start_date == "2024-01-14"

        found = await service.get_weekly_availability_override(org_id, user_id, date(2024, 1, 20))
        assert found is not None
        assert await service.get_weekly_availability_override(org_id, user_id, date(2024, 1, 21)) is None

    @pytest.mark.asyncio
    async def test_timestamp_uses_organisation_local_date(self, mock_db, org_id, user_id):
        """Test a timestamp resolves in the organisation timezone"""
        settings_service = OrganisationSettingsService(mock_db)
        await settings_service.set_scheduling_settings(org_id, "Australia/Sydney", DayOfWeek.MONDAY)
        service = WeeklyOverrideService(mock_db, settings_service)

        # Sunday 2024-01-21 14:00 UTC is already Monday 2024-01-22 in Sydney
        override = await service.add_weekly_availability_override(
            org_id, user_id, datetime(2024, 1, 21, 14, 0, tzinfo=timezone.utc), {DayOfWeek.MONDAY: []}
        )
        assert override.week_start_date == "2024-01-22"
        # Sydney midnight is 13:00 UTC the previous day (AEDT, UTC+11)
        assert override.week_start == datetime(2024, 1, 21, 13, 0, tzinfo=timezone.utc)
