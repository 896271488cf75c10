"""
Base availability store tests
"""

import pytest

from practice_availability.models.availability import DayOfWeek, DayTemplate, TimeSlot
from practice_availability.services.base_availability_service import BaseAvailabilityService
from practice_availability.utils.exceptions import InvalidSlotError


class TestBaseAvailabilityService:
    """Tests for weekly template replace/read/delete"""

    @pytest.mark.asyncio
    async def test_set_and_get(self, mock_db, org_id, user_id, weekday_template):
        """Test setting and reading a weekly template"""
        service = BaseAvailabilityService(mock_db)
        await service.set_all_base_availability(org_id, user_id, weekday_template)

        template = await service.get_base_availability(org_id, user_id)
        assert len(template.days) == 5
        monday = template.slots_for(DayOfWeek.MONDAY)
        assert [(s.start_time, s.end_time) for s in monday] == [("09:00", "12:00"), ("13:00", "17:00")]
        assert template.slots_for(DayOfWeek.SATURDAY) == []

    @pytest.mark.asyncio
    async def test_get_without_template_is_all_closed(self, mock_db, org_id, user_id):
        """Test a missing template reads as seven closed days"""
        service = BaseAvailabilityService(mock_db)
        template = await service.get_base_availability(org_id, user_id)

        days = template.all_days()
        assert len(days) == 7
        assert all(day.slots == [] for day in days)

    @pytest.mark.asyncio
    async def test_replace_drops_missing_days(self, mock_db, org_id, user_id, weekday_template):
        """Test a replace closes days it does not mention"""
        service = BaseAvailabilityService(mock_db)
        await service.set_all_base_availability(org_id, user_id, weekday_template)
        await service.set_all_base_availability(org_id, user_id, [
            DayTemplate(day_of_week=DayOfWeek.SATURDAY, slots=[TimeSlot(start_time="10:00", end_time="14:00")])
        ])

        template = await service.get_base_availability(org_id, user_id)
        assert template.slots_for(DayOfWeek.MONDAY) == []
        assert len(template.slots_for(DayOfWeek.SATURDAY)) == 1
        assert await mock_db.base_availability.count_documents() == 1

    @pytest.mark.asyncio
    async def test_replace_is_idempotent(self, mock_db, org_id, user_id, weekday_template):
        """Test replacing with the same template twice"""
        service = BaseAvailabilityService(mock_db)
        await service.set_all_base_availability(org_id, user_id, weekday_template)
        first = await service.get_base_availability(org_id, user_id)
        await service.set_all_base_availability(org_id, user_id, weekday_template)
        second = await service.get_base_availability(org_id, user_id)

        assert first.days == second.days
        assert first.created_at == second.created_at

    @pytest.mark.asyncio
    async def test_invalid_day_leaves_template_untouched(self, mock_db, org_id, user_id, weekday_template):
        """Test an invalid day leaves the stored template as it was"""
        service = BaseAvailabilityService(mock_db)
        await service.set_all_base_availability(org_id, user_id, weekday_template)

        bad = weekday_template + [DayTemplate(
            day_of_week=DayOfWeek.SATURDAY,
            slots=[
                TimeSlot(start_time="09:00", end_time="12:00"),
                TimeSlot(start_time="11:00", end_time="13:00"),
            ]
        )]
        with pytest.raises(InvalidSlotError) as exc:
            await service.set_all_base_availability(org_id, user_id, bad)
        assert exc.value.message.startswith("SATURDAY")

        template = await service.get_base_availability(org_id, user_id)
        assert template.slots_for(DayOfWeek.SATURDAY) == []
        assert len(template.slots_for(DayOfWeek.MONDAY)) == 2

    @pytest.mark.asyncio
    async def test_duplicate_day_rejected(self, mock_db, org_id, user_id):
        """Test the same weekday listed twice is rejected"""
        service = BaseAvailabilityService(mock_db)
        entries = [
            DayTemplate(day_of_week=DayOfWeek.MONDAY, slots=[TimeSlot(start_time="09:00", end_time="10:00")]),
            DayTemplate(day_of_week=DayOfWeek.MONDAY, slots=[TimeSlot(start_time="11:00", end_time="12:00")]),
        ]
        with pytest.raises(InvalidSlotError):
            await service.set_all_base_availability(org_id, user_id, entries)
        assert await mock_db.base_availability.count_documents() == 0

    @pytest.mark.asyncio
    async def test_slots_stored_sorted(self, mock_db, org_id, user_id):
        """Test slots are stored in start order"""
        service = BaseAvailabilityService(mock_db)
        await service.set_all_base_availability(org_id, user_id, [
            DayTemplate(day_of_week=DayOfWeek.TUESDAY, slots=[
                TimeSlot(start_time="14:00", end_time="18:00"),
                TimeSlot(start_time="08:00", end_time="12:00"),
            ])
        ])
        template = await service.get_base_availability(org_id, user_id)
        assert [s.start_time for s in template.slots_for(DayOfWeek.TUESDAY)] == ["08:00", "14:00"]

    @pytest.mark.asyncio
    async def test_templates_are_scoped_by_user(self, mock_db, org_id, user_id, weekday_template):
        """Test templates of different users are independent"""
        service = BaseAvailabilityService(mock_db)
        await service.set_all_base_availability(org_id, user_id, weekday_template)

        other = await service.get_base_availability(org_id, "user_other")
        assert other.days == []
        other_org = await service.get_base_availability("org_other", user_id)
        assert other_org.days == []

    @pytest.mark.asyncio
    async def test_delete(self, mock_db, org_id, user_id, weekday_template):
        """Test deleting a template"""
        service = BaseAvailabilityService(mock_db)
        await service.set_all_base_availability(org_id, user_id, weekday_template)

        assert await service.delete_base_availability(org_id, user_id) is True
        assert await service.delete_base_availability(org_id, user_id) is False
        template = await service.get_base_availability(org_id, user_id)
        assert template.days == []
