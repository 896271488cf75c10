"""
Availability API Router
Read-only views computed from template, overrides and occupancy
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.config import get_settings
from practice_availability.database import get_database
from practice_availability.middleware.auth import AvailabilityContext, get_availability_context
from practice_availability.models.availability import (
    CurrentStatusResponse, DayAvailability, DayAvailabilityResponse, TimeRange,
    TimeRangeResponse, WorkingHoursResponse
)
from practice_availability.models.common import utc_now
from practice_availability.schemas.common import ListResponse
from practice_availability.services.availability_resolver import AvailabilityResolver
from practice_availability.utils.calendar import parse_iso_date_or_datetime

router = APIRouter()


def get_resolver(db: AsyncIOMotorDatabase = Depends(get_database)) -> AvailabilityResolver:
    """Get availability resolver"""
    return AvailabilityResolver(db)


def reference_from_query(value: Optional[str]):
    """Parsed referenceDate, or the current instant when omitted"""
    if value is None:
        return utc_now()
    return parse_iso_date_or_datetime(value, "referenceDate")


def range_response(rng: TimeRange) -> TimeRangeResponse:
    return TimeRangeResponse(start=rng.start, end=rng.end)


def day_response(day: DayAvailability) -> DayAvailabilityResponse:
    return DayAvailabilityResponse(
        date=day.date,
        day_of_week=day.day_of_week,
        ranges=[range_response(rng) for rng in day.ranges]
    )


@router.get(
    "/final-availability/{org_id}",
    response_model=ListResponse[TimeRangeResponse],
    summary="Free time on a date"
)
async def get_final_availability(
    reference_date: Optional[str] = Query(None, alias="referenceDate"),
    ctx: AvailabilityContext = Depends(get_availability_context),
    resolver: AvailabilityResolver = Depends(get_resolver)
):
    """
    Open, unoccupied ranges for the date referenceDate denotes.

    An empty list means the user is not available that day.
    """
    free = await resolver.get_final_availability_for_date(
        ctx.organisation_id, ctx.user_id, reference_from_query(reference_date)
    )
    return ListResponse(data=[range_response(rng) for rng in free], count=len(free))


@router.get(
    "/final-availability/{org_id}/week",
    response_model=ListResponse[DayAvailabilityResponse],
    summary="Free time for each day of a week"
)
async def get_weekly_final_availability(
    reference_date: Optional[str] = Query(None, alias="referenceDate"),
    ctx: AvailabilityContext = Depends(get_availability_context),
    resolver: AvailabilityResolver = Depends(get_resolver)
):
    week = await resolver.get_weekly_final_availability(
        ctx.organisation_id, ctx.user_id, reference_from_query(reference_date)
    )
    return ListResponse(data=[day_response(day) for day in week], count=len(week))


@router.get(
    "/bookable-slots/{org_id}",
    response_model=ListResponse[TimeRangeResponse],
    summary="Fixed-length bookable windows on a date"
)
async def get_bookable_slots(
    reference_date: Optional[str] = Query(None, alias="referenceDate"),
    window_minutes: Optional[int] = Query(None, alias="windowMinutes"),
    ctx: AvailabilityContext = Depends(get_availability_context),
    resolver: AvailabilityResolver = Depends(get_resolver)
):
    if window_minutes is None:
        window_minutes = get_settings().DEFAULT_BOOKING_WINDOW_MINUTES

    slots = await resolver.get_bookable_slots_for_date(
        ctx.organisation_id, ctx.user_id, reference_from_query(reference_date), window_minutes
    )
    return ListResponse(data=[range_response(rng) for rng in slots], count=len(slots))


@router.get(
    "/working-hours/{org_id}",
    response_model=WorkingHoursResponse,
    summary="Free hours in a week"
)
async def get_working_hours(
    reference_date: Optional[str] = Query(None, alias="referenceDate"),
    ctx: AvailabilityContext = Depends(get_availability_context),
    resolver: AvailabilityResolver = Depends(get_resolver)
):
    week_start, hours = await resolver.get_weekly_working_hours(
        ctx.organisation_id, ctx.user_id, reference_from_query(reference_date)
    )
    return WorkingHoursResponse(week_start_date=week_start, hours=round(hours, 2))


@router.get(
    "/current-status/{org_id}",
    response_model=CurrentStatusResponse,
    summary="Status right now"
)
async def get_current_status(
    ctx: AvailabilityContext = Depends(get_availability_context),
    resolver: AvailabilityResolver = Depends(get_resolver)
):
    """AVAILABLE, BUSY or OFF at the moment of the request"""
    now = utc_now()
    current = await resolver.get_current_status(ctx.organisation_id, ctx.user_id, now)
    return CurrentStatusResponse(status=current, at=now)
