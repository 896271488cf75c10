"""
Weekly Override API Router
Week-specific replacement of template days
"""

from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.database import get_database
from practice_availability.middleware.auth import AvailabilityContext, get_availability_context
from practice_availability.models.availability import WeeklyOverrideRequest, WeeklyOverrideResponse
from practice_availability.schemas.common import MessageResponse, SingleResponse
from practice_availability.services.weekly_override_service import WeeklyOverrideService
from practice_availability.utils.calendar import parse_iso_date_or_datetime
from practice_availability.utils.exceptions import ResourceNotFoundError

router = APIRouter()


def get_weekly_override_service(
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> WeeklyOverrideService:
    """Get weekly override service"""
    return WeeklyOverrideService(db)


@router.post(
    "/{org_id}",
    response_model=SingleResponse[WeeklyOverrideResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Replace the override for a week"
)
async def add_weekly_availability_override(
    data: WeeklyOverrideRequest,
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: WeeklyOverrideService = Depends(get_weekly_override_service)
):
    """Store overrides for the week containing weekStartDate"""
    week_date = parse_iso_date_or_datetime(data.week_start_date, "weekStartDate")
    override = await service.add_weekly_availability_override(
        ctx.organisation_id, ctx.user_id, week_date, data.overrides
    )
    return SingleResponse(
        data=WeeklyOverrideResponse.from_document(override),
        message="Weekly override added"
    )


@router.get(
    "/{org_id}",
    response_model=SingleResponse[WeeklyOverrideResponse],
    summary="Get the override for a week"
)
async def get_weekly_availability_override(
    week_start_date: str = Query(..., alias="weekStartDate", description="Any date inside the week"),
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: WeeklyOverrideService = Depends(get_weekly_override_service)
):
    """404 when the week has no override (it uses the base template)"""
    week_date = parse_iso_date_or_datetime(week_start_date, "weekStartDate")
    override = await service.get_weekly_availability_override(
        ctx.organisation_id, ctx.user_id, week_date
    )
    if override is None:
        raise ResourceNotFoundError("Weekly override")
    return SingleResponse(data=WeeklyOverrideResponse.from_document(override))


@router.delete(
    "/{org_id}",
    response_model=MessageResponse,
    summary="Delete the override for a week"
)
async def delete_weekly_availability_override(
    week_start_date: str = Query(..., alias="weekStartDate", description="Any date inside the week"),
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: WeeklyOverrideService = Depends(get_weekly_override_service)
):
    """Revert the week to the base template; deleting twice is fine"""
    week_date = parse_iso_date_or_datetime(week_start_date, "weekStartDate")
    await service.delete_weekly_availability_override(
        ctx.organisation_id, ctx.user_id, week_date
    )
    return MessageResponse(message="Override deleted")
