"""
Base Availability API Router
Weekly open-hours template of the acting user
"""

from fastapi import APIRouter, Depends, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.database import get_database
from practice_availability.middleware.auth import AvailabilityContext, get_availability_context
from practice_availability.models.availability import (
    BaseAvailability, BaseAvailabilityRequest, BaseAvailabilityResponse
)
from practice_availability.schemas.common import MessageResponse, SingleResponse
from practice_availability.services.base_availability_service import BaseAvailabilityService

router = APIRouter()


def get_base_availability_service(
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> BaseAvailabilityService:
    """Get base availability service"""
    return BaseAvailabilityService(db)


def to_response(template: BaseAvailability) -> BaseAvailabilityResponse:
    return BaseAvailabilityResponse(
        organisation_id=template.organisation_id,
        user_id=template.user_id,
        days=template.all_days(),
        updated_at=template.updated_at
    )


@router.put(
    "/{org_id}",
    response_model=SingleResponse[BaseAvailabilityResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Replace weekly template"
)
async def set_all_base_availability(
    data: BaseAvailabilityRequest,
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: BaseAvailabilityService = Depends(get_base_availability_service)
):
    """Replace the whole weekly template; days left out are closed"""
    template = await service.set_all_base_availability(
        ctx.organisation_id, ctx.user_id, data.availabilities
    )
    return SingleResponse(data=to_response(template), message="Base availability saved")


@router.get(
    "/{org_id}",
    response_model=SingleResponse[BaseAvailabilityResponse],
    summary="Get weekly template"
)
async def get_base_availability(
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: BaseAvailabilityService = Depends(get_base_availability_service)
):
    """All seven days; closed days have no slots"""
    template = await service.get_base_availability(ctx.organisation_id, ctx.user_id)
    return SingleResponse(data=to_response(template))


@router.delete(
    "/{org_id}",
    response_model=MessageResponse,
    summary="Delete weekly template"
)
async def delete_base_availability(
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: BaseAvailabilityService = Depends(get_base_availability_service)
):
    """Remove the template (offboarding)"""
    await service.delete_base_availability(ctx.organisation_id, ctx.user_id)
    return MessageResponse(message="Base availability deleted")
