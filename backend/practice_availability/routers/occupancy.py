"""
Occupancy API Router
Busy intervals written by booking and blocking workflows
"""

from fastapi import APIRouter, Depends, Query, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.database import get_database
from practice_availability.middleware.auth import AvailabilityContext, get_availability_context
from practice_availability.models.availability import (
    OccupancyBulkRequest, OccupancyCreate, OccupancyRequest, OccupancyResponse
)
from practice_availability.schemas.common import ListResponse, SingleResponse
from practice_availability.services.occupancy_service import OccupancyService
from practice_availability.utils.calendar import parse_timestamp
from practice_availability.utils.validators import validate_identifier

router = APIRouter()


def get_occupancy_service(
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> OccupancyService:
    """Get occupancy service"""
    return OccupancyService(db)


def to_create(data: OccupancyRequest, prefix: str = "") -> OccupancyCreate:
    return OccupancyCreate(
        start_time=parse_timestamp(data.start_time, f"{prefix}startTime"),
        end_time=parse_timestamp(data.end_time, f"{prefix}endTime"),
        source_type=data.source_type,
        reference_id=data.reference_id
    )


# Declared before /{org_id} so "bulk" is never read as an organisation id
@router.post(
    "/bulk",
    response_model=ListResponse[OccupancyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add occupancies all-or-nothing"
)
async def add_all_occupancies(
    data: OccupancyBulkRequest,
    service: OccupancyService = Depends(get_occupancy_service)
):
    """Either every occupancy is stored or none is"""
    organisation_id = validate_identifier(data.organisation_id, "organisation id")
    user_id = validate_identifier(data.user_id, "user id")
    items = [
        to_create(item, f"occupancies[{index}].")
        for index, item in enumerate(data.occupancies)
    ]

    occupancies = await service.add_all_occupancies(organisation_id, user_id, items)
    return ListResponse(
        data=[OccupancyResponse.model_validate(o) for o in occupancies],
        count=len(occupancies)
    )


@router.post(
    "/{org_id}",
    response_model=SingleResponse[OccupancyResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Add an occupancy"
)
async def add_occupancy(
    data: OccupancyRequest,
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: OccupancyService = Depends(get_occupancy_service)
):
    item = to_create(data)
    occupancy = await service.add_occupancy(
        ctx.organisation_id,
        ctx.user_id,
        item.start_time,
        item.end_time,
        item.source_type,
        item.reference_id
    )
    return SingleResponse(
        data=OccupancyResponse.model_validate(occupancy),
        message="Occupancy added"
    )


@router.get(
    "/{org_id}",
    response_model=ListResponse[OccupancyResponse],
    summary="List occupancies in a range"
)
async def get_occupancy(
    start_date: str = Query(..., alias="startDate"),
    end_date: str = Query(..., alias="endDate"),
    ctx: AvailabilityContext = Depends(get_availability_context),
    service: OccupancyService = Depends(get_occupancy_service)
):
    """Records intersecting [startDate, endDate), ordered by start"""
    occupancies = await service.get_occupancy(
        ctx.organisation_id,
        ctx.user_id,
        parse_timestamp(start_date, "startDate"),
        parse_timestamp(end_date, "endDate")
    )
    return ListResponse(
        data=[OccupancyResponse.model_validate(o) for o in occupancies],
        count=len(occupancies)
    )
