"""
Organisations API Router
Calendar conventions (timezone, week start) per organisation
"""

from fastapi import APIRouter, Depends, Path
from motor.motor_asyncio import AsyncIOMotorDatabase

from practice_availability.database import get_database
from practice_availability.models.organisation import (
    SchedulingSettingsResponse, SchedulingSettingsUpdate
)
from practice_availability.schemas.common import SingleResponse
from practice_availability.services.organisation_service import OrganisationSettingsService
from practice_availability.utils.validators import validate_identifier

router = APIRouter()


def get_organisation_service(
    db: AsyncIOMotorDatabase = Depends(get_database)
) -> OrganisationSettingsService:
    """Get organisation settings service"""
    return OrganisationSettingsService(db)


@router.get(
    "/{org_id}/scheduling-settings",
    response_model=SingleResponse[SchedulingSettingsResponse],
    summary="Get scheduling settings"
)
async def get_scheduling_settings(
    org_id: str = Path(...),
    service: OrganisationSettingsService = Depends(get_organisation_service)
):
    """Stored settings, or the configured defaults"""
    settings = await service.get_scheduling_settings(validate_identifier(org_id, "organisation id"))
    return SingleResponse(data=SchedulingSettingsResponse.model_validate(settings))


@router.put(
    "/{org_id}/scheduling-settings",
    response_model=SingleResponse[SchedulingSettingsResponse],
    summary="Replace scheduling settings"
)
async def set_scheduling_settings(
    data: SchedulingSettingsUpdate,
    org_id: str = Path(...),
    service: OrganisationSettingsService = Depends(get_organisation_service)
):
    """
    Changing the week start re-keys future override lookups; overrides
    stored under the old convention are not migrated.
    """
    settings = await service.set_scheduling_settings(
        validate_identifier(org_id, "organisation id"), data.timezone, data.week_start_day
    )
    return SingleResponse(
        data=SchedulingSettingsResponse.model_validate(settings),
        message="Scheduling settings saved"
    )
