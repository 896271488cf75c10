"""
Availability stores and resolver
"""

from practice_availability.services.organisation_service import OrganisationSettingsService
from practice_availability.services.base_availability_service import BaseAvailabilityService
from practice_availability.services.weekly_override_service import WeeklyOverrideService
from practice_availability.services.occupancy_service import OccupancyService
from practice_availability.services.availability_resolver import AvailabilityResolver

__all__ = [
    "OrganisationSettingsService",
    "BaseAvailabilityService",
    "WeeklyOverrideService",
    "OccupancyService",
    "AvailabilityResolver",
]
