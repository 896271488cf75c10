"""
Request Context
Resolves the organisation and acting user of a request

Authentication itself happens upstream; the acting user arrives in the
X-User-Id header set by the gateway.
"""

from typing import Optional
from fastapi import Header, Path

from practice_availability.utils.exceptions import MissingUserError
from practice_availability.utils.validators import validate_identifier


class AvailabilityContext:
    """
    Context for (organisation, user) scoped operations

    Every store key starts with these two values.
    """

    def __init__(self, organisation_id: str, user_id: str):
        self.organisation_id = organisation_id
        self.user_id = user_id

    def __repr__(self) -> str:
        return f"AvailabilityContext(organisation_id={self.organisation_id!r}, user_id={self.user_id!r})"


async def get_acting_user_id(
    x_user_id: Optional[str] = Header(None, alias="X-User-Id")
) -> str:
    """
    Acting user from the X-User-Id header

    Raises MissingUserError (400) if the header is absent or blank
    """
    if x_user_id is None or not x_user_id.strip():
        raise MissingUserError()
    return validate_identifier(x_user_id, "user id")


async def get_availability_context(
    org_id: str = Path(..., description="Organisation id"),
    x_user_id: Optional[str] = Header(None, alias="X-User-Id")
) -> AvailabilityContext:
    """
    Dependency to get the (organisation, user) pair for scoped queries
    """
    user_id = await get_acting_user_id(x_user_id)
    return AvailabilityContext(validate_identifier(org_id, "organisation id"), user_id)
