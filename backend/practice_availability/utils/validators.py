"""
Identifier validation for values that end up in Mongo filters
"""

import re

from practice_availability.utils.exceptions import AvailabilityServiceException

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,64}$")


class InvalidIdentifierError(AvailabilityServiceException):
    """Identifier is empty, too long or carries query operators"""

    def __init__(self, field: str):
        super().__init__(
            code="INVALID_IDENTIFIER",
            message=f"Invalid {field} format",
            details={"field": field}
        )


def validate_identifier(value: str, field: str) -> str:
    """
    Validate an organisation or user id.

    Returns:
        str: the stripped identifier

    Raises:
        InvalidIdentifierError: if the value is empty, longer than 64
            characters or contains anything but letters, digits, `_ . -`
    """
    if value is None:
        raise InvalidIdentifierError(field)

    value = str(value).strip()
    if not IDENTIFIER_PATTERN.match(value):
        raise InvalidIdentifierError(field)

    return value
