"""
API response envelopes
"""

from practice_availability.schemas.common import (
    ErrorDetail, ErrorResponse, MessageResponse, SingleResponse, ListResponse
)

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "MessageResponse",
    "SingleResponse",
    "ListResponse",
]
