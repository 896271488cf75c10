"""
Utility modules for availability resolution
"""

from practice_availability.utils.time_ranges import (
    normalize,
    merge,
    subtract,
    clip,
    total_duration,
    split_into_windows
)

__all__ = [
    "normalize",
    "merge",
    "subtract",
    "clip",
    "total_duration",
    "split_into_windows"
]
