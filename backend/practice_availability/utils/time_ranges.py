"""
Time-Range Primitives

Pure interval arithmetic used by the availability resolver:
- normalize: validate and sort one day's slots
- merge: coalesce overlapping absolute ranges
- subtract: interval difference between two sorted range lists
"""

from datetime import timedelta
from typing import Iterable

from practice_availability.models.availability import (
    MINUTES_PER_DAY, TimeRange, TimeSlot
)
from practice_availability.utils.exceptions import InvalidSlotError


def _slot_bounds(slot: TimeSlot, position: int) -> tuple[int, int]:
    try:
        return slot.start_minute, slot.end_minute
    except ValueError:
        raise InvalidSlotError(
            f"Slot {position}: {slot.start_time}-{slot.end_time} is not a valid HH:MM range",
            details={"index": position}
        )


def normalize(slots: Iterable[TimeSlot]) -> list[TimeSlot]:
    """
    Sort a day's slots by start time and reject malformed input.

    Args:
        slots: slots of a single weekday, in any order

    Returns:
        The same slots sorted ascending

    Raises:
        InvalidSlotError: a slot with start >= end, outside 00:00-24:00,
            or two slots that overlap (touching end/start is allowed)
    """
    bounded = []
    for position, slot in enumerate(slots):
        start, end = _slot_bounds(slot, position)
        if start >= end:
            raise InvalidSlotError(
                f"Slot {position}: start {slot.start_time} must be before end {slot.end_time}",
                details={"index": position}
            )
        if start < 0 or end > MINUTES_PER_DAY:
            raise InvalidSlotError(
                f"Slot {position}: {slot.start_time}-{slot.end_time} is outside the day",
                details={"index": position}
            )
        bounded.append((start, end, slot))

    bounded.sort(key=lambda item: (item[0], item[1]))

    for (_, prev_end, prev), (start, _, current) in zip(bounded, bounded[1:]):
        if start < prev_end:
            raise InvalidSlotError(
                f"Slots overlap: {prev.start_time}-{prev.end_time} and "
                f"{current.start_time}-{current.end_time}"
            )

    return [slot for _, _, slot in bounded]


def merge(ranges: Iterable[TimeRange]) -> list[TimeRange]:
    """
    Coalesce ranges into the minimal sorted set with the same union.

    Overlapping and touching ranges are joined; empty ranges are dropped.
    """
    ordered = sorted(r for r in ranges if r.start < r.end)
    if not ordered:
        return []

    merged = [ordered[0]]
    for current in ordered[1:]:
        last = merged[-1]
        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = TimeRange(last.start, current.end)
        else:
            merged.append(current)

    return merged


def subtract(base: list[TimeRange], busy: list[TimeRange]) -> list[TimeRange]:
    """
    Interval difference base - busy.

    Both inputs must be sorted and non-overlapping (see merge). Each base
    range yields zero, one or more pieces; no zero-length piece is emitted.
    """
    result = []
    first = 0

    for rng in base:
        # busy ranges ending before this base range can't touch later ones either
        while first < len(busy) and busy[first].end <= rng.start:
            first += 1

        cursor = rng.start
        index = first
        while index < len(busy) and busy[index].start < rng.end:
            block = busy[index]
            if block.start > cursor:
                result.append(TimeRange(cursor, block.start))
            if block.end > cursor:
                cursor = block.end
            if cursor >= rng.end:
                break
            index += 1

        if cursor < rng.end:
            result.append(TimeRange(cursor, rng.end))

    return result


def clip(ranges: Iterable[TimeRange], window: TimeRange) -> list[TimeRange]:
    """Intersect every range with window, dropping what falls outside"""
    clipped = []
    for rng in ranges:
        start = max(rng.start, window.start)
        end = min(rng.end, window.end)
        if start < end:
            clipped.append(TimeRange(start, end))
    return sorted(clipped)


def total_duration(ranges: Iterable[TimeRange]) -> timedelta:
    """Summed length of the ranges (callers merge first if they may overlap)"""
    total = timedelta(0)
    for rng in ranges:
        total += rng.duration
    return total


def split_into_windows(ranges: Iterable[TimeRange], window: timedelta) -> list[TimeRange]:
    """Cut consecutive fixed-length windows from each range; short remainders are dropped"""
    windows = []
    for rng in ranges:
        cursor = rng.start
        while cursor + window <= rng.end:
            windows.append(TimeRange(cursor, cursor + window))
            cursor += window
    return windows
