"""
Per-entity weekly availability grid.

A calendar belongs to one teacher or one section and stores, for every
(day, slot), either None (free) or the cell content booked there.
"""
from typing import Any, Dict, List, Optional

from service.constants import DAYS, MAX_CONSECUTIVE, SLOTS_PER_DAY


class ResourceCalendar:
    """
    Weekly grid for a single teacher or section.

    Cells are addressed by integer (day index, slot index) pairs. Bookings
    are all-or-nothing over a contiguous block of slots on one day.
    """

    def __init__(self, owner: str, num_days: int = len(DAYS), slots_per_day: int = SLOTS_PER_DAY,
                 max_consecutive: int = MAX_CONSECUTIVE):
        self.owner = owner
        self.num_days = num_days
        self.slots_per_day = slots_per_day
        self.max_consecutive = max_consecutive
        self.grid: List[List[Optional[Any]]] = [
            [None] * slots_per_day for _ in range(num_days)
        ]

    def is_free(self, day: int, start: int, length: int = 1) -> bool:
        """True if every slot in [start, start + length) exists and is free."""
        if start < 0 or start + length > self.slots_per_day:
            return False
        row = self.grid[day]
        return all(row[i] is None for i in range(start, start + length))

    def run_length_with(self, day: int, start: int, length: int) -> int:
        """
        Length of the occupied run that booking [start, start + length)
        would produce, merging with occupied neighbours on both sides.
        """
        row = self.grid[day]

        before = 0
        i = start - 1
        while i >= 0 and row[i] is not None:
            before += 1
            i -= 1

        after = 0
        i = start + length
        while i < self.slots_per_day and row[i] is not None:
            after += 1
            i += 1

        return before + length + after

    def can_book(self, day: int, start: int, length: int) -> bool:
        """Block is free and would not push a run past max_consecutive."""
        if not self.is_free(day, start, length):
            return False
        return self.run_length_with(day, start, length) <= self.max_consecutive

    def book(self, day: int, start: int, length: int, content: Any):
        if not self.is_free(day, start, length):
            raise ValueError(
                f"{self.owner}: slots {start}..{start + length - 1} on day {day} are not free"
            )
        for i in range(start, start + length):
            self.grid[day][i] = content

    def longest_run(self, day: int) -> int:
        longest = current = 0
        for cell in self.grid[day]:
            current = current + 1 if cell is not None else 0
            longest = max(longest, current)
        return longest

    def occupied_count(self) -> int:
        return sum(1 for row in self.grid for cell in row if cell is not None)

    def to_dict(self, day_names: List[str] = DAYS) -> Dict[str, List[Optional[Any]]]:
        """Copy of the grid keyed by day name."""
        return {day_names[d]: list(self.grid[d]) for d in range(self.num_days)}
