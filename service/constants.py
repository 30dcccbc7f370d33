"""
Fixed grid and workload constants shared with every consumer of a timetable.

Persisted or rendered timetables index into these lists, so changing them
breaks stored grids.
"""
from typing import Dict, List

DAYS: List[str] = ["Mon", "Tue", "Wed", "Thu", "Fri"]

SLOT_TIMES: List[str] = [
    "08:00-08:55",
    "08:55-09:50",
    "10:10-11:05",
    "11:05-12:00",
    "12:00-12:55",
    "12:55-01:50",
    "02:10-03:05",
    "03:05-04:00",
    "04:00-04:55",
    "04:55-05:50",
]

SLOTS_PER_DAY = len(SLOT_TIMES)

# Longest run of back-to-back occupied slots allowed per entity per day
MAX_CONSECUTIVE = 3

LAB_SLOT_SIZE = 2

THEORY = "Theory"
LAB = "Lab"

# Weekly sessions per subject, keyed by priority then subject type
PERIOD_REQUIREMENTS: Dict[int, Dict[str, int]] = {
    1: {THEORY: 3, LAB: 2},
    2: {THEORY: 2, LAB: 1},
    3: {THEORY: 1, LAB: 1},
}

UNASSIGNED = "Unassigned"

# Unplaced-task reasons
REASON_UNASSIGNED = "Unassigned"
REASON_EXHAUSTED = "ExhaustedAttempts"

DEFAULT_ATTEMPTS_PER_TASK = 500
