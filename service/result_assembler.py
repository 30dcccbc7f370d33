"""Turns filled calendars into the section- and teacher-indexed result."""
from typing import Dict, List

from models.schemas import ScheduleResult, UnplacedTask
from service.calendar import ResourceCalendar
from service.constants import DAYS, SLOT_TIMES


def assemble_result(sections: List[str],
                    section_calendars: Dict[str, ResourceCalendar],
                    teacher_calendars: Dict[str, ResourceCalendar],
                    unplaced: List[UnplacedTask]) -> ScheduleResult:
    """Copy filled calendars into a ScheduleResult, keeping section and teacher order."""
    return ScheduleResult(
        sections=list(sections),
        per_section={section: section_calendars[section].to_dict() for section in sections},
        per_teacher={name: calendar.to_dict() for name, calendar in teacher_calendars.items()},
        unplaced=list(unplaced),
        days=list(DAYS),
        slot_times=list(SLOT_TIMES)
    )
