"""
Expands a course into the list of sessions that have to be placed.

Every subject needs PERIOD_REQUIREMENTS[priority][type] sessions per week in
every section. Each (section, subject) pair is served by one teacher, picked
so that qualified teachers share the sections of a subject evenly.
"""
from typing import Dict, List, Tuple
import logging

from models.schemas import CourseInput, SchedulingTask, Subject, Teacher
from service.constants import LAB, LAB_SLOT_SIZE, PERIOD_REQUIREMENTS, UNASSIGNED

logger = logging.getLogger(__name__)

# (section, subject code) -> teacher name
Assignment = Dict[Tuple[str, str], str]


class TeacherAssigner:
    """Balanced per-subject teacher selection."""

    def __init__(self, teachers: List[Teacher]):
        self.teachers = teachers
        # subject code -> teacher name -> sections already assigned
        self.load: Dict[str, Dict[str, int]] = {}

    def qualified(self, subject: Subject) -> List[Teacher]:
        return [t for t in self.teachers if subject.name in t.subjects]

    def assign(self, subject: Subject) -> str:
        """
        Pick the least loaded qualified teacher for one more section.

        Ties go to the teacher listed first in the input.
        """
        candidates = self.qualified(subject)
        if not candidates:
            return UNASSIGNED

        counts = self.load.setdefault(subject.code, {})
        chosen = min(candidates, key=lambda t: counts.get(t.name, 0))
        counts[chosen.name] = counts.get(chosen.name, 0) + 1
        return chosen.name


def sessions_required(subject: Subject) -> int:
    return PERIOD_REQUIREMENTS[subject.priority][subject.type]


def build_task_queue(course: CourseInput) -> Tuple[List[SchedulingTask], Assignment]:
    """
    Build the ordered task list and the teacher assignment map.

    Tasks are emitted subject by subject in declared order, and within a
    subject section by section. Input is assumed to be validated already.
    """
    assigner = TeacherAssigner(course.teachers)
    tasks: List[SchedulingTask] = []
    assignment: Assignment = {}

    for subject in course.subjects:
        is_lab = subject.type == LAB
        periods = sessions_required(subject)

        for section in course.sections:
            teacher = assigner.assign(subject)
            assignment[(section, subject.code)] = teacher

            if teacher == UNASSIGNED:
                logger.warning(
                    f"No teacher qualified for {subject.name} ({subject.code}); "
                    f"{periods} session(s) for section {section} will not be scheduled"
                )

            for _ in range(periods):
                tasks.append(SchedulingTask(
                    section=section,
                    subject=subject.name,
                    code=subject.code,
                    is_lab=is_lab,
                    slots_required=LAB_SLOT_SIZE if is_lab else 1,
                    teacher=teacher
                ))

    logger.debug(f"Built {len(tasks)} scheduling tasks for {len(course.sections)} section(s)")
    return tasks, assignment
