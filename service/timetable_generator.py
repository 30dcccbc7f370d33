"""
Entry points for timetabling a course.

build_schedule_tasks and generate_schedule validate the course input,
expand it into scheduling tasks and, for generate_schedule, place the tasks
into fresh per-section and per-teacher calendars.
"""
from typing import Dict, List, Optional, Tuple
import logging
import random

from config.settings import settings
from models.schemas import CourseInput, ScheduleResult, SchedulingTask
from service.calendar import ResourceCalendar
from service.constants import LAB, PERIOD_REQUIREMENTS, THEORY, UNASSIGNED
from service.errors import InvalidCourseInput
from service.greedy_scheduler import GreedyScheduler
from service.ortools_solver import ORToolsPlacementSolver
from service.result_assembler import assemble_result
from service.task_queue import Assignment, build_task_queue

logger = logging.getLogger(__name__)

STRATEGIES = ("greedy", "cp_sat")


def validate_course_input(course: CourseInput):
    """Raise InvalidCourseInput listing every structural problem found."""
    errors: List[str] = []

    if not course.sections:
        errors.append("No sections provided")

    seen_sections = set()
    for section in course.sections:
        if section in seen_sections:
            errors.append(f"Section {section} is listed more than once")
        seen_sections.add(section)

    for subject in course.subjects:
        if subject.priority not in PERIOD_REQUIREMENTS:
            valid = ", ".join(str(p) for p in sorted(PERIOD_REQUIREMENTS))
            errors.append(f"Subject {subject.name} ({subject.code}) has unknown priority "
                          f"{subject.priority}; use one of {valid}")
        if subject.type not in (THEORY, LAB):
            errors.append(f"Subject {subject.name} ({subject.code}) has invalid type: {subject.type}")

    seen_teachers = set()
    for teacher in course.teachers:
        if teacher.name == UNASSIGNED:
            errors.append(f'"{UNASSIGNED}" is reserved and cannot be used as a teacher name')
        elif teacher.name in seen_teachers:
            errors.append(f"Teacher {teacher.name} is listed more than once")
        seen_teachers.add(teacher.name)

    if errors:
        raise InvalidCourseInput(errors)


def build_schedule_tasks(course: CourseInput) -> Tuple[List[SchedulingTask], Assignment]:
    """Validated task queue and (section, subject code) -> teacher map."""
    validate_course_input(course)
    return build_task_queue(course)


class TimetableGenerator:
    """
    Generates a weekly timetable for every section of a course.

    Supports greedy placement (default) and CP-SAT placement.
    """

    def __init__(self, strategy: str = "greedy",
                 attempts_per_task: Optional[int] = None,
                 time_limit_seconds: Optional[int] = None):
        if strategy not in STRATEGIES:
            raise ValueError(f"Unknown strategy {strategy!r}, expected one of {', '.join(STRATEGIES)}")
        self.strategy = strategy
        self.attempts_per_task = (
            attempts_per_task if attempts_per_task is not None else settings.scheduler_attempts_per_task
        )
        self.time_limit_seconds = (
            time_limit_seconds if time_limit_seconds is not None else settings.solver_timeout_seconds
        )

    def generate(self, course: CourseInput,
                 random_source: Optional[random.Random] = None) -> ScheduleResult:
        """
        Build tasks and place them into empty calendars.

        Args:
            course: Course to timetable; never modified
            random_source: The only source of randomness; defaults to a
                random.Random seeded from settings.scheduler_random_seed

        Returns:
            ScheduleResult, with unplaced tasks listed rather than raised
        """
        tasks, _ = build_schedule_tasks(course)

        if random_source is None:
            random_source = random.Random(settings.scheduler_random_seed)

        section_calendars: Dict[str, ResourceCalendar] = {
            section: ResourceCalendar(section) for section in course.sections
        }
        teacher_calendars: Dict[str, ResourceCalendar] = {
            teacher.name: ResourceCalendar(teacher.name) for teacher in course.teachers
        }

        if self.strategy == "cp_sat":
            placer = ORToolsPlacementSolver(
                random_source,
                time_limit_seconds=self.time_limit_seconds,
                num_workers=settings.solver_num_workers,
                attempts_per_task=self.attempts_per_task
            )
        else:
            placer = GreedyScheduler(random_source, self.attempts_per_task)

        unplaced = placer.schedule(tasks, section_calendars, teacher_calendars)

        logger.info(
            f"Generated timetable for {len(course.sections)} section(s): "
            f"{len(tasks) - len(unplaced)} of {len(tasks)} task(s) placed ({self.strategy})"
        )
        return assemble_result(course.sections, section_calendars, teacher_calendars, unplaced)


def generate_schedule(course: CourseInput, random_source: Optional[random.Random] = None,
                      strategy: str = "greedy") -> ScheduleResult:
    return TimetableGenerator(strategy=strategy).generate(course, random_source)
