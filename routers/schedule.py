from collections import Counter
from datetime import datetime
import random

from fastapi import APIRouter
from models.schemas import (
    CourseInput, SchedulingRequest, SchedulingResponse, TaskQueueResponse,
    TeacherAssignment, Messages, ErrorMessage, ScheduleResult
)
from service.constants import REASON_UNASSIGNED
from service.timetable_generator import TimetableGenerator, build_schedule_tasks

# Create a router instance
router = APIRouter()


@router.post("/schedule/tasks", response_model=TaskQueueResponse)
def build_tasks(request: CourseInput):
    """
    Expand a course into its scheduling tasks without placing them.

    Shows which teacher serves each (section, subject) pair.
    """
    tasks, assignment = build_schedule_tasks(request)
    codes = {subject.code: subject.name for subject in request.subjects}
    assignments = [
        TeacherAssignment(section=section, subject=codes[code], code=code, teacher=teacher)
        for (section, code), teacher in assignment.items()
    ]
    return TaskQueueResponse(tasks=tasks, assignments=assignments)


@router.post("/schedule/greedy", response_model=SchedulingResponse)
def generate_greedy(request: SchedulingRequest):
    """
    Generate timetables for all sections with randomized greedy placement.

    Pass a seed to reproduce an earlier result.
    """
    return _generate(request, TimetableGenerator(strategy="greedy"))


@router.post("/schedule/exact", response_model=SchedulingResponse)
def generate_exact(request: SchedulingRequest):
    """
    Generate timetables for all sections with the CP-SAT solver.

    Falls back to greedy placement if the solver times out without a solution.
    """
    return _generate(request, TimetableGenerator(strategy="cp_sat"))


def _generate(request: SchedulingRequest, generator: TimetableGenerator) -> SchedulingResponse:
    random_source = random.Random(request.seed) if request.seed is not None else None

    start_time = datetime.now()
    result = generator.generate(request, random_source)
    solve_time = (datetime.now() - start_time).total_seconds()

    return SchedulingResponse(
        result=result,
        status="PARTIAL" if result.unplaced else "COMPLETE",
        messages=_unplaced_messages(result),
        solve_time_seconds=solve_time
    )


def _unplaced_messages(result: ScheduleResult) -> Messages:
    """One message per (reason, subject code) group of unplaced tasks."""
    groups = Counter((item.reason, item.task.code, item.task.subject) for item in result.unplaced)
    messages = []

    for (reason, code, subject), count in groups.items():
        if reason == REASON_UNASSIGNED:
            messages.append(ErrorMessage(
                title="No Qualified Teacher",
                message=f"{count} session(s) of {subject} ({code}) were not scheduled: "
                        f"no teacher is qualified to teach {subject}."
            ))
        else:
            messages.append(ErrorMessage(
                title="Sessions Not Placed",
                message=f"{count} session(s) of {subject} ({code}) could not be placed. "
                        f"Try adding teachers for {subject} or reducing period requirements."
            ))

    return Messages(error_message=messages)
