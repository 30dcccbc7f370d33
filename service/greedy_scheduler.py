"""
Randomized greedy placement of scheduling tasks.

Tasks are taken from the head of a queue and placed into the first
(day, start slot) where both the teacher and the section calendar accept
the block. Days are tried in a fresh random order on every attempt so that
load spreads across the week. A task that fits nowhere goes back to the
tail of the queue; the loop stops when the queue is empty or the attempt
budget is spent.
"""
from collections import deque
from typing import Dict, List, Optional
import logging
import random

from models.schemas import SchedulingTask, SectionSlot, TeacherSlot, UnplacedTask
from service.calendar import ResourceCalendar
from service.constants import (
    DEFAULT_ATTEMPTS_PER_TASK, REASON_EXHAUSTED, REASON_UNASSIGNED, UNASSIGNED
)

logger = logging.getLogger(__name__)


def book_task(task: SchedulingTask, day: int, start: int,
              section_calendar: ResourceCalendar, teacher_calendar: ResourceCalendar):
    """Write a placed task into both calendars."""
    section_calendar.book(day, start, task.slots_required, SectionSlot(
        code=task.code,
        subject=task.subject,
        teacher=task.teacher
    ))
    teacher_calendar.book(day, start, task.slots_required, TeacherSlot(
        section=task.section,
        code=task.code,
        subject=task.subject
    ))


class GreedyScheduler:
    """
    Greedy placement with random day order and bounded requeueing.

    The random source is injected so that runs can be reproduced.
    """

    def __init__(self, random_source: Optional[random.Random] = None,
                 attempts_per_task: int = DEFAULT_ATTEMPTS_PER_TASK):
        """
        Initialize the scheduler.

        Args:
            random_source: Source for day shuffling; a fresh unseeded
                random.Random is used when omitted
            attempts_per_task: Attempt budget is len(tasks) * attempts_per_task
        """
        self.random = random_source if random_source is not None else random.Random()
        self.attempts_per_task = attempts_per_task

    def schedule(self, tasks: List[SchedulingTask],
                 section_calendars: Dict[str, ResourceCalendar],
                 teacher_calendars: Dict[str, ResourceCalendar]) -> List[UnplacedTask]:
        """
        Place tasks into the given calendars.

        Calendars are mutated in place. Returns the tasks that could not be
        placed, tagged with the reason.
        """
        queue = deque(tasks)
        budget = len(tasks) * self.attempts_per_task
        attempts = 0
        placed = 0
        unplaced: List[UnplacedTask] = []

        while queue and attempts < budget:
            attempts += 1
            task = queue.popleft()

            if task.teacher == UNASSIGNED:
                logger.warning(f"Skipping task {task.code} for {task.section}: no teacher assigned")
                unplaced.append(UnplacedTask(task=task, reason=REASON_UNASSIGNED))
                continue

            if self._place(task, section_calendars[task.section], teacher_calendars[task.teacher]):
                placed += 1
            else:
                logger.debug(f"Requeueing {task.code} for {task.section} (attempt {attempts})")
                queue.append(task)

        if queue:
            logger.warning(
                f"Attempt budget of {budget} exhausted with {len(queue)} task(s) unplaced"
            )
            unplaced.extend(UnplacedTask(task=task, reason=REASON_EXHAUSTED) for task in queue)

        logger.info(f"Greedy placement finished: {placed} placed, {len(unplaced)} unplaced, "
                    f"{attempts} attempt(s)")
        return unplaced

    def _place(self, task: SchedulingTask, section_calendar: ResourceCalendar,
               teacher_calendar: ResourceCalendar) -> bool:
        days = list(range(section_calendar.num_days))
        self.random.shuffle(days)
        length = task.slots_required
        last_start = section_calendar.slots_per_day - length

        for day in days:
            for start in range(last_start + 1):
                if not teacher_calendar.can_book(day, start, length):
                    continue
                if not section_calendar.can_book(day, start, length):
                    continue

                book_task(task, day, start, section_calendar, teacher_calendar)
                return True

        return False
