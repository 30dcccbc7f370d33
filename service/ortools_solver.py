"""
OR-Tools CP-SAT based placement solver.

Places the same scheduling tasks as the greedy scheduler, but searches the
whole grid at once: every task gets one boolean per feasible (day, start)
and the solver maximizes the number of booked slots subject to the teacher,
section and consecutive-run constraints.
"""

from ortools.sat.python import cp_model
from typing import List, Dict, Tuple, Optional
import logging
import random

from models.schemas import SchedulingTask, UnplacedTask
from service.calendar import ResourceCalendar
from service.constants import (
    DEFAULT_ATTEMPTS_PER_TASK, REASON_EXHAUSTED, REASON_UNASSIGNED, UNASSIGNED
)
from service.greedy_scheduler import GreedyScheduler, book_task

logger = logging.getLogger(__name__)


class ORToolsPlacementSolver:
    """
    Constraint-based placement using OR-Tools CP-SAT solver.

    Falls back to the greedy scheduler when no solution is found within the
    time limit.
    """

    def __init__(self, random_source: Optional[random.Random] = None, time_limit_seconds: int = 30,
                 num_workers: int = 1, attempts_per_task: int = DEFAULT_ATTEMPTS_PER_TASK):
        """
        Initialize the solver.

        Args:
            random_source: Seeds the solver and the greedy fallback
            time_limit_seconds: Maximum time allowed for solver
            num_workers: CP-SAT search workers; 1 keeps runs reproducible
            attempts_per_task: Budget passed to the greedy fallback
        """
        self.random = random_source if random_source is not None else random.Random()
        self.time_limit_seconds = time_limit_seconds
        self.num_workers = num_workers
        self.attempts_per_task = attempts_per_task
        self.model = cp_model.CpModel()
        self.solver = cp_model.CpSolver()

        # Data structures
        self.tasks: List[SchedulingTask] = []
        self.variables: Dict[int, Dict[Tuple[int, int], cp_model.IntVar]] = {}
        # (calendar kind, owner) -> day -> slot -> variables covering that slot
        self.coverage: Dict[Tuple[str, str], Dict[int, Dict[int, List[cp_model.IntVar]]]] = {}

    def schedule(self, tasks: List[SchedulingTask],
                 section_calendars: Dict[str, ResourceCalendar],
                 teacher_calendars: Dict[str, ResourceCalendar]) -> List[UnplacedTask]:
        """
        Place tasks into the given calendars.

        Same contract as GreedyScheduler.schedule: calendars are mutated in
        place and the unplaced tasks are returned with their reason.
        """
        self.model = cp_model.CpModel()
        self.solver = cp_model.CpSolver()
        self.solver.parameters.random_seed = self.random.randrange(2 ** 31 - 1)
        self.solver.parameters.num_workers = self.num_workers
        self.solver.parameters.max_time_in_seconds = self.time_limit_seconds

        unplaced: List[UnplacedTask] = []
        self.tasks = []
        for task in tasks:
            if task.teacher == UNASSIGNED:
                logger.warning(f"Skipping task {task.code} for {task.section}: no teacher assigned")
                unplaced.append(UnplacedTask(task=task, reason=REASON_UNASSIGNED))
            else:
                self.tasks.append(task)

        if not self.tasks:
            return unplaced

        # Step 1: Create decision variables
        self._create_variables(section_calendars, teacher_calendars)

        # Step 2: Add hard constraints
        self._add_hard_constraints(section_calendars, teacher_calendars)

        # Step 3: Maximize booked slots
        objective_terms = [
            var * self.tasks[idx].slots_required
            for idx, task_vars in self.variables.items()
            for var in task_vars.values()
        ]
        if objective_terms:
            self.model.Maximize(sum(objective_terms))

        status = self.solver.Solve(self.model)
        if status not in (cp_model.OPTIMAL, cp_model.FEASIBLE):
            logger.warning(
                f"CP-SAT found no solution ({self.solver.StatusName(status)}); "
                f"falling back to greedy placement"
            )
            fallback = GreedyScheduler(self.random, self.attempts_per_task)
            return unplaced + fallback.schedule(self.tasks, section_calendars, teacher_calendars)

        # Step 4: Commit the solution
        return unplaced + self._extract_solution(status, section_calendars, teacher_calendars)

    def _create_variables(self, section_calendars: Dict[str, ResourceCalendar],
                          teacher_calendars: Dict[str, ResourceCalendar]):
        """One boolean per task and feasible (day, start) block."""
        self.variables = {}
        self.coverage = {}

        for idx, task in enumerate(self.tasks):
            section_calendar = section_calendars[task.section]
            teacher_calendar = teacher_calendars[task.teacher]
            length = task.slots_required
            self.variables[idx] = {}

            for day in range(section_calendar.num_days):
                for start in range(section_calendar.slots_per_day - length + 1):
                    if not section_calendar.is_free(day, start, length):
                        continue
                    if not teacher_calendar.is_free(day, start, length):
                        continue

                    var = self.model.NewBoolVar(f'task_{idx}_day_{day}_start_{start}')
                    self.variables[idx][(day, start)] = var

                    for slot in range(start, start + length):
                        self._cover("section", task.section, day, slot, var)
                        self._cover("teacher", task.teacher, day, slot, var)

    def _cover(self, kind: str, owner: str, day: int, slot: int, var):
        days = self.coverage.setdefault((kind, owner), {})
        days.setdefault(day, {}).setdefault(slot, []).append(var)

    def _add_hard_constraints(self, section_calendars: Dict[str, ResourceCalendar],
                              teacher_calendars: Dict[str, ResourceCalendar]):
        """Add all hard constraints to the model."""

        # 1. Each task is placed at most once
        for task_vars in self.variables.values():
            if task_vars:
                self.model.Add(sum(task_vars.values()) <= 1)

        for (kind, owner), days in self.coverage.items():
            calendar = section_calendars[owner] if kind == "section" else teacher_calendars[owner]
            window = calendar.max_consecutive + 1

            for day, slots in days.items():
                # 2. No double-booking: one task per entity per slot
                for slot_vars in slots.values():
                    if len(slot_vars) > 1:
                        self.model.Add(sum(slot_vars) <= 1)

                # 3. Consecutive-run limit: every window of max_consecutive + 1
                #    slots keeps at least one slot free
                for first in range(calendar.slots_per_day - window + 1):
                    terms = []
                    booked = 0
                    for slot in range(first, first + window):
                        terms.extend(slots.get(slot, []))
                        if calendar.grid[day][slot] is not None:
                            booked += 1
                    if terms:
                        self.model.Add(sum(terms) <= max(0, calendar.max_consecutive - booked))

    def _extract_solution(self, status, section_calendars: Dict[str, ResourceCalendar],
                          teacher_calendars: Dict[str, ResourceCalendar]) -> List[UnplacedTask]:
        unplaced: List[UnplacedTask] = []
        placed = 0

        for idx, task in enumerate(self.tasks):
            chosen = next(
                (block for block, var in self.variables[idx].items() if self.solver.BooleanValue(var)),
                None
            )
            if chosen is None:
                unplaced.append(UnplacedTask(task=task, reason=REASON_EXHAUSTED))
                continue

            day, start = chosen
            book_task(task, day, start, section_calendars[task.section], teacher_calendars[task.teacher])
            placed += 1

        logger.info(f"CP-SAT placement finished: {placed} placed, {len(unplaced)} unplaced, "
                    f"status {self.solver.StatusName(status)}")
        return unplaced
