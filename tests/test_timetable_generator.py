"""
Test whole-course timetable generation against the scheduling invariants.

Every invariant is checked for both placement strategies.
"""
import random

import pytest
from pydantic import ValidationError

from models.schemas import CourseInput
from service.constants import DAYS, MAX_CONSECUTIVE, SLOT_TIMES
from service.errors import InvalidCourseInput
from service.timetable_generator import (
    TimetableGenerator, build_schedule_tasks, generate_schedule, validate_course_input
)

STRATEGIES = ["greedy", "cp_sat"]


def generate(course, strategy, seed=7, **kwargs):
    return TimetableGenerator(strategy=strategy, **kwargs).generate(course, random.Random(seed))


def occupied_cells(grid):
    """(day, slot, cell) for every booked slot of one calendar."""
    return [
        (day, slot, cell)
        for day, cells in grid.items()
        for slot, cell in enumerate(cells)
        if cell is not None
    ]


def longest_run(cells):
    longest = current = 0
    for cell in cells:
        current = current + 1 if cell is not None else 0
        longest = max(longest, current)
    return longest


def assert_calendars_consistent(result):
    """Section and teacher views describe the same bookings."""
    from_sections = set()
    for section, grid in result.per_section.items():
        for day, slot, cell in occupied_cells(grid):
            from_sections.add((cell.teacher, day, slot, section, cell.code))

    from_teachers = set()
    for teacher, grid in result.per_teacher.items():
        for day, slot, cell in occupied_cells(grid):
            from_teachers.add((teacher, day, slot, cell.section, cell.code))

    assert from_sections == from_teachers


def assert_run_limit(result):
    for grid in list(result.per_section.values()) + list(result.per_teacher.values()):
        for cells in grid.values():
            assert longest_run(cells) <= MAX_CONSECUTIVE


def assert_conserved(course, result):
    tasks, _ = build_schedule_tasks(course)
    placed_slots = sum(t.slots_required for t in tasks) - sum(u.task.slots_required for u in result.unplaced)
    section_cells = sum(len(occupied_cells(g)) for g in result.per_section.values())
    teacher_cells = sum(len(occupied_cells(g)) for g in result.per_teacher.values())
    assert section_cells == placed_slots
    assert teacher_cells == placed_slots


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_mixed_course_is_fully_placed(mixed_course, strategy):
    result = generate(mixed_course, strategy)

    assert result.unplaced == []
    assert result.sections == ["A", "B"]
    assert list(result.per_teacher) == ["Alice Rao", "Bob Iyer", "Carol Das", "Dan Roy", "Eve Shah"]
    assert_calendars_consistent(result)
    assert_run_limit(result)
    assert_conserved(mixed_course, result)


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_section_receives_required_sessions(mixed_course, strategy):
    result = generate(mixed_course, strategy)

    for section in ["A", "B"]:
        codes = [cell.code for _, _, cell in occupied_cells(result.per_section[section])]
        # sessions x slots: 3 + 2 + 2*2 + 1*2 + 1
        assert codes.count("MA201") == 3
        assert codes.count("PH201") == 2
        assert codes.count("CH201L") == 4
        assert codes.count("CS201L") == 2
        assert codes.count("EN201") == 1


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_lab_blocks_are_two_contiguous_slots(strategy):
    course = CourseInput(
        sections=["A"],
        subjects=[{"name": "Chemistry Lab", "code": "CH1L", "priority": 1, "type": "Lab"}],
        teachers=[{"name": "Carol Das", "subjects": ["Chemistry Lab"]}]
    )
    result = generate(course, strategy)

    blocks = 0
    for grid in (result.per_section["A"], result.per_teacher["Carol Das"]):
        for cells in grid.values():
            run = 0
            for cell in cells + [None]:
                if cell is not None:
                    run += 1
                    continue
                if run:
                    assert run == 2
                    blocks += 1
                run = 0
    assert blocks == 4


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_unplaceable_load_is_reported_not_raised(overloaded_course, strategy):
    result = generate(overloaded_course, strategy, attempts_per_task=3, time_limit_seconds=5)

    # eight slots per day is the most a single run-limited teacher can take
    assert len(result.unplaced) >= 45 - 8 * len(DAYS)
    assert all(u.reason == "ExhaustedAttempts" for u in result.unplaced)
    assert_calendars_consistent(result)
    assert_run_limit(result)
    assert_conserved(overloaded_course, result)


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_same_seed_gives_same_result(mixed_course, strategy):
    first = generate(mixed_course, strategy, seed=3)
    second = generate(mixed_course, strategy, seed=3)
    assert first.model_dump() == second.model_dump()


@pytest.mark.parametrize("strategy", STRATEGIES)
def test_each_call_starts_from_empty_calendars(strategy):
    course = CourseInput(
        sections=["A"],
        subjects=[{"name": "Algorithms", "code": "CS101", "priority": 1, "type": "Theory"}],
        teachers=[{"name": "Tara Nair", "subjects": ["Algorithms"]}]
    )
    generator = TimetableGenerator(strategy=strategy)
    generator.generate(course, random.Random(1))
    result = generator.generate(course, random.Random(2))
    assert len(occupied_cells(result.per_section["A"])) == 3


def test_cp_sat_commits_solved_placements():
    course = CourseInput(
        sections=["A"],
        subjects=[{"name": "Intro to CS", "code": "CS101", "priority": 1, "type": "Theory"}],
        teachers=[{"name": "Tara Nair", "subjects": ["Intro to CS"]}]
    )
    result = generate_schedule(course, random.Random(1), strategy="cp_sat")

    assert result.unplaced == []
    assert len(occupied_cells(result.per_section["A"])) == 3
    assert len(occupied_cells(result.per_teacher["Tara Nair"])) == 3
    assert_run_limit(result)


def test_scenario_single_theory_subject():
    course = CourseInput(
        sections=["A"],
        subjects=[{"name": "Intro to CS", "code": "CS101", "priority": 1, "type": "Theory"}],
        teachers=[{"name": "Tara Nair", "subjects": ["Intro to CS"]}]
    )
    result = generate_schedule(course, random.Random(11))

    cells = occupied_cells(result.per_section["A"])
    assert len(cells) == 3
    assert len({(day, slot) for day, slot, _ in cells}) == 3
    assert all(cell.code == "CS101" and cell.teacher == "Tara Nair" for _, _, cell in cells)
    assert_run_limit(result)
    assert result.unplaced == []


def test_scenario_priority_two_lab():
    course = CourseInput(
        sections=["A", "B"],
        subjects=[{"name": "Physics Lab", "code": "PH1L", "priority": 2, "type": "Lab"}],
        teachers=[{"name": "Omar Khan", "subjects": ["Physics Lab"]}]
    )
    result = generate_schedule(course, random.Random(5))

    for section in ["A", "B"]:
        cells = occupied_cells(result.per_section[section])
        assert len(cells) == 2
        (day1, slot1, _), (day2, slot2, _) = cells
        assert day1 == day2
        assert slot2 == slot1 + 1


def test_scenario_unqualified_subject():
    course = CourseInput(
        sections=["A", "B"],
        subjects=[
            {"name": "Robotics", "code": "RB100", "priority": 1, "type": "Theory"},
            {"name": "Algorithms", "code": "CS101", "priority": 3, "type": "Theory"},
        ],
        teachers=[{"name": "Tara Nair", "subjects": ["Algorithms"]}]
    )
    result = generate_schedule(course, random.Random(5))

    assert len(result.unplaced) == 6
    assert all(u.reason == "Unassigned" and u.task.code == "RB100" for u in result.unplaced)
    for grid in list(result.per_section.values()) + list(result.per_teacher.values()):
        assert all(cell.code != "RB100" for _, _, cell in occupied_cells(grid))
    assert_conserved(course, result)


def test_scenario_two_teachers_two_sections():
    course = CourseInput(
        sections=["A", "B"],
        subjects=[{"name": "Algorithms", "code": "CS101", "priority": 1, "type": "Theory"}],
        teachers=[
            {"name": "Tara Nair", "subjects": ["Algorithms"]},
            {"name": "Vik Sen", "subjects": ["Algorithms"]},
        ]
    )
    _, assignment = build_schedule_tasks(course)
    assert sorted(assignment.values()) == ["Tara Nair", "Vik Sen"]

    result = generate_schedule(course, random.Random(9))
    assert {cell.teacher for _, _, cell in occupied_cells(result.per_section["A"])} == {"Tara Nair"}
    assert {cell.teacher for _, _, cell in occupied_cells(result.per_section["B"])} == {"Vik Sen"}


def test_inert_teacher_has_empty_calendar(mixed_course):
    result = generate(mixed_course, "greedy")
    assert occupied_cells(result.per_teacher["Eve Shah"]) == []
    assert list(result.per_teacher["Eve Shah"]) == DAYS


def test_result_carries_grid_labels(mixed_course):
    result = generate(mixed_course, "greedy")
    assert result.days == DAYS
    assert result.slot_times == SLOT_TIMES
    assert all(len(cells) == len(SLOT_TIMES) for cells in result.per_section["A"].values())


def test_course_input_is_not_modified(mixed_course):
    before = mixed_course.model_dump()
    generate(mixed_course, "greedy")
    assert mixed_course.model_dump() == before


def test_course_without_subjects_gives_empty_timetable():
    course = CourseInput(sections=["A"], teachers=[{"name": "Tara Nair", "subjects": []}])
    result = generate_schedule(course, random.Random(1))
    assert result.unplaced == []
    assert occupied_cells(result.per_section["A"]) == []


def test_course_without_teachers_reports_everything_unassigned():
    course = CourseInput(
        sections=["A"],
        subjects=[{"name": "Algorithms", "code": "CS101", "priority": 2, "type": "Lab"}]
    )
    result = generate_schedule(course, random.Random(1))
    assert [u.reason for u in result.unplaced] == ["Unassigned"]
    assert result.per_teacher == {}


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValueError):
        TimetableGenerator(strategy="genetic")


# ===========================
# Input validation
# ===========================

def test_sections_are_normalized():
    course = CourseInput(sections=[" a", "b ", "  "], subjects=[], teachers=[])
    assert course.sections == ["A", "B"]


def test_empty_section_list_is_rejected():
    course = CourseInput(sections=[" "], subjects=[], teachers=[])
    with pytest.raises(InvalidCourseInput) as exc_info:
        generate_schedule(course)
    assert exc_info.value.errors == ["No sections provided"]


def test_unknown_priority_is_rejected():
    course = CourseInput(
        sections=["A"],
        subjects=[{"name": "Algorithms", "code": "CS101", "priority": 4, "type": "Theory"}],
        teachers=[{"name": "Tara Nair", "subjects": ["Algorithms"]}]
    )
    with pytest.raises(InvalidCourseInput, match="unknown priority 4"):
        build_schedule_tasks(course)


def test_all_problems_are_reported_together():
    course = CourseInput(
        sections=["A", "a"],
        subjects=[{"name": "Algorithms", "code": "CS101", "priority": 0, "type": "Theory"}],
        teachers=[
            {"name": "Tara Nair", "subjects": ["Algorithms"]},
            {"name": "Tara Nair", "subjects": []},
            {"name": "Unassigned", "subjects": []},
        ]
    )
    with pytest.raises(InvalidCourseInput) as exc_info:
        validate_course_input(course)
    assert len(exc_info.value.errors) == 4


def test_subject_codes_must_be_unique_ignoring_case():
    with pytest.raises(ValidationError, match="CS101"):
        CourseInput(
            sections=["A"],
            subjects=[
                {"name": "Algorithms", "code": "CS101", "priority": 1, "type": "Theory"},
                {"name": "Algorithms II", "code": "cs101", "priority": 2, "type": "Theory"},
            ]
        )


def test_subject_type_must_be_theory_or_lab():
    with pytest.raises(ValidationError):
        CourseInput(
            sections=["A"],
            subjects=[{"name": "Algorithms", "code": "CS101", "priority": 1, "type": "Seminar"}]
        )
