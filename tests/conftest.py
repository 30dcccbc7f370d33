import pytest

from models.schemas import CourseInput


@pytest.fixture
def mixed_course():
    """Two sections, theory and lab subjects, overlapping teacher qualifications."""
    return CourseInput(
        course="B.Tech",
        branch="CSE",
        semester="3",
        sections=["A", "B"],
        subjects=[
            {"name": "Mathematics", "code": "MA201", "priority": 1, "type": "Theory"},
            {"name": "Physics", "code": "PH201", "priority": 2, "type": "Theory"},
            {"name": "Chemistry Lab", "code": "CH201L", "priority": 1, "type": "Lab"},
            {"name": "Programming Lab", "code": "CS201L", "priority": 2, "type": "Lab"},
            {"name": "English", "code": "EN201", "priority": 3, "type": "Theory"},
        ],
        teachers=[
            {"name": "Alice Rao", "subjects": ["Mathematics", "English"]},
            {"name": "Bob Iyer", "subjects": ["Physics", "Mathematics"]},
            {"name": "Carol Das", "subjects": ["Chemistry Lab", "Programming Lab"]},
            {"name": "Dan Roy", "subjects": ["Chemistry Lab"]},
            {"name": "Eve Shah", "subjects": []},
        ]
    )


@pytest.fixture
def overloaded_course():
    """One teacher for fifteen priority-1 theory subjects: 45 sessions, at most 40 fit."""
    names = [f"Subject {i}" for i in range(15)]
    return CourseInput(
        sections=["A"],
        subjects=[
            {"name": name, "code": f"S{i:02d}", "priority": 1, "type": "Theory"}
            for i, name in enumerate(names)
        ],
        teachers=[{"name": "Solo Teacher", "subjects": names}]
    )
