"""
Data models and Pydantic schemas for the timetable API.
"""
from .schemas import (
    Subject,
    Teacher,
    CourseInput,
    SchedulingTask,
    TeacherAssignment,
    UnplacedTask,
    SectionSlot,
    TeacherSlot,
    ScheduleResult,
    SchedulingRequest,
    TaskQueueResponse,
    ErrorMessage,
    Messages,
    SchedulingResponse
)

__all__ = [
    "Subject",
    "Teacher",
    "CourseInput",
    "SchedulingTask",
    "TeacherAssignment",
    "UnplacedTask",
    "SectionSlot",
    "TeacherSlot",
    "ScheduleResult",
    "SchedulingRequest",
    "TaskQueueResponse",
    "ErrorMessage",
    "Messages",
    "SchedulingResponse"
]
