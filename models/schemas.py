from pydantic import BaseModel, Field, field_validator
from typing import List, Dict, Optional, Literal

from service.constants import DAYS, SLOT_TIMES


# ===========================
# Course Input Models
# ===========================

class Subject(BaseModel):
    name: str
    code: str            # unique per course, compared case-insensitively
    priority: int        # 1 (highest) .. 3, see PERIOD_REQUIREMENTS
    type: Literal["Theory", "Lab"]


class Teacher(BaseModel):
    """A teacher and the subject names they are qualified to teach"""
    name: str
    subjects: List[str] = []


class CourseInput(BaseModel):
    """Everything needed to timetable one course across its sections"""
    sections: List[str]
    subjects: List[Subject] = []
    teachers: List[Teacher] = []

    # Descriptive metadata, never interpreted by the scheduler
    course: Optional[str] = None
    branch: Optional[str] = None
    semester: Optional[str] = None

    @field_validator("sections")
    @classmethod
    def normalize_sections(cls, sections: List[str]) -> List[str]:
        """Section labels are entered as free text, e.g. " a, b "."""
        return [s.strip().upper() for s in sections if s.strip()]

    @field_validator("subjects")
    @classmethod
    def unique_subject_codes(cls, subjects: List[Subject]) -> List[Subject]:
        seen = set()
        for subject in subjects:
            code = subject.code.upper()
            if code in seen:
                raise ValueError(f'Subject code "{code}" already exists, use a unique code')
            seen.add(code)
        return subjects


# ===========================
# Scheduling Task Models
# ===========================

class SchedulingTask(BaseModel):
    """One weekly occurrence of a subject for one section"""
    section: str
    subject: str
    code: str
    is_lab: bool
    slots_required: int
    teacher: str  # "Unassigned" when nobody is qualified


class TeacherAssignment(BaseModel):
    section: str
    subject: str
    code: str
    teacher: str


class UnplacedTask(BaseModel):
    task: SchedulingTask
    reason: Literal["Unassigned", "ExhaustedAttempts"]


# ===========================
# Calendar Cell Models
# ===========================

class SectionSlot(BaseModel):
    """What a section sees in an occupied slot"""
    code: str
    subject: str
    teacher: str


class TeacherSlot(BaseModel):
    """What a teacher sees in an occupied slot"""
    section: str
    code: str
    subject: str


# ===========================
# Result Schema
# ===========================

class ScheduleResult(BaseModel):
    """Filled calendars per section and per teacher; None marks a free slot"""
    sections: List[str]
    per_section: Dict[str, Dict[str, List[Optional[SectionSlot]]]] = Field(alias="perSection")
    per_teacher: Dict[str, Dict[str, List[Optional[TeacherSlot]]]] = Field(alias="perTeacher")
    unplaced: List[UnplacedTask] = []

    # Grid labels so consumers can render without their own copy
    days: List[str] = Field(default_factory=lambda: list(DAYS))
    slot_times: List[str] = Field(default_factory=lambda: list(SLOT_TIMES), alias="slotTimes")

    class Config:
        populate_by_name = True


# ===========================
# API Request / Response Schema
# ===========================

class SchedulingRequest(CourseInput):
    """Course input plus an optional seed for reproducible runs"""
    seed: Optional[int] = None


class TaskQueueResponse(BaseModel):
    tasks: List[SchedulingTask]
    assignments: List[TeacherAssignment]


class ErrorMessage(BaseModel):
    """Error or warning message"""
    title: str
    message: str


class Messages(BaseModel):
    """Collection of error/warning messages"""
    error_message: List[ErrorMessage] = []


class SchedulingResponse(BaseModel):
    result: ScheduleResult
    status: Literal["COMPLETE", "PARTIAL"]
    messages: Messages = Messages()
    solve_time_seconds: Optional[float] = None
