"""Errors raised before any scheduling work is done."""

from typing import List


class InvalidCourseInput(ValueError):
    """Raised when a course input cannot be scheduled at all."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors))
