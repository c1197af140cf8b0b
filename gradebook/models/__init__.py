"""Database models package."""

from gradebook.models.exam import Exam, ExamType
from gradebook.models.grade import Grade, LetterGrade
from gradebook.models.student import Student

__all__ = [
    # Student
    "Student",
    # Exam
    "Exam",
    "ExamType",
    # Grade
    "Grade",
    "LetterGrade",
]
