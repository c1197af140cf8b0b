"""Analytics schemas.

These are computed views; none of them is ever persisted.
"""

from datetime import date

from pydantic import Field

from gradebook.models.exam import ExamType
from gradebook.schemas.common import BaseSchema
from gradebook.schemas.exam import ExamResponse
from gradebook.schemas.grade import GradeWithExam

UNREGISTERED_STUDENT_NAME = "Non registrato"


class GradeStats(BaseSchema):
    """Aggregate metrics over a set of grades."""

    average: float = Field(
        default=0.0,
        description="Mean numeric value of passing grades only",
    )
    passing: int = 0
    failing: int = 0
    passing_percentage: float = Field(
        default=0.0,
        description="Percentage of passing grades (0-100)",
    )
    distribution: dict[str, int] = Field(
        default_factory=dict,
        description="Frequency of each raw grade value, failures included",
    )


class ExamStats(GradeStats):
    """Grade statistics for a single exam."""

    grade_count: int = 0


class StudentWithGrades(BaseSchema):
    """A student (or unregistered matricola) with its grades and ranking value."""

    id: str
    matricola: str
    nome: str
    cognome: str
    registered: bool = True
    grades: list[GradeWithExam] = []
    average: float = 0.0


class ExamWithStats(ExamResponse):
    """An exam with its statistics and distinct graded students."""

    stats: GradeStats
    student_count: int = 0


class RecentExam(BaseSchema):
    """Recent exam entry for the dashboard."""

    id: str
    nome: str
    tipo: ExamType
    data: date
    stats: ExamStats


class DashboardCounts(BaseSchema):
    """Headline counts for the dashboard."""

    registered_students: int = 0
    students_with_grades: int = 0
    exams: int = 0
    grades: int = 0


class DashboardAnalytics(BaseSchema):
    """Dashboard payload, optionally scoped to one exam."""

    exam_id: str | None = None
    counts: DashboardCounts
    stats: GradeStats
    recent_exams: list[RecentExam] = []


class StudentGradeReport(BaseSchema):
    """All grades of one matricola with its passing-only average."""

    student: StudentWithGrades
    stats: GradeStats
