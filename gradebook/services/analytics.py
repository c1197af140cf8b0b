"""Analytics service composing statistics and rankings for the dashboard."""

import logging

from gradebook.core.config import settings
from gradebook.core.exceptions import NotFoundError
from gradebook.repositories.base import GradebookRepository
from gradebook.schemas.analytics import (
    DashboardAnalytics,
    DashboardCounts,
    ExamStats,
    ExamWithStats,
    RecentExam,
    StudentGradeReport,
    StudentWithGrades,
)
from gradebook.schemas.exam import ExamResponse
from gradebook.schemas.grade import GradeResponse
from gradebook.services.grading import with_exam
from gradebook.services.ranking import (
    get_exam_ranking,
    get_student_ranking,
    graded_matricole,
    student_entry,
)
from gradebook.services.statistics import calculate_stats, get_exam_stats, passing_average

logger = logging.getLogger(__name__)


def recent_exams(
    exams: list[ExamResponse],
    grades: list[GradeResponse],
    limit: int,
) -> list[RecentExam]:
    """The ``limit`` most recent exams by date, each with its statistics."""
    latest = sorted(exams, key=lambda exam: exam.data, reverse=True)[:limit]
    return [
        RecentExam(
            id=exam.id,
            nome=exam.nome,
            tipo=exam.tipo,
            data=exam.data,
            stats=get_exam_stats(grades, exam.id),
        )
        for exam in latest
    ]


class AnalyticsService:
    """
    Read-only analytics over the gradebook.

    Each call fetches a complete snapshot from the repository first and
    then computes from that snapshot only. Nothing is cached.
    """

    def __init__(self, repository: GradebookRepository):
        self.repository = repository

    async def get_dashboard_analytics(self, exam_id: str | None = None) -> DashboardAnalytics:
        """Counts and statistics for the whole gradebook or a single exam."""
        students = await self.repository.list_students()
        exams = await self.repository.list_exams()
        grades = await self.repository.list_grades()

        scoped = grades if exam_id is None else [g for g in grades if g.exam_id == exam_id]
        logger.debug(f"Dashboard analytics: exam_id={exam_id}, grades in scope={len(scoped)}")

        return DashboardAnalytics(
            exam_id=exam_id,
            counts=DashboardCounts(
                registered_students=len(students),
                students_with_grades=len(graded_matricole(scoped)),
                exams=len(exams),
                grades=len(scoped),
            ),
            stats=calculate_stats(scoped),
            recent_exams=recent_exams(exams, grades, settings.RECENT_EXAMS_LIMIT),
        )

    async def get_student_ranking(self, exam_id: str | None = None) -> list[StudentWithGrades]:
        students = await self.repository.list_students()
        exams = await self.repository.list_exams()
        grades = await self.repository.list_grades()
        return get_student_ranking(students, exams, grades, exam_id=exam_id)

    async def get_exam_ranking(self) -> list[ExamWithStats]:
        exams = await self.repository.list_exams()
        grades = await self.repository.list_grades()
        return get_exam_ranking(exams, grades)

    async def get_exam_stats(self, exam_id: str) -> ExamStats:
        """Statistics for one exam. Raises NotFoundError for an unknown exam."""
        if not await self.repository.get_exam(exam_id):
            raise NotFoundError("Exam", exam_id)
        grades = await self.repository.list_grades(exam_id=exam_id)
        return get_exam_stats(grades, exam_id)

    async def get_student_report(self, matricola: str) -> StudentGradeReport:
        """
        Every grade of a matricola with its exam, plus statistics.

        Works for matricole that have grades but no registered student.
        """
        student = await self.repository.get_student_by_matricola(matricola)
        grades = await self.repository.list_grades(matricola=matricola)
        if student is None and not grades:
            raise NotFoundError("Student", matricola)

        exams_by_id = {exam.id: exam for exam in await self.repository.list_exams()}
        known = [grade for grade in grades if grade.exam_id in exams_by_id]

        students_by_matricola = {student.matricola: student} if student else {}
        entry = student_entry(matricola, students_by_matricola)
        entry.grades = [with_exam(grade, exams_by_id[grade.exam_id]) for grade in known]
        entry.average = passing_average(known)

        return StudentGradeReport(student=entry, stats=calculate_stats(known))
