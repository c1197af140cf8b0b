"""Read-only analytics endpoints backing the dashboard."""

from fastapi import APIRouter

from gradebook.core.dependencies import Analytics
from gradebook.schemas.analytics import (
    DashboardAnalytics,
    ExamWithStats,
    StudentGradeReport,
    StudentWithGrades,
)

router = APIRouter()


@router.get("/dashboard", response_model=DashboardAnalytics)
async def get_dashboard(analytics: Analytics, exam_id: str | None = None):
    """
    Get dashboard counts and statistics.

    With ``exam_id`` the grade counts and statistics cover that exam only;
    the recent exams list is always global.
    """
    return await analytics.get_dashboard_analytics(exam_id)


@router.get("/rankings/students", response_model=list[StudentWithGrades])
async def get_student_ranking(analytics: Analytics, exam_id: str | None = None):
    """
    Rank students by the average of their passing grades, or by their
    grade on ``exam_id``. Students without passing grades are not listed
    in the overall ranking.
    """
    return await analytics.get_student_ranking(exam_id)


@router.get("/rankings/exams", response_model=list[ExamWithStats])
async def get_exam_ranking(analytics: Analytics):
    """Rank exams by the average of their passing grades."""
    return await analytics.get_exam_ranking()


@router.get("/students/{matricola}", response_model=StudentGradeReport)
async def get_student_report(matricola: str, analytics: Analytics):
    """All grades of a matricola, registered or not, with its statistics."""
    return await analytics.get_student_report(matricola)
