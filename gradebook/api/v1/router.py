"""Main API router aggregating all module routers."""

from fastapi import APIRouter

from gradebook.api.v1.endpoints import analytics, exams, grades, students
from gradebook.schemas.common import ErrorResponse

api_router = APIRouter(
    responses={
        status_code: {"model": ErrorResponse}
        for status_code in (400, 401, 403, 404, 422)
    },
)

# Students
api_router.include_router(
    students.router,
    prefix="/students",
    tags=["Students"],
)

# Exams
api_router.include_router(
    exams.router,
    prefix="/exams",
    tags=["Exams"],
)

# Grades
api_router.include_router(
    grades.router,
    prefix="/grades",
    tags=["Grades"],
)

# Analytics (read-only)
api_router.include_router(
    analytics.router,
    prefix="/analytics",
    tags=["Analytics"],
)
