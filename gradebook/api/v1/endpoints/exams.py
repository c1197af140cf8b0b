"""Exam management endpoints."""

from io import BytesIO

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from gradebook.core.dependencies import AdminCaller, Analytics, Gradebook, Importer
from gradebook.schemas.analytics import ExamStats
from gradebook.schemas.common import MessageResponse
from gradebook.schemas.exam import ExamCreate, ExamResponse, ExamUpdate

router = APIRouter()


@router.get("", response_model=list[ExamResponse])
async def list_exams(gradebook: Gradebook):
    return await gradebook.list_exams()


@router.post("", response_model=ExamResponse, status_code=201)
async def create_exam(request: ExamCreate, gradebook: Gradebook, caller: AdminCaller):
    return await gradebook.add_exam(request)


@router.delete("", response_model=MessageResponse)
async def clear_exams(gradebook: Gradebook, caller: AdminCaller):
    """Delete every exam and every grade."""
    removed = await gradebook.clear_exams()
    return MessageResponse(message=f"{removed} exams and all grades deleted")


@router.get("/{exam_id}", response_model=ExamResponse)
async def get_exam(exam_id: str, gradebook: Gradebook):
    return await gradebook.get_exam(exam_id)


@router.patch("/{exam_id}", response_model=ExamResponse)
async def update_exam(
    exam_id: str,
    request: ExamUpdate,
    gradebook: Gradebook,
    caller: AdminCaller,
):
    """
    Update an exam.
    The grading notation is locked once the exam has grades.
    """
    return await gradebook.update_exam(exam_id, request)


@router.delete("/{exam_id}", response_model=MessageResponse)
async def delete_exam(exam_id: str, gradebook: Gradebook, caller: AdminCaller):
    """Delete an exam together with its grades."""
    await gradebook.delete_exam(exam_id)
    return MessageResponse(message="Exam deleted successfully")


@router.get("/{exam_id}/stats", response_model=ExamStats)
async def get_exam_stats(exam_id: str, analytics: Analytics):
    """Average, pass rate and grade distribution of one exam."""
    return await analytics.get_exam_stats(exam_id)


@router.get("/{exam_id}/template")
async def download_grade_template(
    exam_id: str,
    gradebook: Gradebook,
    importer: Importer,
    caller: AdminCaller,
):
    """
    Download an Excel template for the grade upload of an exam.
    Registered matricole are pre-filled.
    """
    exam = await gradebook.get_exam(exam_id)
    students = await gradebook.list_students()
    content = importer.generate_grade_template(exam, [s.matricola for s in students])

    filename = f"voti_{exam.data.isoformat()}_{exam.id}.xlsx"
    return StreamingResponse(
        BytesIO(content),
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
