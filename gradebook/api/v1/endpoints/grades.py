"""Grade management endpoints."""

from fastapi import APIRouter, File, Form, UploadFile

from gradebook.api.v1.endpoints.students import read_xlsx_upload
from gradebook.core.dependencies import AdminCaller, Gradebook, Importer
from gradebook.schemas.common import MessageResponse
from gradebook.schemas.grade import GradeCreate, GradeDetail, GradeUpdate
from gradebook.schemas.imports import GradeCsvImportRequest, GradeImportResult
from gradebook.services.grading import to_detail

router = APIRouter()


@router.get("", response_model=list[GradeDetail])
async def list_grades(
    gradebook: Gradebook,
    matricola: str | None = None,
    exam_id: str | None = None,
):
    """List grades, optionally for one matricola and/or one exam."""
    grades = await gradebook.list_grades(matricola=matricola, exam_id=exam_id)
    return [to_detail(grade) for grade in grades]


@router.post("", response_model=GradeDetail, status_code=201)
async def create_grade(request: GradeCreate, gradebook: Gradebook, caller: AdminCaller):
    """
    Record a grade.
    Letter exams take ``voto_lettera``, numeric exams take ``voto_numerico``
    (0-30) and optionally ``con_lode`` on a 30.
    """
    return to_detail(await gradebook.add_grade(request))


@router.post("/import", response_model=GradeImportResult)
async def import_grades(request: GradeCsvImportRequest, importer: Importer, caller: AdminCaller):
    """
    Import grades for one exam from CSV text with rows ``matricola,voto``.
    Invalid rows are counted and reported; the rest are imported.
    """
    return await importer.import_grades_csv(
        request.csv_data,
        exam_id=request.exam_id,
        has_header_row=request.has_header_row,
    )


@router.post("/upload", response_model=GradeImportResult)
async def upload_grades(
    importer: Importer,
    caller: AdminCaller,
    exam_id: str = Form(...),
    file: UploadFile = File(...),
):
    """Import grades for one exam from an Excel file built from the exam template."""
    content = read_xlsx_upload(file)
    return await importer.import_grades_excel(content, exam_id)


@router.get("/{grade_id}", response_model=GradeDetail)
async def get_grade(grade_id: str, gradebook: Gradebook):
    return to_detail(await gradebook.get_grade(grade_id))


@router.patch("/{grade_id}", response_model=GradeDetail)
async def update_grade(
    grade_id: str,
    request: GradeUpdate,
    gradebook: Gradebook,
    caller: AdminCaller,
):
    return to_detail(await gradebook.update_grade(grade_id, request))


@router.delete("/{grade_id}", response_model=MessageResponse)
async def delete_grade(grade_id: str, gradebook: Gradebook, caller: AdminCaller):
    await gradebook.delete_grade(grade_id)
    return MessageResponse(message="Grade deleted successfully")
