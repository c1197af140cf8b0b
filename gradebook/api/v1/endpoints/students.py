"""Student management endpoints."""

from fastapi import APIRouter, File, UploadFile

from gradebook.core.config import settings
from gradebook.core.dependencies import AdminCaller, Gradebook, Importer
from gradebook.core.exceptions import UploadError
from gradebook.schemas.common import MessageResponse
from gradebook.schemas.imports import CsvImportRequest, StudentImportResult
from gradebook.schemas.student import StudentCreate, StudentResponse, StudentUpdate

router = APIRouter()


def read_xlsx_upload(file: UploadFile) -> bytes:
    """Validate an uploaded workbook and return its content."""
    if not file.filename:
        raise UploadError("No file provided")

    if not file.filename.endswith(".xlsx"):
        raise UploadError("Only .xlsx files are allowed")

    content = file.file.read()
    if len(content) > settings.MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise UploadError(f"File size exceeds {settings.MAX_UPLOAD_SIZE_MB}MB limit")
    return content


@router.get("", response_model=list[StudentResponse])
async def list_students(gradebook: Gradebook):
    """List registered students."""
    return await gradebook.list_students()


@router.post("", response_model=StudentResponse, status_code=201)
async def create_student(request: StudentCreate, gradebook: Gradebook, caller: AdminCaller):
    """
    Register a student.
    The matricola must not belong to another student.
    """
    return await gradebook.add_student(request)


@router.post("/import", response_model=StudentImportResult)
async def import_students(request: CsvImportRequest, importer: Importer, caller: AdminCaller):
    """
    Import students from CSV text with rows ``matricola,nome,cognome``.
    Already registered matricole are skipped.
    """
    return await importer.import_students_csv(request.csv_data)


@router.post("/upload", response_model=StudentImportResult)
async def upload_students(importer: Importer, caller: AdminCaller, file: UploadFile = File(...)):
    """Import students from an Excel file with the same columns as the CSV import."""
    content = read_xlsx_upload(file)
    return await importer.import_students_excel(content)


@router.get("/{student_id}", response_model=StudentResponse)
async def get_student(student_id: str, gradebook: Gradebook):
    return await gradebook.get_student(student_id)


@router.patch("/{student_id}", response_model=StudentResponse)
async def update_student(
    student_id: str,
    request: StudentUpdate,
    gradebook: Gradebook,
    caller: AdminCaller,
):
    """
    Update a student.
    Changing the matricola moves the student's grades to the new matricola.
    """
    return await gradebook.update_student(student_id, request)


@router.delete("/{student_id}", response_model=MessageResponse)
async def delete_student(student_id: str, gradebook: Gradebook, caller: AdminCaller):
    """Delete a student together with all of its grades."""
    await gradebook.delete_student(student_id)
    return MessageResponse(message="Student deleted successfully")
