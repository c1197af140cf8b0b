"""Import schemas for CSV and Excel uploads."""

from pydantic import Field

from gradebook.schemas.common import BaseSchema
from gradebook.schemas.student import StudentResponse


class CsvImportRequest(BaseSchema):
    """CSV text pasted into the import form."""

    csv_data: str = Field(..., description="Comma-separated rows, one record per line")


class GradeCsvImportRequest(CsvImportRequest):
    """Grade CSV import for a single exam."""

    exam_id: str
    has_header_row: bool = False


class ImportRowErrorDetail(BaseSchema):
    """Error detail for a rejected import row."""

    row: int
    value: str | None = None
    message: str


class GradeImportResult(BaseSchema):
    """Result of a grade import."""

    imported: int = 0
    errors: int = 0
    row_errors: list[ImportRowErrorDetail] = []


class StudentImportResult(BaseSchema):
    """Result of a student import."""

    imported: int = 0
    skipped: int = 0
    errors: int = 0
    row_errors: list[ImportRowErrorDetail] = []
    students: list[StudentResponse] = []
