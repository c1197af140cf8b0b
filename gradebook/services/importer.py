"""Import service for student and grade files.

CSV text and Excel workbooks feed the same row pipelines. A bad row is
counted and reported, never fatal to the rest of the import.
"""

import csv
import logging
from collections.abc import Iterable, Sequence
from io import BytesIO, StringIO
from typing import Any

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font, PatternFill

from gradebook.core.exceptions import ImportRowError, NotFoundError, UploadError, ValidationError
from gradebook.models.grade import LetterGrade
from gradebook.schemas.exam import ExamResponse
from gradebook.schemas.grade import MAX_NUMERIC_GRADE, MIN_NUMERIC_GRADE, GradeCreate
from gradebook.schemas.imports import (
    GradeImportResult,
    ImportRowErrorDetail,
    StudentImportResult,
)
from gradebook.schemas.student import StudentCreate
from gradebook.services.gradebook import GradebookService

logger = logging.getLogger(__name__)

STUDENT_HEADER_KEYWORDS = ("matricola", "nome", "cognome")
GRADE_TEMPLATE_COLUMNS = [("matricola", 20), ("voto", 10), ("lode", 10)]
HONORS_MARKERS = ("L", "LODE")
HONORS_FLAGS = ("true", "1")


def _cell_text(value: Any) -> str:
    """Normalize a CSV or Excel cell to stripped text."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value).strip()


def parse_csv_rows(csv_data: str) -> list[list[str]]:
    """Split CSV text into rows of stripped cells, dropping blank lines."""
    reader = csv.reader(StringIO(csv_data))
    return [[_cell_text(cell) for cell in row] for row in reader if any(cell.strip() for cell in row)]


def parse_excel_rows(file_content: bytes) -> list[list[str]]:
    """Read the active worksheet into rows of stripped cells, dropping empty rows."""
    try:
        workbook = load_workbook(filename=BytesIO(file_content), read_only=True, data_only=True)
        sheet = workbook.active
        if sheet is None:
            raise UploadError("Excel file has no active sheet")

        rows = []
        for row in sheet.iter_rows(values_only=True):
            cells = [_cell_text(value) for value in row]
            if any(cells):
                rows.append(cells)
        logger.debug(f"[EXCEL PARSE] {len(rows)} non-empty rows extracted")
        return rows

    except Exception as e:
        if isinstance(e, UploadError):
            raise
        raise UploadError(f"Failed to parse Excel file: {str(e)}")


def parse_grade_token(token: str) -> tuple[int, bool]:
    """
    Parse a numeric grade cell into (value, con_lode).

    ``30L`` and ``30 lode`` mean 30 with honors. Raises ValueError for
    anything that is not an integer.
    """
    text = token.strip().upper()
    con_lode = False
    for marker in HONORS_MARKERS:
        if text.endswith(marker) and text[: -len(marker)].strip().isdigit():
            text = text[: -len(marker)].strip()
            con_lode = True
            break
    return int(text), con_lode


class GradeImporter:
    """Student and grade import service."""

    def __init__(self, gradebook: GradebookService):
        self.gradebook = gradebook

    # ==========================================
    # Students
    # ==========================================

    async def import_students_csv(self, csv_data: str) -> StudentImportResult:
        return await self._import_student_rows(parse_csv_rows(csv_data))

    async def import_students_excel(self, file_content: bytes) -> StudentImportResult:
        return await self._import_student_rows(parse_excel_rows(file_content))

    async def _import_student_rows(self, rows: list[list[str]]) -> StudentImportResult:
        """
        Register one student per ``matricola,nome,cognome`` row.

        The first row is a header when one of its cells is exactly one of
        those column names.
        Matricole already registered are skipped, not counted as errors.
        """
        result = StudentImportResult()
        if not rows:
            return result

        header = {cell.strip().lower() for cell in rows[0]}
        start = 1 if header & set(STUDENT_HEADER_KEYWORDS) else 0

        existing = {student.matricola for student in await self.gradebook.list_students()}

        for row_num, row in enumerate(rows[start:], start=start + 1):
            try:
                if len(row) < 3 or not all(row[:3]):
                    raise ImportRowError(row_num, "Expected matricola, nome and cognome", ",".join(row))

                matricola, nome, cognome = row[:3]
                if matricola in existing:
                    result.skipped += 1
                    logger.debug(f"[STUDENT IMPORT] Row {row_num} SKIPPED - matricola {matricola} exists")
                    continue

                try:
                    request = StudentCreate(matricola=matricola, nome=nome, cognome=cognome)
                except ValueError as e:
                    raise ImportRowError(row_num, f"Invalid student data: {e}", matricola)
                try:
                    student = await self.gradebook.add_student(request)
                except ValidationError as e:
                    raise ImportRowError(row_num, e.message, matricola)

                existing.add(matricola)
                result.students.append(student)
                result.imported += 1

            except ImportRowError as e:
                logger.warning(f"[STUDENT IMPORT] Row {row_num} FAILED - {e.message}")
                result.errors += 1
                result.row_errors.append(_row_error(e))

        logger.info(
            f"[STUDENT IMPORT] Imported {result.imported}, skipped {result.skipped}, failed {result.errors}"
        )
        return result

    # ==========================================
    # Grades
    # ==========================================

    async def import_grades_csv(
        self,
        csv_data: str,
        exam_id: str,
        has_header_row: bool = False,
    ) -> GradeImportResult:
        exam = await self.gradebook.get_exam(exam_id)
        rows = parse_csv_rows(csv_data)
        start = 1 if has_header_row else 0
        return await self._import_grade_rows(exam, rows[start:], first_row=start + 1)

    async def import_grades_excel(self, file_content: bytes, exam_id: str) -> GradeImportResult:
        """Import grades from a workbook laid out like ``generate_grade_template``."""
        exam = await self.gradebook.get_exam(exam_id)
        rows = parse_excel_rows(file_content)
        return await self._import_grade_rows(exam, rows[1:], first_row=2)

    async def _import_grade_rows(
        self,
        exam: ExamResponse,
        rows: Sequence[Sequence[str]],
        first_row: int,
    ) -> GradeImportResult:
        """Record one grade per ``matricola,voto`` row for ``exam``."""
        result = GradeImportResult()
        logger.info(f"[GRADE IMPORT] Starting import of {len(rows)} rows for exam {exam.id}")

        for row_num, row in enumerate(rows, start=first_row):
            try:
                try:
                    request = self._grade_request(exam, row_num, row)
                except ValueError as e:
                    raise ImportRowError(row_num, f"Invalid grade data: {e}", row[0])
                try:
                    await self.gradebook.add_grade(request)
                except (ValidationError, NotFoundError) as e:
                    raise ImportRowError(row_num, e.message, request.matricola)
                result.imported += 1

            except ImportRowError as e:
                logger.warning(f"[GRADE IMPORT] Row {row_num} FAILED - {e.message} (value={e.value})")
                result.errors += 1
                result.row_errors.append(_row_error(e))

        logger.info(f"[GRADE IMPORT] Imported {result.imported}, failed {result.errors}")
        return result

    def _grade_request(self, exam: ExamResponse, row_num: int, row: Sequence[str]) -> GradeCreate:
        if len(row) < 2:
            raise ImportRowError(row_num, "Invalid format: not enough columns", ",".join(row))

        matricola, token = row[0], row[1]
        if not matricola:
            raise ImportRowError(row_num, "Matricola is required")

        if exam.use_letter_grades:
            try:
                letter = LetterGrade.from_string(token)
            except ValueError:
                raise ImportRowError(row_num, f"Invalid letter grade for student {matricola}", token)
            return GradeCreate(matricola=matricola, exam_id=exam.id, voto_lettera=letter)

        try:
            value, con_lode = parse_grade_token(token)
        except ValueError:
            raise ImportRowError(row_num, f"Invalid numeric grade for student {matricola}", token)
        if not MIN_NUMERIC_GRADE <= value <= MAX_NUMERIC_GRADE:
            raise ImportRowError(row_num, f"Numeric grade out of range for student {matricola}", token)

        # Optional third column: matricola,voto,lode
        if len(row) > 2 and row[2].strip().lower() in HONORS_FLAGS:
            con_lode = True

        return GradeCreate(
            matricola=matricola,
            exam_id=exam.id,
            voto_numerico=value,
            con_lode=con_lode,
        )

    # ==========================================
    # Templates
    # ==========================================

    def generate_grade_template(self, exam: ExamResponse, matricole: Iterable[str] = ()) -> bytes:
        """Generate an Excel template for importing the grades of ``exam``."""
        wb = Workbook()
        ws = wb.active
        ws.title = "Voti"

        header_font = Font(bold=True, color="FFFFFF")
        header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")

        # Letter exams have no honors column
        columns = GRADE_TEMPLATE_COLUMNS[:2] if exam.use_letter_grades else GRADE_TEMPLATE_COLUMNS
        for col_idx, (header, width) in enumerate(columns, start=1):
            cell = ws.cell(row=1, column=col_idx, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal="center")
            ws.column_dimensions[chr(64 + col_idx)].width = width

        for row_idx, matricola in enumerate(matricole, start=2):
            ws.cell(row=row_idx, column=1, value=matricola)

        notes = wb.create_sheet("Istruzioni")
        notes.cell(row=1, column=1, value=f"Esame: {exam.nome} ({exam.data.isoformat()})")
        if exam.use_letter_grades:
            notes.cell(row=2, column=1, value="Voto: una lettera tra A e F")
        else:
            notes.cell(row=2, column=1, value="Voto: un intero tra 0 e 30, 30L per la lode")
            notes.cell(row=3, column=1, value="Lode: true o 1 se il 30 è con lode (opzionale)")
        notes.column_dimensions["A"].width = 60

        output = BytesIO()
        wb.save(output)
        output.seek(0)
        return output.getvalue()


def _row_error(error: ImportRowError) -> ImportRowErrorDetail:
    return ImportRowErrorDetail(
        row=error.row,
        value=str(error.value) if error.value is not None else None,
        message=error.message,
    )
