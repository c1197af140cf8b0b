"""Gradebook service for validated CRUD operations."""

import logging

from gradebook.core.exceptions import NotFoundError, ValidationError
from gradebook.models.grade import LetterGrade
from gradebook.repositories.base import GradebookRepository
from gradebook.schemas.exam import ExamCreate, ExamResponse, ExamUpdate
from gradebook.schemas.grade import (
    MAX_NUMERIC_GRADE,
    MIN_NUMERIC_GRADE,
    GradeCreate,
    GradeResponse,
    GradeScore,
    GradeUpdate,
    LetterScore,
    NumericScore,
)
from gradebook.schemas.student import StudentCreate, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)


def build_score(
    exam: ExamResponse,
    voto_lettera: LetterGrade | None,
    voto_numerico: int | None,
    con_lode: bool = False,
) -> GradeScore:
    """
    Turn the flat grade fields into a score valid for ``exam``.

    Raises ValidationError when the populated field does not match the
    exam's notation, when a numeric grade is outside [0, 30], or when
    honors are set on anything but a numeric 30.
    """
    if exam.use_letter_grades:
        if voto_lettera is None:
            raise ValidationError(
                "Letter grade is required for exams with letter grades",
                details={"exam_id": exam.id},
            )
        if voto_numerico is not None:
            raise ValidationError(
                "Numeric grade is not applicable for exams with letter grades",
                details={"exam_id": exam.id},
            )
        if con_lode:
            raise ValidationError("Honors apply only to a numeric grade of 30")
        return LetterScore(letter=voto_lettera)

    if voto_numerico is None:
        raise ValidationError(
            "Numeric grade is required for exams with numeric grades",
            details={"exam_id": exam.id},
        )
    if voto_lettera is not None:
        raise ValidationError(
            "Letter grade is not applicable for exams with numeric grades",
            details={"exam_id": exam.id},
        )
    if not MIN_NUMERIC_GRADE <= voto_numerico <= MAX_NUMERIC_GRADE:
        raise ValidationError(
            f"Numeric grade must be between {MIN_NUMERIC_GRADE} and {MAX_NUMERIC_GRADE}",
            details={"voto_numerico": voto_numerico},
        )
    if con_lode and voto_numerico != MAX_NUMERIC_GRADE:
        raise ValidationError(
            "Honors apply only to a numeric grade of 30",
            details={"voto_numerico": voto_numerico},
        )
    return NumericScore(value=voto_numerico, con_lode=con_lode)


class GradebookService:
    """Student, exam and grade management service.

    Grades for matricole without a registered student are accepted unless
    ``allow_unregistered`` is False.
    """

    def __init__(self, repository: GradebookRepository, allow_unregistered: bool = True):
        self.repository = repository
        self.allow_unregistered = allow_unregistered

    # ==========================================
    # Students
    # ==========================================

    async def list_students(self) -> list[StudentResponse]:
        return await self.repository.list_students()

    async def get_student(self, student_id: str) -> StudentResponse:
        """Get student by ID."""
        student = await self.repository.get_student(student_id)
        if not student:
            raise NotFoundError("Student", student_id)
        return student

    async def _ensure_unique_matricola(self, matricola: str, student_id: str | None = None) -> None:
        existing = await self.repository.get_student_by_matricola(matricola)
        if existing and existing.id != student_id:
            raise ValidationError(
                "Matricola already exists",
                details={"matricola": matricola},
            )

    async def add_student(self, request: StudentCreate) -> StudentResponse:
        """Register a student. The matricola must be unused."""
        await self._ensure_unique_matricola(request.matricola)
        student = await self.repository.add_student(request)
        logger.info(f"Student {student.matricola} registered (id={student.id})")
        return student

    async def update_student(self, student_id: str, request: StudentUpdate) -> StudentResponse:
        """Update a student. A new matricola carries the student's grades with it."""
        student = await self.get_student(student_id)
        update_data = request.model_dump(exclude_unset=True, exclude_none=True)
        old_matricola = student.matricola

        new_matricola = update_data.get("matricola")
        if new_matricola and new_matricola != old_matricola:
            await self._ensure_unique_matricola(new_matricola, student_id)

        updated = await self.repository.update_student(student.model_copy(update=update_data))

        if updated.matricola != old_matricola:
            for grade in await self.repository.list_grades(matricola=old_matricola):
                grade.matricola = updated.matricola
                await self.repository.update_grade(grade)
            logger.info(f"Grades re-keyed from matricola {old_matricola} to {updated.matricola}")

        return updated

    async def delete_student(self, student_id: str) -> None:
        """Delete a student and every grade recorded under its matricola."""
        student = await self.get_student(student_id)
        removed = await self.repository.delete_grades(matricola=student.matricola)
        await self.repository.delete_student(student_id)
        logger.info(f"Student {student.matricola} deleted with {removed} grades")

    # ==========================================
    # Exams
    # ==========================================

    async def list_exams(self) -> list[ExamResponse]:
        return await self.repository.list_exams()

    async def get_exam(self, exam_id: str) -> ExamResponse:
        """Get exam by ID."""
        exam = await self.repository.get_exam(exam_id)
        if not exam:
            raise NotFoundError("Exam", exam_id)
        return exam

    async def add_exam(self, request: ExamCreate) -> ExamResponse:
        exam = await self.repository.add_exam(request)
        logger.info(f"Exam '{exam.nome}' created (id={exam.id}, letter_grades={exam.use_letter_grades})")
        return exam

    async def update_exam(self, exam_id: str, request: ExamUpdate) -> ExamResponse:
        """
        Update an exam.

        The grading notation cannot change once the exam has grades, since
        every existing grade would stop matching it.
        """
        exam = await self.get_exam(exam_id)
        update_data = request.model_dump(exclude_unset=True, exclude_none=True)

        notation = update_data.get("use_letter_grades")
        if notation is not None and notation != exam.use_letter_grades:
            if await self.repository.list_grades(exam_id=exam_id):
                raise ValidationError(
                    "Cannot change the grading notation of an exam that already has grades",
                    details={"exam_id": exam_id},
                )

        return await self.repository.update_exam(exam.model_copy(update=update_data))

    async def delete_exam(self, exam_id: str) -> None:
        """Delete an exam and its grades."""
        exam = await self.get_exam(exam_id)
        removed = await self.repository.delete_grades(exam_id=exam_id)
        await self.repository.delete_exam(exam_id)
        logger.info(f"Exam '{exam.nome}' deleted with {removed} grades")

    async def clear_exams(self) -> int:
        """Delete every exam and every grade. Returns the number of exams removed."""
        exams = await self.repository.list_exams()
        await self.repository.delete_grades()
        for exam in exams:
            await self.repository.delete_exam(exam.id)
        logger.info(f"Cleared {len(exams)} exams and all grades")
        return len(exams)

    # ==========================================
    # Grades
    # ==========================================

    async def list_grades(
        self,
        matricola: str | None = None,
        exam_id: str | None = None,
    ) -> list[GradeResponse]:
        return await self.repository.list_grades(matricola=matricola, exam_id=exam_id)

    async def get_grade(self, grade_id: str) -> GradeResponse:
        """Get grade by ID."""
        grade = await self.repository.get_grade(grade_id)
        if not grade:
            raise NotFoundError("Grade", grade_id)
        return grade

    async def _check_matricola(self, matricola: str) -> None:
        if self.allow_unregistered:
            return
        if not await self.repository.get_student_by_matricola(matricola):
            raise NotFoundError("Student", matricola)

    async def add_grade(self, request: GradeCreate) -> GradeResponse:
        """Record a grade after checking it against its exam."""
        exam = await self.get_exam(request.exam_id)
        score = build_score(exam, request.voto_lettera, request.voto_numerico, request.con_lode)
        await self._check_matricola(request.matricola)

        grade = await self.repository.add_grade(request.matricola, exam.id, score)
        logger.debug(f"Grade recorded: matricola={grade.matricola}, exam_id={grade.exam_id}")
        return grade

    async def update_grade(self, grade_id: str, request: GradeUpdate) -> GradeResponse:
        """Update a grade. The result is validated against its (possibly new) exam."""
        grade = await self.get_grade(grade_id)
        update_data = request.model_dump(exclude_unset=True)

        exam = await self.get_exam(update_data.get("exam_id") or grade.exam_id)
        matricola = update_data.get("matricola") or grade.matricola

        if "voto_lettera" in update_data or "voto_numerico" in update_data:
            voto_lettera = update_data.get("voto_lettera")
            voto_numerico = update_data.get("voto_numerico")
        else:
            voto_lettera = grade.voto_lettera
            voto_numerico = grade.voto_numerico
        con_lode = update_data.get("con_lode")
        if con_lode is None:
            con_lode = grade.con_lode if voto_numerico == grade.voto_numerico else False

        score = build_score(exam, voto_lettera, voto_numerico, con_lode)
        await self._check_matricola(matricola)

        return await self.repository.update_grade(
            GradeResponse(id=grade.id, matricola=matricola, exam_id=exam.id, score=score)
        )

    async def delete_grade(self, grade_id: str) -> None:
        await self.get_grade(grade_id)
        await self.repository.delete_grade(grade_id)
