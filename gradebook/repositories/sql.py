"""SQLAlchemy storage backend.

The session is synchronous; every public method runs its queries in the
threadpool so the event loop is never blocked on the database.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from gradebook.models.exam import Exam
from gradebook.models.grade import Grade
from gradebook.models.student import Student
from gradebook.schemas.exam import ExamCreate, ExamResponse
from gradebook.schemas.grade import GradeResponse, GradeScore, LetterScore, NumericScore
from gradebook.schemas.student import StudentCreate, StudentResponse

logger = logging.getLogger(__name__)


def grade_from_record(record: Grade) -> GradeResponse:
    """Convert a Grade row to its tagged-score form.

    A numeric grade of 0 is a real grade, hence the ``is not None`` checks.
    """
    score: GradeScore | None = None
    if record.voto_lettera is not None:
        score = LetterScore(letter=record.voto_lettera)
    elif record.voto_numerico is not None:
        score = NumericScore(value=record.voto_numerico, con_lode=bool(record.con_lode))
    return GradeResponse(
        id=record.id,
        matricola=record.matricola,
        exam_id=record.exam_id,
        score=score,
    )


def _apply_score(record: Grade, score: GradeScore | None) -> None:
    record.voto_lettera = None
    record.voto_numerico = None
    record.con_lode = False
    if isinstance(score, LetterScore):
        record.voto_lettera = score.letter
    elif isinstance(score, NumericScore):
        record.voto_numerico = score.value
        record.con_lode = score.con_lode


class SqlGradebookRepository:
    """``GradebookRepository`` over a SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db

    # ==========================================
    # Reads
    # ==========================================

    async def list_students(self) -> list[StudentResponse]:
        return await run_in_threadpool(self._list_students)

    async def list_exams(self) -> list[ExamResponse]:
        return await run_in_threadpool(self._list_exams)

    async def list_grades(
        self,
        matricola: str | None = None,
        exam_id: str | None = None,
    ) -> list[GradeResponse]:
        return await run_in_threadpool(self._list_grades, matricola, exam_id)

    async def get_student(self, student_id: str) -> StudentResponse | None:
        return await run_in_threadpool(self._get_student, student_id)

    async def get_student_by_matricola(self, matricola: str) -> StudentResponse | None:
        return await run_in_threadpool(self._get_student_by_matricola, matricola)

    async def get_exam(self, exam_id: str) -> ExamResponse | None:
        return await run_in_threadpool(self._get_exam, exam_id)

    async def get_grade(self, grade_id: str) -> GradeResponse | None:
        return await run_in_threadpool(self._get_grade, grade_id)

    # ==========================================
    # Writes
    # ==========================================

    async def add_student(self, student: StudentCreate) -> StudentResponse:
        return await run_in_threadpool(self._add_student, student)

    async def update_student(self, student: StudentResponse) -> StudentResponse:
        return await run_in_threadpool(self._update_student, student)

    async def delete_student(self, student_id: str) -> None:
        await run_in_threadpool(self._delete, delete(Student).where(Student.id == student_id))

    async def add_exam(self, exam: ExamCreate) -> ExamResponse:
        return await run_in_threadpool(self._add_exam, exam)

    async def update_exam(self, exam: ExamResponse) -> ExamResponse:
        return await run_in_threadpool(self._update_exam, exam)

    async def delete_exam(self, exam_id: str) -> None:
        await run_in_threadpool(self._delete, delete(Exam).where(Exam.id == exam_id))

    async def add_grade(
        self,
        matricola: str,
        exam_id: str,
        score: GradeScore,
    ) -> GradeResponse:
        return await run_in_threadpool(self._add_grade, matricola, exam_id, score)

    async def update_grade(self, grade: GradeResponse) -> GradeResponse:
        return await run_in_threadpool(self._update_grade, grade)

    async def delete_grade(self, grade_id: str) -> None:
        await run_in_threadpool(self._delete, delete(Grade).where(Grade.id == grade_id))

    async def delete_grades(
        self,
        matricola: str | None = None,
        exam_id: str | None = None,
    ) -> int:
        query = delete(Grade)
        if matricola is not None:
            query = query.where(Grade.matricola == matricola)
        if exam_id is not None:
            query = query.where(Grade.exam_id == exam_id)
        removed = await run_in_threadpool(self._delete, query)
        logger.debug(f"Deleted {removed} grades (matricola={matricola}, exam_id={exam_id})")
        return removed

    # ==========================================
    # Session work (runs in the threadpool)
    # ==========================================

    def _list_students(self) -> list[StudentResponse]:
        result = self.db.execute(select(Student).order_by(Student.cognome, Student.nome))
        return [StudentResponse.model_validate(s) for s in result.scalars().all()]

    def _list_exams(self) -> list[ExamResponse]:
        result = self.db.execute(select(Exam).order_by(Exam.data.desc(), Exam.created_at))
        return [ExamResponse.model_validate(e) for e in result.scalars().all()]

    def _list_grades(self, matricola: str | None, exam_id: str | None) -> list[GradeResponse]:
        query = select(Grade)
        if matricola is not None:
            query = query.where(Grade.matricola == matricola)
        if exam_id is not None:
            query = query.where(Grade.exam_id == exam_id)
        query = query.order_by(Grade.created_at)

        result = self.db.execute(query)
        return [grade_from_record(g) for g in result.scalars().all()]

    def _get_student(self, student_id: str) -> StudentResponse | None:
        student = self.db.get(Student, student_id)
        return StudentResponse.model_validate(student) if student else None

    def _get_student_by_matricola(self, matricola: str) -> StudentResponse | None:
        result = self.db.execute(select(Student).where(Student.matricola == matricola))
        student = result.scalar_one_or_none()
        return StudentResponse.model_validate(student) if student else None

    def _get_exam(self, exam_id: str) -> ExamResponse | None:
        exam = self.db.get(Exam, exam_id)
        return ExamResponse.model_validate(exam) if exam else None

    def _get_grade(self, grade_id: str) -> GradeResponse | None:
        grade = self.db.get(Grade, grade_id)
        return grade_from_record(grade) if grade else None

    def _add_student(self, student: StudentCreate) -> StudentResponse:
        record = Student(**student.model_dump())
        self.db.add(record)
        self.db.flush()
        self.db.refresh(record)
        return StudentResponse.model_validate(record)

    def _update_student(self, student: StudentResponse) -> StudentResponse:
        record = self.db.get(Student, student.id)
        record.matricola = student.matricola
        record.nome = student.nome
        record.cognome = student.cognome
        self.db.flush()
        return StudentResponse.model_validate(record)

    def _add_exam(self, exam: ExamCreate) -> ExamResponse:
        record = Exam(**exam.model_dump())
        self.db.add(record)
        self.db.flush()
        self.db.refresh(record)
        return ExamResponse.model_validate(record)

    def _update_exam(self, exam: ExamResponse) -> ExamResponse:
        record = self.db.get(Exam, exam.id)
        record.nome = exam.nome
        record.tipo = exam.tipo
        record.data = exam.data
        record.use_letter_grades = exam.use_letter_grades
        self.db.flush()
        return ExamResponse.model_validate(record)

    def _add_grade(self, matricola: str, exam_id: str, score: GradeScore) -> GradeResponse:
        record = Grade(matricola=matricola, exam_id=exam_id)
        _apply_score(record, score)
        self.db.add(record)
        self.db.flush()
        self.db.refresh(record)
        return grade_from_record(record)

    def _update_grade(self, grade: GradeResponse) -> GradeResponse:
        record = self.db.get(Grade, grade.id)
        record.matricola = grade.matricola
        record.exam_id = grade.exam_id
        _apply_score(record, grade.score)
        self.db.flush()
        return grade_from_record(record)

    def _delete(self, query) -> int:
        result = self.db.execute(query)
        self.db.flush()
        return result.rowcount
