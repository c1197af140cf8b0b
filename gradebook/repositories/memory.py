"""In-process storage backend.

Keeps records in insertion-ordered dicts and hands out copies, so nothing
a caller does to a returned object reaches storage.
"""

from gradebook.models.base import generate_id
from gradebook.schemas.exam import ExamCreate, ExamResponse
from gradebook.schemas.grade import GradeResponse, GradeScore
from gradebook.schemas.student import StudentCreate, StudentResponse


class InMemoryGradebookRepository:
    """Dict-backed ``GradebookRepository``."""

    def __init__(self):
        self._students: dict[str, StudentResponse] = {}
        self._exams: dict[str, ExamResponse] = {}
        self._grades: dict[str, GradeResponse] = {}

    async def list_students(self) -> list[StudentResponse]:
        return [s.model_copy(deep=True) for s in self._students.values()]

    async def list_exams(self) -> list[ExamResponse]:
        return [e.model_copy(deep=True) for e in self._exams.values()]

    async def list_grades(
        self,
        matricola: str | None = None,
        exam_id: str | None = None,
    ) -> list[GradeResponse]:
        grades = self._grades.values()
        if matricola is not None:
            grades = [g for g in grades if g.matricola == matricola]
        if exam_id is not None:
            grades = [g for g in grades if g.exam_id == exam_id]
        return [g.model_copy(deep=True) for g in grades]

    async def get_student(self, student_id: str) -> StudentResponse | None:
        student = self._students.get(student_id)
        return student.model_copy(deep=True) if student else None

    async def get_student_by_matricola(self, matricola: str) -> StudentResponse | None:
        for student in self._students.values():
            if student.matricola == matricola:
                return student.model_copy(deep=True)
        return None

    async def get_exam(self, exam_id: str) -> ExamResponse | None:
        exam = self._exams.get(exam_id)
        return exam.model_copy(deep=True) if exam else None

    async def get_grade(self, grade_id: str) -> GradeResponse | None:
        grade = self._grades.get(grade_id)
        return grade.model_copy(deep=True) if grade else None

    async def add_student(self, student: StudentCreate) -> StudentResponse:
        stored = StudentResponse(id=generate_id(), **student.model_dump())
        self._students[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update_student(self, student: StudentResponse) -> StudentResponse:
        self._students[student.id] = student.model_copy(deep=True)
        return student

    async def delete_student(self, student_id: str) -> None:
        self._students.pop(student_id, None)

    async def add_exam(self, exam: ExamCreate) -> ExamResponse:
        stored = ExamResponse(id=generate_id(), **exam.model_dump())
        self._exams[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update_exam(self, exam: ExamResponse) -> ExamResponse:
        self._exams[exam.id] = exam.model_copy(deep=True)
        return exam

    async def delete_exam(self, exam_id: str) -> None:
        self._exams.pop(exam_id, None)

    async def add_grade(
        self,
        matricola: str,
        exam_id: str,
        score: GradeScore,
    ) -> GradeResponse:
        stored = GradeResponse(
            id=generate_id(),
            matricola=matricola,
            exam_id=exam_id,
            score=score,
        )
        self._grades[stored.id] = stored
        return stored.model_copy(deep=True)

    async def update_grade(self, grade: GradeResponse) -> GradeResponse:
        self._grades[grade.id] = grade.model_copy(deep=True)
        return grade

    async def delete_grade(self, grade_id: str) -> None:
        self._grades.pop(grade_id, None)

    async def delete_grades(
        self,
        matricola: str | None = None,
        exam_id: str | None = None,
    ) -> int:
        doomed = [
            grade.id
            for grade in self._grades.values()
            if (matricola is None or grade.matricola == matricola)
            and (exam_id is None or grade.exam_id == exam_id)
        ]
        for grade_id in doomed:
            del self._grades[grade_id]
        return len(doomed)
