"""Storage interface consumed by the gradebook services.

Every method is a coroutine so callers have a single code path whether the
backend is in-process or a database. Write methods are storage primitives:
validation and cascades belong to ``GradebookService``.
"""

from typing import Protocol

from gradebook.schemas.exam import ExamCreate, ExamResponse
from gradebook.schemas.grade import GradeResponse, GradeScore
from gradebook.schemas.student import StudentCreate, StudentResponse


class GradebookRepository(Protocol):
    """Read and write access to students, exams and grades."""

    # Reads

    async def list_students(self) -> list[StudentResponse]: ...

    async def list_exams(self) -> list[ExamResponse]: ...

    async def list_grades(
        self,
        matricola: str | None = None,
        exam_id: str | None = None,
    ) -> list[GradeResponse]: ...

    async def get_student(self, student_id: str) -> StudentResponse | None: ...

    async def get_student_by_matricola(self, matricola: str) -> StudentResponse | None: ...

    async def get_exam(self, exam_id: str) -> ExamResponse | None: ...

    async def get_grade(self, grade_id: str) -> GradeResponse | None: ...

    # Writes

    async def add_student(self, student: StudentCreate) -> StudentResponse: ...

    async def update_student(self, student: StudentResponse) -> StudentResponse: ...

    async def delete_student(self, student_id: str) -> None: ...

    async def add_exam(self, exam: ExamCreate) -> ExamResponse: ...

    async def update_exam(self, exam: ExamResponse) -> ExamResponse: ...

    async def delete_exam(self, exam_id: str) -> None: ...

    async def add_grade(
        self,
        matricola: str,
        exam_id: str,
        score: GradeScore,
    ) -> GradeResponse: ...

    async def update_grade(self, grade: GradeResponse) -> GradeResponse: ...

    async def delete_grade(self, grade_id: str) -> None: ...

    async def delete_grades(
        self,
        matricola: str | None = None,
        exam_id: str | None = None,
    ) -> int: ...
