"""Exam schemas."""

from datetime import date

from pydantic import Field

from gradebook.models.exam import ExamType
from gradebook.schemas.common import BaseSchema


class ExamBase(BaseSchema):
    """Base exam schema."""

    nome: str = Field(..., min_length=1, max_length=255)
    tipo: ExamType = ExamType.COMPLETO
    data: date
    use_letter_grades: bool = False


class ExamCreate(ExamBase):
    """Exam creation schema."""

    pass


class ExamUpdate(BaseSchema):
    """Exam update schema."""

    nome: str | None = Field(None, min_length=1, max_length=255)
    tipo: ExamType | None = None
    data: date | None = None
    use_letter_grades: bool | None = None


class ExamResponse(ExamBase):
    """Exam as read from storage."""

    id: str
