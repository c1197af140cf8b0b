"""Student schemas."""

from pydantic import Field

from gradebook.schemas.common import BaseSchema


class StudentBase(BaseSchema):
    """Base student schema."""

    matricola: str = Field(..., min_length=1, max_length=50)
    nome: str = Field(..., min_length=1, max_length=255)
    cognome: str = Field(..., min_length=1, max_length=255)


class StudentCreate(StudentBase):
    """Student creation schema."""

    pass


class StudentUpdate(BaseSchema):
    """Student update schema."""

    matricola: str | None = Field(None, min_length=1, max_length=50)
    nome: str | None = Field(None, min_length=1, max_length=255)
    cognome: str | None = Field(None, min_length=1, max_length=255)


class StudentResponse(StudentBase):
    """Registered student as read from storage."""

    id: str
