"""Student model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from gradebook.core.database import Base
from gradebook.models.base import IDMixin, TimestampMixin


class Student(Base, IDMixin, TimestampMixin):
    """Registered student, identified externally by matricola.

    Grades reference students by matricola without a foreign key, so a
    grade may exist for a matricola that was never registered.
    """

    __tablename__ = "students"

    matricola: Mapped[str] = mapped_column(String(50), nullable=False, unique=True, index=True)
    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    cognome: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Student(id={self.id}, matricola={self.matricola})>"
