"""Exam model."""

import enum
from datetime import date

from sqlalchemy import Boolean, Date, Enum, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gradebook.core.database import Base
from gradebook.models.base import IDMixin, TimestampMixin


class ExamType(str, enum.Enum):
    """Administrative exam classification. Not used in scoring."""

    INTERMEDIO = "intermedio"
    COMPLETO = "completo"


class Exam(Base, IDMixin, TimestampMixin):
    """Exam model. ``use_letter_grades`` selects the notation of its grades."""

    __tablename__ = "exams"

    nome: Mapped[str] = mapped_column(String(255), nullable=False)
    tipo: Mapped[ExamType] = mapped_column(
        Enum(ExamType, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ExamType.COMPLETO,
    )
    data: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    use_letter_grades: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    grades: Mapped[list["Grade"]] = relationship(
        "Grade",
        back_populates="exam",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Exam(id={self.id}, nome={self.nome}, data={self.data})>"
