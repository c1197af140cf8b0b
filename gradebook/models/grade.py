"""Grade model."""

import enum

from sqlalchemy import Boolean, CheckConstraint, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gradebook.core.database import Base
from gradebook.models.base import IDMixin, TimestampMixin


class LetterGrade(str, enum.Enum):
    """Letter grading notation."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"

    @classmethod
    def from_string(cls, value: str) -> "LetterGrade":
        """Convert string to LetterGrade, ignoring case and surrounding spaces."""
        normalized = value.strip().upper()
        try:
            return cls(normalized)
        except ValueError:
            raise ValueError(f"Invalid letter grade: {value}")


class Grade(Base, IDMixin, TimestampMixin):
    """A single grade of a matricola on an exam.

    Exactly one of ``voto_lettera`` / ``voto_numerico`` is populated,
    matching the exam's ``use_letter_grades``.
    """

    __tablename__ = "grades"

    matricola: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    exam_id: Mapped[str] = mapped_column(
        String(32),
        ForeignKey("exams.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    voto_lettera: Mapped[LetterGrade | None] = mapped_column(
        Enum(LetterGrade, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    voto_numerico: Mapped[int | None] = mapped_column(Integer, nullable=True)
    con_lode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Relationships
    exam: Mapped["Exam"] = relationship("Exam", back_populates="grades")

    __table_args__ = (
        CheckConstraint(
            "(voto_lettera IS NULL) <> (voto_numerico IS NULL)",
            name="ck_grade_single_notation",
        ),
    )

    def __repr__(self) -> str:
        return f"<Grade(matricola={self.matricola}, exam_id={self.exam_id})>"
