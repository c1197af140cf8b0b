"""Grade schemas.

A stored grade carries a ``score`` that is either a letter or a numeric
score, discriminated by ``kind``. Write requests keep the flat
``voto_lettera`` / ``voto_numerico`` / ``con_lode`` fields used by the
entry forms and the import files.
"""

from typing import Annotated, Literal, Union

from pydantic import Field

from gradebook.models.grade import LetterGrade
from gradebook.schemas.common import BaseSchema
from gradebook.schemas.exam import ExamResponse

# Numeric grades are accepted in [0, 30]; >= 18 passes
MIN_NUMERIC_GRADE = 0
MAX_NUMERIC_GRADE = 30
PASSING_NUMERIC_GRADE = 18


# ==========================================
# Scores
# ==========================================

class LetterScore(BaseSchema):
    """Score in letter notation."""

    kind: Literal["letter"] = "letter"
    letter: LetterGrade


class NumericScore(BaseSchema):
    """Score in numeric notation, optionally with honors (lode)."""

    kind: Literal["numeric"] = "numeric"
    value: int
    con_lode: bool = False


GradeScore = Annotated[Union[LetterScore, NumericScore], Field(discriminator="kind")]


# ==========================================
# Grade Records
# ==========================================

class GradeResponse(BaseSchema):
    """Grade as read from storage.

    ``score`` is None only for a malformed stored record.
    """

    id: str
    matricola: str
    exam_id: str
    score: GradeScore | None = None

    @property
    def voto_lettera(self) -> LetterGrade | None:
        if isinstance(self.score, LetterScore):
            return self.score.letter
        return None

    @property
    def voto_numerico(self) -> int | None:
        if isinstance(self.score, NumericScore):
            return self.score.value
        return None

    @property
    def con_lode(self) -> bool:
        return isinstance(self.score, NumericScore) and self.score.con_lode


class GradeCreate(BaseSchema):
    """Grade creation schema.

    Exactly one of ``voto_lettera`` / ``voto_numerico`` must be given; the
    write service checks it against the exam's notation.
    """

    matricola: str = Field(..., min_length=1, max_length=50)
    exam_id: str
    voto_lettera: LetterGrade | None = None
    voto_numerico: int | None = None
    con_lode: bool = False


class GradeUpdate(BaseSchema):
    """Grade update schema.

    The score fields are replaced together: when either is set, the other
    is cleared.
    """

    matricola: str | None = Field(None, min_length=1, max_length=50)
    exam_id: str | None = None
    voto_lettera: LetterGrade | None = None
    voto_numerico: int | None = None
    con_lode: bool | None = None


class GradeDetail(BaseSchema):
    """Grade as presented to clients."""

    id: str
    matricola: str
    exam_id: str
    voto_lettera: LetterGrade | None = None
    voto_numerico: int | None = None
    con_lode: bool = False
    display: str
    passed: bool


class GradeWithExam(GradeDetail):
    """Grade joined with the exam it belongs to."""

    exam: ExamResponse
