"""Grade notation rules shared by every aggregate computation.

Letter grades are placed on the numeric axis using the midpoint of each
letter's band, so letter and numeric exams can be averaged and ranked
together.
"""

from gradebook.models.grade import LetterGrade
from gradebook.schemas.exam import ExamResponse
from gradebook.schemas.grade import (
    PASSING_NUMERIC_GRADE,
    GradeDetail,
    GradeResponse,
    GradeWithExam,
    LetterScore,
    NumericScore,
)

LETTER_TO_NUMERIC: dict[LetterGrade, int] = {
    LetterGrade.A: 30,
    LetterGrade.B: 28,
    LetterGrade.C: 26,
    LetterGrade.D: 23,
    LetterGrade.E: 19,
    LetterGrade.F: 0,
}

HONORS_SUFFIX = "L"


def letter_to_numeric(letter: LetterGrade) -> int:
    """Numeric equivalent of a letter grade."""
    return LETTER_TO_NUMERIC[LetterGrade(letter)]


def numeric_to_letter(value: int) -> LetterGrade:
    """Letter band a numeric grade falls into."""
    if value == 30:
        return LetterGrade.A
    if 28 <= value <= 29:
        return LetterGrade.B
    if 25 <= value <= 27:
        return LetterGrade.C
    if 22 <= value <= 24:
        return LetterGrade.D
    if 18 <= value <= 21:
        return LetterGrade.E
    return LetterGrade.F


def is_passing(grade: GradeResponse) -> bool:
    """Letter grades pass unless F, numeric grades pass from 18 up."""
    score = grade.score
    if isinstance(score, LetterScore):
        return score.letter != LetterGrade.F
    if isinstance(score, NumericScore):
        return score.value >= PASSING_NUMERIC_GRADE
    return False


def numeric_value(grade: GradeResponse) -> int:
    """Value used for averaging and ranking; 0 for a grade without score."""
    score = grade.score
    if isinstance(score, LetterScore):
        return letter_to_numeric(score.letter)
    if isinstance(score, NumericScore):
        return score.value
    return 0


def format_grade(grade: GradeResponse) -> str:
    """Display form: the letter, or the number with an ``L`` for honors."""
    score = grade.score
    if isinstance(score, LetterScore):
        return score.letter.value
    if isinstance(score, NumericScore):
        if score.con_lode and score.value == 30:
            return f"{score.value}{HONORS_SUFFIX}"
        return str(score.value)
    return ""


def distribution_key(grade: GradeResponse) -> str:
    """Histogram bucket of a grade. Same as its display form."""
    return format_grade(grade)


def to_detail(grade: GradeResponse) -> GradeDetail:
    """Flatten a stored grade for clients."""
    return GradeDetail(
        id=grade.id,
        matricola=grade.matricola,
        exam_id=grade.exam_id,
        voto_lettera=grade.voto_lettera,
        voto_numerico=grade.voto_numerico,
        con_lode=grade.con_lode,
        display=format_grade(grade),
        passed=is_passing(grade),
    )


def with_exam(grade: GradeResponse, exam: ExamResponse) -> GradeWithExam:
    """Flatten a stored grade and attach its exam."""
    return GradeWithExam(**to_detail(grade).model_dump(), exam=exam)
