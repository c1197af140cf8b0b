"""Statistics over grade collections."""

from collections.abc import Iterable

from gradebook.schemas.analytics import ExamStats, GradeStats
from gradebook.schemas.grade import GradeResponse
from gradebook.services.grading import distribution_key, is_passing, numeric_value


def _round(value: float) -> float:
    return round(value, 2)


def passing_average(grades: Iterable[GradeResponse]) -> float:
    """Mean numeric value of the passing grades, rounded to 2 decimals.

    Failing grades never lower the average. Returns 0 when nothing passed.
    """
    passed = [numeric_value(grade) for grade in grades if is_passing(grade)]
    if not passed:
        return 0.0
    return _round(sum(passed) / len(passed))


def calculate_stats(grades: Iterable[GradeResponse]) -> GradeStats:
    """
    Aggregate a set of grades.

    The distribution counts every grade, failures included. The average
    uses passing grades only, while the passing percentage is taken over
    all grades. A grade without a score counts as failing.
    """
    grades = list(grades)
    if not grades:
        return GradeStats()

    passing = 0
    passing_total = 0
    distribution: dict[str, int] = {}

    for grade in grades:
        key = distribution_key(grade)
        distribution[key] = distribution.get(key, 0) + 1

        if is_passing(grade):
            passing += 1
            passing_total += numeric_value(grade)

    total = len(grades)
    average = passing_total / passing if passing else 0.0

    return GradeStats(
        average=_round(average),
        passing=passing,
        failing=total - passing,
        passing_percentage=_round(passing / total * 100),
        distribution=distribution,
    )


def get_exam_stats(grades: Iterable[GradeResponse], exam_id: str) -> ExamStats:
    """Statistics restricted to one exam, with the raw grade count."""
    exam_grades = [grade for grade in grades if grade.exam_id == exam_id]
    stats = calculate_stats(exam_grades)
    return ExamStats(**stats.model_dump(), grade_count=len(exam_grades))
