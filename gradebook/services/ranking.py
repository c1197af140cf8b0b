"""Student and exam leaderboards.

Both rankings work on an explicit snapshot of students, exams and grades
and never touch storage.
"""

from collections.abc import Sequence

from gradebook.schemas.analytics import (
    UNREGISTERED_STUDENT_NAME,
    ExamWithStats,
    StudentWithGrades,
)
from gradebook.schemas.exam import ExamResponse
from gradebook.schemas.grade import GradeResponse
from gradebook.schemas.student import StudentResponse
from gradebook.services.grading import numeric_value, with_exam
from gradebook.services.statistics import calculate_stats, passing_average


def graded_matricole(grades: Sequence[GradeResponse]) -> list[str]:
    """Distinct matricole with at least one grade, in encounter order."""
    return list(dict.fromkeys(grade.matricola for grade in grades))


def student_entry(
    matricola: str,
    students_by_matricola: dict[str, StudentResponse],
) -> StudentWithGrades:
    """Ranking row for a matricola, synthetic when it is not registered."""
    student = students_by_matricola.get(matricola)
    if student is None:
        return StudentWithGrades(
            id=matricola,
            matricola=matricola,
            nome=UNREGISTERED_STUDENT_NAME,
            cognome="",
            registered=False,
        )
    return StudentWithGrades(
        id=student.id,
        matricola=student.matricola,
        nome=student.nome,
        cognome=student.cognome,
    )


def get_student_ranking(
    students: Sequence[StudentResponse],
    exams: Sequence[ExamResponse],
    grades: Sequence[GradeResponse],
    exam_id: str | None = None,
) -> list[StudentWithGrades]:
    """
    Rank every graded matricola.

    Without ``exam_id`` the ranking value is the passing-only average over
    all of the student's grades. With ``exam_id`` it is the student's own
    grade on that exam. Rows whose value is 0 are left out, so students
    who never passed do not appear in the overall ranking. Ties keep
    encounter order.
    """
    students_by_matricola = {student.matricola: student for student in students}
    exams_by_id = {exam.id: exam for exam in exams}

    by_matricola: dict[str, list[GradeResponse]] = {}
    for grade in grades:
        if grade.exam_id not in exams_by_id:
            continue
        by_matricola.setdefault(grade.matricola, []).append(grade)

    ranking: list[StudentWithGrades] = []
    for matricola in graded_matricole(grades):
        in_scope = by_matricola.get(matricola, [])
        if exam_id is not None:
            in_scope = [grade for grade in in_scope if grade.exam_id == exam_id]
        if not in_scope:
            continue

        if exam_id is not None:
            value = float(numeric_value(in_scope[0]))
        else:
            value = passing_average(in_scope)
        if value == 0:
            continue

        entry = student_entry(matricola, students_by_matricola)
        entry.grades = [with_exam(grade, exams_by_id[grade.exam_id]) for grade in in_scope]
        entry.average = value
        ranking.append(entry)

    # sorted() is stable
    return sorted(ranking, key=lambda entry: entry.average, reverse=True)


def get_exam_ranking(
    exams: Sequence[ExamResponse],
    grades: Sequence[GradeResponse],
) -> list[ExamWithStats]:
    """Every exam with its statistics, best average first. Empty exams sort last."""
    ranking: list[ExamWithStats] = []
    for exam in exams:
        exam_grades = [grade for grade in grades if grade.exam_id == exam.id]
        ranking.append(
            ExamWithStats(
                **exam.model_dump(),
                stats=calculate_stats(exam_grades),
                student_count=len(graded_matricole(exam_grades)),
            )
        )

    return sorted(ranking, key=lambda entry: entry.stats.average, reverse=True)
