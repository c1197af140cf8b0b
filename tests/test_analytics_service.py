from datetime import date

import pytest

from conftest import run
from gradebook.core.exceptions import NotFoundError
from gradebook.models.grade import LetterGrade
from gradebook.schemas.analytics import UNREGISTERED_STUDENT_NAME
from gradebook.schemas.exam import ExamCreate
from gradebook.schemas.grade import GradeCreate
from gradebook.schemas.student import StudentCreate


@pytest.fixture()
def populated(gradebook):
    fisica = run(gradebook.add_exam(ExamCreate(nome="Fisica", data=date(2026, 1, 10))))
    inglese = run(gradebook.add_exam(
        ExamCreate(nome="Inglese", data=date(2026, 2, 10), use_letter_grades=True)
    ))
    run(gradebook.add_student(StudentCreate(matricola="M1", nome="Marco", cognome="Rossi")))
    run(gradebook.add_student(StudentCreate(matricola="M2", nome="Lucia", cognome="Bianchi")))
    run(gradebook.add_student(StudentCreate(matricola="M3", nome="Giovanni", cognome="Verdi")))

    for request in [
        GradeCreate(matricola="M1", exam_id=fisica.id, voto_numerico=25),
        GradeCreate(matricola="M2", exam_id=fisica.id, voto_numerico=15),
        GradeCreate(matricola="X9", exam_id=fisica.id, voto_numerico=30, con_lode=True),
        GradeCreate(matricola="M1", exam_id=inglese.id, voto_lettera=LetterGrade.A),
    ]:
        run(gradebook.add_grade(request))
    return {"fisica": fisica, "inglese": inglese}


def test_dashboard_global_counts(analytics, populated):
    dashboard = run(analytics.get_dashboard_analytics())

    assert dashboard.exam_id is None
    assert dashboard.counts.registered_students == 3
    assert dashboard.counts.students_with_grades == 3
    assert dashboard.counts.exams == 2
    assert dashboard.counts.grades == 4
    assert dashboard.stats.passing == 3
    assert dashboard.stats.average == 28.33


def test_dashboard_scoped_to_exam(analytics, populated):
    fisica = populated["fisica"]
    dashboard = run(analytics.get_dashboard_analytics(fisica.id))

    assert dashboard.counts.grades == 3
    assert dashboard.counts.students_with_grades == 3
    assert dashboard.counts.exams == 2
    assert dashboard.stats.distribution == {"25": 1, "15": 1, "30L": 1}
    assert dashboard.stats.average == 27.5


def test_dashboard_recent_exams_newest_first(analytics, populated):
    dashboard = run(analytics.get_dashboard_analytics())
    assert [e.nome for e in dashboard.recent_exams] == ["Inglese", "Fisica"]
    assert dashboard.recent_exams[1].stats.grade_count == 3


def test_dashboard_on_empty_gradebook(analytics):
    dashboard = run(analytics.get_dashboard_analytics())
    assert dashboard.counts.grades == 0
    assert dashboard.stats.average == 0
    assert dashboard.recent_exams == []


def test_student_ranking_through_service(analytics, populated):
    ranking = run(analytics.get_student_ranking())
    assert [row.matricola for row in ranking] == ["X9", "M1"]
    assert ranking[0].nome == UNREGISTERED_STUDENT_NAME
    assert ranking[1].average == 27.5


def test_exam_ranking_through_service(analytics, populated):
    ranking = run(analytics.get_exam_ranking())
    assert [row.nome for row in ranking] == ["Inglese", "Fisica"]
    assert ranking[1].student_count == 3


def test_exam_stats_unknown_exam(analytics):
    with pytest.raises(NotFoundError):
        run(analytics.get_exam_stats("missing"))


def test_student_report_for_unregistered_matricola(analytics, populated):
    report = run(analytics.get_student_report("X9"))
    assert report.student.registered is False
    assert report.student.average == 30.0
    assert report.student.grades[0].display == "30L"


def test_student_report_averages_passing_grades(analytics, populated):
    report = run(analytics.get_student_report("M1"))
    assert report.student.nome == "Marco"
    assert report.student.average == 27.5
    assert report.stats.passing == 2


def test_student_report_unknown_matricola(analytics, populated):
    with pytest.raises(NotFoundError):
        run(analytics.get_student_report("nobody"))
