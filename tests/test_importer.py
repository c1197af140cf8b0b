from datetime import date
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from conftest import run
from gradebook.core.exceptions import NotFoundError, UploadError
from gradebook.schemas.exam import ExamCreate
from gradebook.schemas.student import StudentCreate
from gradebook.services.importer import GradeImporter, parse_grade_token


@pytest.fixture()
def importer(gradebook):
    return GradeImporter(gradebook)


@pytest.fixture()
def numeric_exam(gradebook):
    return run(gradebook.add_exam(ExamCreate(nome="Fisica", data=date(2026, 1, 10))))


@pytest.fixture()
def letter_exam(gradebook):
    return run(gradebook.add_exam(ExamCreate(nome="Inglese", data=date(2026, 1, 11), use_letter_grades=True)))


def _workbook(rows):
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    output = BytesIO()
    wb.save(output)
    return output.getvalue()


def test_parse_grade_token():
    assert parse_grade_token("27") == (27, False)
    assert parse_grade_token("30L") == (30, True)
    assert parse_grade_token("30 lode") == (30, True)
    with pytest.raises(ValueError):
        parse_grade_token("trenta")


def test_numeric_grade_import_counts_bad_rows(importer, gradebook, numeric_exam):
    csv_data = "\n".join([
        "matricola,voto",
        "M1,28",
        "M2,abc",
        "M3",
        "M4,31",
        "",
        "M5,30L",
        "M6,0",
    ])

    result = run(importer.import_grades_csv(csv_data, numeric_exam.id, has_header_row=True))

    assert result.imported == 3
    assert result.errors == 3
    assert [e.row for e in result.row_errors] == [3, 4, 5]
    grades = run(gradebook.list_grades(exam_id=numeric_exam.id))
    assert [g.matricola for g in grades] == ["M1", "M5", "M6"]
    assert grades[1].con_lode is True


def test_letter_grade_import_normalizes_case(importer, gradebook, letter_exam):
    result = run(importer.import_grades_csv("M1,a\nM2, b \nM3,G", letter_exam.id))

    assert result.imported == 2
    assert result.errors == 1
    assert result.row_errors[0].value == "G"
    letters = [g.voto_lettera.value for g in run(gradebook.list_grades())]
    assert letters == ["A", "B"]


def test_honors_rejected_on_letter_exam_row(importer, letter_exam):
    result = run(importer.import_grades_csv("M1,30L", letter_exam.id))
    assert result.imported == 0
    assert result.errors == 1


def test_grade_import_unknown_exam_is_fatal(importer):
    with pytest.raises(NotFoundError):
        run(importer.import_grades_csv("M1,20", "missing"))


def test_grade_import_empty_text(importer, numeric_exam):
    result = run(importer.import_grades_csv("", numeric_exam.id))
    assert (result.imported, result.errors) == (0, 0)


def test_student_import_detects_header_and_skips_existing(importer, gradebook):
    run(gradebook.add_student(StudentCreate(matricola="M1", nome="Marco", cognome="Rossi")))
    csv_data = "matricola,nome,cognome\nM1,Marco,Rossi\nM2,Lucia,Bianchi\nM3,Giovanni\nM2,Dup,Licate\n"

    result = run(importer.import_students_csv(csv_data))

    assert result.imported == 1
    assert result.skipped == 2
    assert result.errors == 1
    assert [s.matricola for s in result.students] == ["M2"]
    assert len(run(gradebook.list_students())) == 2


def test_student_import_without_header(importer):
    result = run(importer.import_students_csv("M1,Marco,Rossi\nM2,Lucia,Bianchi"))
    assert result.imported == 2


def test_excel_grade_import(importer, gradebook, numeric_exam):
    content = _workbook([["matricola", "voto"], ["M1", 24], ["M2", 18.0], [None, None], ["M3", "x"]])

    result = run(importer.import_grades_excel(content, numeric_exam.id))

    assert result.imported == 2
    assert result.errors == 1
    assert [g.voto_numerico for g in run(gradebook.list_grades())] == [24, 18]


def test_excel_student_import(importer):
    content = _workbook([["Matricola", "Nome", "Cognome"], ["M1", "Marco", "Rossi"]])
    result = run(importer.import_students_excel(content))
    assert result.imported == 1


def test_invalid_excel_file(importer, numeric_exam):
    with pytest.raises(UploadError):
        run(importer.import_grades_excel(b"not a workbook", numeric_exam.id))


def test_grade_template(importer, letter_exam):
    content = importer.generate_grade_template(letter_exam, ["M1", "M2"])

    wb = load_workbook(BytesIO(content))
    ws = wb["Voti"]
    assert [ws.cell(row=1, column=c).value for c in (1, 2)] == ["matricola", "voto"]
    assert [ws.cell(row=r, column=1).value for r in (2, 3)] == ["M1", "M2"]
    assert "Inglese" in wb["Istruzioni"].cell(row=1, column=1).value


def test_numeric_import_reads_honors_column(importer, gradebook, numeric_exam):
    csv_data = "matricola,voto,lode\nM1,30,true\nM2,28,true\nM3,30,1\nM4,27,false"

    result = run(importer.import_grades_csv(csv_data, numeric_exam.id, has_header_row=True))

    assert result.imported == 3
    assert result.errors == 1
    assert result.row_errors[0].row == 3
    grades = {g.matricola: (g.voto_numerico, g.con_lode) for g in run(gradebook.list_grades())}
    assert grades == {"M1": (30, True), "M3": (30, True), "M4": (27, False)}


def test_student_import_first_row_with_nome_in_surname_is_data(importer, gradebook):
    result = run(importer.import_students_csv("0612710900,Carlo,Nomellini\n0612710901,Lucia,Bianchi"))

    assert result.imported == 2
    assert [s.matricola for s in run(gradebook.list_students())] == ["0612710900", "0612710901"]


def test_numeric_grade_template_has_honors_column(importer, numeric_exam):
    wb = load_workbook(BytesIO(importer.generate_grade_template(numeric_exam)))
    assert [wb["Voti"].cell(row=1, column=c).value for c in (1, 2, 3)] == ["matricola", "voto", "lode"]
