import pytest

from conftest import blank_grade, letter_grade, numeric_grade
from gradebook.models.grade import LetterGrade
from gradebook.services.grading import (
    format_grade,
    is_passing,
    letter_to_numeric,
    numeric_to_letter,
    numeric_value,
    to_detail,
)


@pytest.mark.parametrize(
    "letter, expected",
    [("A", 30), ("B", 28), ("C", 26), ("D", 23), ("E", 19), ("F", 0)],
)
def test_letter_to_numeric_uses_band_midpoints(letter, expected):
    assert letter_to_numeric(LetterGrade(letter)) == expected


@pytest.mark.parametrize(
    "value, expected",
    [(30, "A"), (29, "B"), (28, "B"), (27, "C"), (25, "C"), (24, "D"),
     (22, "D"), (21, "E"), (18, "E"), (17, "F"), (0, "F")],
)
def test_numeric_to_letter_bands(value, expected):
    assert numeric_to_letter(value) == LetterGrade(expected)


def test_every_letter_but_f_passes():
    for letter in "ABCDE":
        assert is_passing(letter_grade("M1", "e1", letter))
    assert not is_passing(letter_grade("M1", "e1", "F"))


def test_numeric_passing_boundary():
    assert not is_passing(numeric_grade("M1", "e1", 17))
    assert is_passing(numeric_grade("M1", "e1", 18))
    assert is_passing(numeric_grade("M1", "e1", 30))


def test_grade_without_score_never_passes():
    grade = blank_grade("M1", "e1")
    assert not is_passing(grade)
    assert numeric_value(grade) == 0
    assert format_grade(grade) == ""


def test_format_grade_honors():
    assert format_grade(numeric_grade("M1", "e1", 30, con_lode=True)) == "30L"
    assert format_grade(numeric_grade("M1", "e1", 30)) == "30"
    assert format_grade(letter_grade("M1", "e1", "B")) == "B"


def test_format_grade_is_stable():
    grade = numeric_grade("M1", "e1", 30, con_lode=True)
    assert format_grade(grade) == format_grade(grade)


def test_zero_is_a_real_grade():
    grade = numeric_grade("M1", "e1", 0)
    assert format_grade(grade) == "0"
    assert numeric_value(grade) == 0
    assert not is_passing(grade)


def test_to_detail_flattens_score():
    detail = to_detail(numeric_grade("M7", "e2", 30, con_lode=True))
    assert detail.voto_numerico == 30
    assert detail.voto_lettera is None
    assert detail.con_lode is True
    assert detail.display == "30L"
    assert detail.passed is True
