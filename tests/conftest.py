import asyncio
import itertools
import os
from datetime import date

os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient

from gradebook.core.dependencies import get_repository
from gradebook.core.security import create_access_token
from gradebook.main import app
from gradebook.models.exam import ExamType
from gradebook.models.grade import LetterGrade
from gradebook.repositories.memory import InMemoryGradebookRepository
from gradebook.schemas.exam import ExamResponse
from gradebook.schemas.grade import GradeResponse, LetterScore, NumericScore
from gradebook.schemas.student import StudentResponse
from gradebook.services.analytics import AnalyticsService
from gradebook.services.gradebook import GradebookService


def run(coro):
    """Drive a service coroutine from a synchronous test."""
    return asyncio.run(coro)


@pytest.fixture()
def repository():
    return InMemoryGradebookRepository()


@pytest.fixture()
def gradebook(repository):
    return GradebookService(repository)


@pytest.fixture()
def analytics(repository):
    return AnalyticsService(repository)


@pytest.fixture()
def client(repository):
    app.dependency_overrides[get_repository] = lambda: repository
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture()
def admin_headers():
    return {"Authorization": f"Bearer {create_access_token('admin', is_admin=True)}"}


@pytest.fixture()
def viewer_headers():
    return {"Authorization": f"Bearer {create_access_token('viewer')}"}


_ids = itertools.count(1)


def letter_grade(matricola, exam_id, letter):
    return GradeResponse(
        id=f"g{next(_ids)}",
        matricola=matricola,
        exam_id=exam_id,
        score=LetterScore(letter=LetterGrade(letter)),
    )


def numeric_grade(matricola, exam_id, value, con_lode=False):
    return GradeResponse(
        id=f"g{next(_ids)}",
        matricola=matricola,
        exam_id=exam_id,
        score=NumericScore(value=value, con_lode=con_lode),
    )


def blank_grade(matricola, exam_id):
    return GradeResponse(id=f"g{next(_ids)}", matricola=matricola, exam_id=exam_id)


def exam(exam_id, nome=None, data=date(2026, 1, 15), letters=False):
    return ExamResponse(
        id=exam_id,
        nome=nome or exam_id,
        tipo=ExamType.COMPLETO,
        data=data,
        use_letter_grades=letters,
    )


def student(matricola, nome="Mario", cognome="Rossi"):
    return StudentResponse(id=f"s-{matricola}", matricola=matricola, nome=nome, cognome=cognome)
