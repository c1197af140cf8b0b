"""Seed an empty gradebook with sample students, exams and grades."""
import asyncio
from datetime import date

from gradebook.core.database import SessionLocal
from gradebook.models.exam import ExamType
from gradebook.models.grade import LetterGrade
from gradebook.repositories.sql import SqlGradebookRepository
from gradebook.schemas.exam import ExamCreate
from gradebook.schemas.grade import GradeCreate
from gradebook.schemas.student import StudentCreate
from gradebook.services.gradebook import GradebookService

SAMPLE_STUDENTS = [
    StudentCreate(matricola="0612710901", nome="Marco", cognome="Rossi"),
    StudentCreate(matricola="0612710902", nome="Lucia", cognome="Bianchi"),
    StudentCreate(matricola="0612710903", nome="Giovanni", cognome="Verdi"),
]

SAMPLE_EXAMS = [
    ("Programmazione - Prova finale", True),
    ("Matematica Discreta - Primo appello", True),
    ("Fisica - Computo finale", False),
]

LETTERS = list(LetterGrade)


async def seed(service: GradebookService) -> None:
    if await service.list_students() or await service.list_exams():
        print("Gradebook is not empty, nothing to do.")
        return

    students = [await service.add_student(s) for s in SAMPLE_STUDENTS]
    exams = [
        await service.add_exam(
            ExamCreate(nome=nome, tipo=ExamType.COMPLETO, data=date.today(), use_letter_grades=letters)
        )
        for nome, letters in SAMPLE_EXAMS
    ]

    for exam in exams:
        for i, student in enumerate(students):
            if exam.use_letter_grades:
                request = GradeCreate(
                    matricola=student.matricola,
                    exam_id=exam.id,
                    voto_lettera=LETTERS[i % len(LETTERS)],
                )
            else:
                request = GradeCreate(
                    matricola=student.matricola,
                    exam_id=exam.id,
                    voto_numerico=min(18 + i * 3, 30),
                )
            await service.add_grade(request)

    print(f"Seeded {len(students)} students, {len(exams)} exams, {len(students) * len(exams)} grades.")


if __name__ == "__main__":
    session = SessionLocal()
    try:
        asyncio.run(seed(GradebookService(SqlGradebookRepository(session))))
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
