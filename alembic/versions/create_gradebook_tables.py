"""Create students, exams and grades tables

Revision ID: create_gradebook_tables
Revises:
Create Date: 2026-10-19

Grades reference students by matricola only, so grades may exist for
matricole that were never registered. Deleting an exam cascades to its
grades.
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "create_gradebook_tables"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "students",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("matricola", sa.String(50), nullable=False),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column("cognome", sa.String(255), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_students_matricola", "students", ["matricola"], unique=True)

    op.create_table(
        "exams",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("nome", sa.String(255), nullable=False),
        sa.Column(
            "tipo",
            sa.Enum("intermedio", "completo", name="examtype"),
            nullable=False,
        ),
        sa.Column("data", sa.Date(), nullable=False),
        sa.Column("use_letter_grades", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_exams_data", "exams", ["data"])

    op.create_table(
        "grades",
        sa.Column("id", sa.String(32), primary_key=True),
        sa.Column("matricola", sa.String(50), nullable=False),
        sa.Column(
            "exam_id",
            sa.String(32),
            sa.ForeignKey("exams.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "voto_lettera",
            sa.Enum("A", "B", "C", "D", "E", "F", name="lettergrade"),
            nullable=True,
        ),
        sa.Column("voto_numerico", sa.Integer(), nullable=True),
        sa.Column("con_lode", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.CheckConstraint(
            "(voto_lettera IS NULL) <> (voto_numerico IS NULL)",
            name="ck_grade_single_notation",
        ),
    )
    op.create_index("ix_grades_matricola", "grades", ["matricola"])
    op.create_index("ix_grades_exam_id", "grades", ["exam_id"])


def downgrade() -> None:
    op.drop_index("ix_grades_exam_id", table_name="grades")
    op.drop_index("ix_grades_matricola", table_name="grades")
    op.drop_table("grades")

    op.drop_index("ix_exams_data", table_name="exams")
    op.drop_table("exams")

    op.drop_index("ix_students_matricola", table_name="students")
    op.drop_table("students")

    sa.Enum(name="lettergrade").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="examtype").drop(op.get_bind(), checkfirst=True)
