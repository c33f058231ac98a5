"""Initial schema: tests, answer sheets, results, sessions, archive

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "tests",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("test_code", sa.String(16), nullable=False),
        sa.Column("subject", sa.String(255), nullable=False),
        sa.Column("instruction", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_tests_id", "tests", ["id"])
    op.create_index("ix_tests_test_code", "tests", ["test_code"], unique=True)

    op.create_table(
        "passages",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("test_id", sa.Integer(), sa.ForeignKey("tests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("content", sa.Text(), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(500), nullable=False, server_default=""),
    )
    op.create_index("ix_passages_id", "passages", ["id"])

    op.create_table(
        "questions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("test_id", sa.Integer(), sa.ForeignKey("tests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("question_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("question_image_url", sa.String(500), nullable=False, server_default=""),
        sa.Column("passage_index", sa.Integer(), nullable=False, server_default="-1"),
    )
    op.create_index("ix_questions_id", "questions", ["id"])
    op.create_index("idx_questions_test_position", "questions", ["test_id", "position"])

    op.create_table(
        "options",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("question_id", sa.Integer(), sa.ForeignKey("questions.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("text", sa.Text(), nullable=False, server_default=""),
        sa.Column("image_url", sa.String(500), nullable=False, server_default=""),
        sa.Column("is_correct", sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_options_id", "options", ["id"])

    op.create_table(
        "answer_sheets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("uli", sa.String(50), nullable=False),
        sa.Column("test_id", sa.Integer(), sa.ForeignKey("tests.id", ondelete="SET NULL"), nullable=True),
        sa.Column("date", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("first_name", sa.String(100), nullable=True),
        sa.Column("last_name", sa.String(100), nullable=True),
        sa.Column("middle_initial", sa.String(10), nullable=True),
        sa.Column("sex", sa.String(10), nullable=True),
        sa.Column("civil_status", sa.String(50), nullable=True),
        sa.Column("highest_educational_attainment", sa.String(100), nullable=True),
        sa.Column("contact_number", sa.String(50), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("school", sa.String(255), nullable=True),
        sa.Column("qualifications", sa.String(255), nullable=True),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_answer_sheets_id", "answer_sheets", ["id"])
    op.create_index("ix_answer_sheets_uli", "answer_sheets", ["uli"])

    op.create_table(
        "sheet_answers",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("sheet_id", sa.Integer(), sa.ForeignKey("answer_sheets.id", ondelete="CASCADE"), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("question_id", sa.Integer(), nullable=False),
        sa.Column("selected_option_id", sa.Integer(), nullable=False),
    )
    op.create_index("ix_sheet_answers_id", "sheet_answers", ["id"])

    op.create_table(
        "results",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("uli", sa.String(50), nullable=False),
        sa.Column("test_id", sa.Integer(), sa.ForeignKey("tests.id", ondelete="SET NULL"), nullable=True),
        sa.Column("test_code", sa.String(16), nullable=False),
        sa.Column("subject", sa.String(255), nullable=True),
        sa.Column("score", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_questions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("remarks", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint("uli", "test_id", name="uq_result_uli_test"),
    )
    op.create_index("ix_results_id", "results", ["id"])
    op.create_index("ix_results_uli", "results", ["uli"])
    op.create_index("idx_results_uli_code", "results", ["uli", "test_code"])

    op.create_table(
        "test_sessions",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("uli", sa.String(50), nullable=False),
        sa.Column("test_id", sa.Integer(), sa.ForeignKey("tests.id", ondelete="CASCADE"), nullable=False),
        sa.Column("test_code", sa.String(16), nullable=False),
        sa.Column("start_time", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("end_time", sa.DateTime(), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="in-progress"),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index("ix_test_sessions_id", "test_sessions", ["id"])
    op.create_index("ix_test_sessions_uli", "test_sessions", ["uli"])

    op.create_table(
        "archived_records",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(255), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("deleted_by", sa.String(255), nullable=True),
        sa.Column("deleted_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_archived_records_id", "archived_records", ["id"])
    op.create_index("idx_archive_entity", "archived_records", ["entity_type", "entity_id"])


def downgrade() -> None:
    op.drop_table("archived_records")
    op.drop_table("test_sessions")
    op.drop_table("results")
    op.drop_table("sheet_answers")
    op.drop_table("answer_sheets")
    op.drop_table("options")
    op.drop_table("questions")
    op.drop_table("passages")
    op.drop_table("tests")
