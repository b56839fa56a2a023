"""Initial schema — questions and question_upvotes with listing/search indexes.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-17

On PostgreSQL a pg_trgm GIN index backs the ILIKE substring search;
other backends get a plain index on question_text.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# (index name, columns)
_QUESTION_INDEXES = [
    ("ix_questions_company", ["company"]),
    ("ix_questions_topic", ["topic"]),
    ("ix_questions_difficulty", ["difficulty"]),
    ("ix_questions_company_topic_role", ["company", "topic", "role"]),
    ("ix_questions_created_at", ["created_at"]),
    ("ix_questions_upvotes", ["upvotes"]),
]


def upgrade() -> None:
    op.create_table(
        "questions",
        sa.Column("id", UUID(as_uuid=True), nullable=False),
        sa.Column("question_text", sa.Text, nullable=False),
        sa.Column("company", sa.Text, nullable=False),
        sa.Column("topic", sa.Text, nullable=False),
        sa.Column("role", sa.Text, nullable=False),
        sa.Column("difficulty", sa.String(10), nullable=False),
        sa.Column("submitted_by", sa.Text, nullable=True),
        sa.Column("upvotes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "difficulty IN ('Easy', 'Medium', 'Hard')",
            name="ck_questions_difficulty",
        ),
        sa.CheckConstraint("upvotes >= 0", name="ck_questions_upvotes_non_negative"),
        sa.PrimaryKeyConstraint("id", name="pk_questions"),
    )
    for name, columns in _QUESTION_INDEXES:
        op.create_index(name, "questions", columns)

    if op.get_bind().dialect.name == "postgresql":
        op.execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
        op.execute(
            "CREATE INDEX ix_questions_question_text_trgm "
            "ON questions USING gin (question_text gin_trgm_ops)"
        )
    else:
        op.create_index("ix_questions_question_text", "questions", ["question_text"])

    op.create_table(
        "question_upvotes",
        sa.Column("question_id", UUID(as_uuid=True), nullable=False),
        sa.Column("user_id", sa.Text, nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(
            ["question_id"], ["questions.id"],
            name="fk_question_upvotes_question_id_questions",
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("question_id", "user_id", name="pk_question_upvotes"),
    )


def downgrade() -> None:
    op.drop_table("question_upvotes")
    if op.get_bind().dialect.name == "postgresql":
        op.drop_index("ix_questions_question_text_trgm", table_name="questions")
    else:
        op.drop_index("ix_questions_question_text", table_name="questions")
    for name, _ in reversed(_QUESTION_INDEXES):
        op.drop_index(name, table_name="questions")
    op.drop_table("questions")
