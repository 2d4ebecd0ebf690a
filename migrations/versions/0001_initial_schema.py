"""Initial Partitura schema: users, sheets and the user_sheets ledger."""

from __future__ import annotations

from typing import Optional

import sqlalchemy as sa
from alembic import op

from partitura_api.db.types import UTCDateTime

# Revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision: Optional[str] = None
branch_labels: Optional[str] = None
depends_on: Optional[str] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", UTCDateTime(), nullable=False),
        sa.Column("updated_at", UTCDateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("email_normalized", sa.String(255), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("bio", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="users_pkey"),
        sa.UniqueConstraint("email_normalized", name="users_email_normalized_key"),
    )

    op.create_table(
        "sheets",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("artist", sa.String(100), nullable=False),
        sa.Column("genre", sa.String(50), nullable=False),
        sa.Column("instrument", sa.String(50), nullable=False),
        sa.Column("pdf_content", sa.LargeBinary(), nullable=False),
        sa.Column("pdf_size", sa.Integer(), nullable=False),
        sa.Column("pdf_filename", sa.String(255), nullable=False),
        sa.Column("pdf_content_type", sa.String(100), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="sheets_pkey"),
    )
    op.create_index("sheets_is_public_created_at_idx", "sheets", ["is_public", "created_at"])
    op.create_index("sheets_genre_idx", "sheets", ["genre"])
    op.create_index("sheets_instrument_idx", "sheets", ["instrument"])

    op.create_table(
        "user_sheets",
        sa.Column("id", sa.Integer(), nullable=False, autoincrement=True),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("sheet_id", sa.Integer(), nullable=False),
        sa.Column("is_owner", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_favorite", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="user_sheets_pkey"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name="user_sheets_user_id_fkey", ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["sheet_id"], ["sheets.id"], name="user_sheets_sheet_id_fkey", ondelete="CASCADE"
        ),
        sa.UniqueConstraint("user_id", "sheet_id", name="user_sheets_user_id_sheet_id_key"),
    )
    op.create_index("user_sheets_sheet_id_idx", "user_sheets", ["sheet_id"])
    # At most one owner record per sheet.
    op.create_index(
        "user_sheets_owner_sheet_id_key",
        "user_sheets",
        ["sheet_id"],
        unique=True,
        sqlite_where=sa.text("is_owner = 1"),
        postgresql_where=sa.text("is_owner"),
    )


def downgrade() -> None:
    op.drop_index("user_sheets_owner_sheet_id_key", table_name="user_sheets")
    op.drop_index("user_sheets_sheet_id_idx", table_name="user_sheets")
    op.drop_table("user_sheets")
    op.drop_index("sheets_instrument_idx", table_name="sheets")
    op.drop_index("sheets_genre_idx", table_name="sheets")
    op.drop_index("sheets_is_public_created_at_idx", table_name="sheets")
    op.drop_table("sheets")
    op.drop_table("users")
