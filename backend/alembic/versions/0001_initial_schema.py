"""Initial schema — users, movies

Revision ID: 0001
Revises: —
Create Date: 2026-10-19 00:00:00
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

GENRES = (
    "Action", "Comedy", "Drama", "Horror", "Sci-Fi",
    "Romance", "Thriller", "Animation", "Documentary", "Other",
)


def upgrade() -> None:
    # ── users ─────────────────────────────────────────────────────────────────
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String, nullable=False),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── movies ────────────────────────────────────────────────────────────────
    genre_list = ", ".join(f"'{g}'" for g in GENRES)
    op.create_table(
        "movies",
        sa.Column("id", sa.Uuid, primary_key=True),
        sa.Column("owner_id", sa.Uuid,
                  sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("genre", sa.String(20), nullable=False, server_default="Other"),
        sa.Column("description", sa.Text, nullable=False, server_default=""),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("watched", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("watch_date", sa.Date, nullable=True),
        sa.Column("image_url", sa.Text, nullable=True),
        sa.Column("tmdb_id", sa.Integer, nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True),
                  nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="chk_movies_rating_range"),
        sa.CheckConstraint("length(title) BETWEEN 1 AND 150", name="chk_movies_title_len"),
        sa.CheckConstraint(f"genre IN ({genre_list})", name="chk_movies_genre"),
    )
    op.create_index("ix_movies_owner_id", "movies", ["owner_id"])
    op.create_index("ix_movies_owner_created", "movies", ["owner_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_movies_owner_created", table_name="movies")
    op.drop_index("ix_movies_owner_id", table_name="movies")
    op.drop_table("movies")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
