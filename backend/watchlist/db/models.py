"""
SQLAlchemy ORM models.

Two tables: *users* (auth accounts) and *movies* (one row per watchlist
entry, always scoped to its owner). Column names and constraints mirror the
Alembic migration in alembic/versions.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, relationship


# ── Base ──────────────────────────────────────────────────────────────────────

class Base(DeclarativeBase):
    pass


# ── Enums ─────────────────────────────────────────────────────────────────────

class GenreEnum(str, PyEnum):
    ACTION = "Action"
    COMEDY = "Comedy"
    DRAMA = "Drama"
    HORROR = "Horror"
    SCI_FI = "Sci-Fi"
    ROMANCE = "Romance"
    THRILLER = "Thriller"
    ANIMATION = "Animation"
    DOCUMENTARY = "Documentary"
    OTHER = "Other"


GENRE_LABELS: tuple[str, ...] = tuple(g.value for g in GenreEnum)


# ── Timestamp helper ──────────────────────────────────────────────────────────

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ── Models ────────────────────────────────────────────────────────────────────

class User(Base):
    """
    Account holder. E-mail is stored lower-cased and is the login identifier.
    """
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    movies = relationship(
        "Movie",
        back_populates="owner",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )


class Movie(Base):
    """
    A watchlist entry.

    owner_id is set on insert and never changed; every read path filters on it.
    image_url stays NULL until a poster upload succeeds.
    """
    __tablename__ = "movies"
    __table_args__ = (
        CheckConstraint("rating BETWEEN 1 AND 5", name="chk_movies_rating_range"),
        CheckConstraint("length(title) BETWEEN 1 AND 150", name="chk_movies_title_len"),
        CheckConstraint(
            "genre IN (" + ", ".join(f"'{g.value}'" for g in GenreEnum) + ")",
            name="chk_movies_genre",
        ),
        Index("ix_movies_owner_created", "owner_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    owner_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title = Column(String(150), nullable=False)
    genre = Column(String(20), nullable=False, default=GenreEnum.OTHER.value)
    description = Column(Text, nullable=False, default="")
    rating = Column(Integer, nullable=False)
    watched = Column(Boolean, nullable=False, default=False)
    watch_date = Column(Date, nullable=True)
    image_url = Column(Text, nullable=True)
    tmdb_id = Column(Integer, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )

    owner = relationship("User", back_populates="movies")
