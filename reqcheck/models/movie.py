"""
ReqCheck — Movie SQLAlchemy Model
=================================

What:  ORM model representing the `movies` table.
Who:   Used by MovieStore for create/list/get.

Table Design:
    - Integer primary key: ids show up in URLs (/movies/3) while debugging
    - title: may be empty; the lesson form posts {"title": "", "year": 2021}
    - year: optional release year
    - created_at: UTC with timezone
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from reqcheck.database import Base


class Movie(Base):
    """A movie row. Rows are only ever inserted."""

    __tablename__ = "movies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        default="",
        comment="Movie title as submitted by the frontend form",
    )

    year: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        default=None,
        comment="Release year",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When this movie was created (UTC)",
    )

    __table_args__ = (
        Index("idx_movies_created_at", created_at),
    )

    def __repr__(self) -> str:
        return f"<Movie(id={self.id}, title='{self.title}', year={self.year})>"
