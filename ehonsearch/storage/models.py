"""
Database models for ehonsearch.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookModel(Base):
    """SQLAlchemy model for registered picture books."""

    __tablename__ = "books"

    id = Column(String(36), primary_key=True)  # UUID

    title = Column(String(500), nullable=False, index=True)
    author = Column(String(500), nullable=False)

    isbn13 = Column(String(13), index=True)
    publisher = Column(String(200))
    published_date = Column(String(50))
    description = Column(Text)

    small_thumbnail = Column(String(500))
    thumbnail = Column(String(500))

    target_age = Column(Integer)
    page_count = Column(Integer)
    categories = Column(JSON, default=list)

    # Lending-library fields
    management_number = Column(String(50), index=True)
    kana_group = Column(String(4))

    added_at = Column(DateTime, default=_utcnow)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        Index("idx_books_kana_title", "kana_group", "title"),
    )

    def to_dict(self) -> dict:
        """Column values keyed by the Book field names."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
            if column.name not in ("added_at", "updated_at")
        }
