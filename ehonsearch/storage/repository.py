"""
Book Repository for ehonsearch

Persistence of registered picture books using SQLAlchemy:
- SQLite by default, any SQLAlchemy URL accepted
- Lookup by id and by management number
- Listing in kana group / title order

Every SQLAlchemy failure surfaces as RepositoryError so callers only deal
with one error type.
"""

from typing import Optional, Protocol, runtime_checkable

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ehonsearch.domain.models import Book
from ehonsearch.exceptions import RepositoryError
from ehonsearch.storage.models import Base, BookModel


@runtime_checkable
class Repository(Protocol):
    """Persistence capability required by the orchestrator and pipeline."""

    def save(self, book: Book) -> Book:
        ...

    def find_by_management_number(self, management_number: str) -> Optional[Book]:
        ...


def _to_book(model: BookModel) -> Book:
    return Book.from_dict(model.to_dict())


class BookRepository:
    """
    Repository for registered books.

    Usage:
        repo = BookRepository("sqlite:///./ehonsearch.db")
        repo.save(book)
        repo.find_by_management_number("あ31")
    """

    def __init__(self, database_url: Optional[str] = None, echo: bool = False):
        """
        Initialize repository.

        Args:
            database_url: SQLAlchemy database URL, in-memory SQLite if omitted
            echo: Log emitted SQL
        """
        self.database_url = database_url or "sqlite:///:memory:"

        engine_kwargs = {"echo": echo}
        if self.database_url in ("sqlite://", "sqlite:///:memory:"):
            # One shared connection, otherwise each session sees an empty database
            engine_kwargs.update(
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )

        try:
            self.engine = create_engine(self.database_url, **engine_kwargs)
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise RepositoryError("データベースの初期化に失敗しました", detail=str(e)) from e

        self.SessionLocal = sessionmaker(bind=self.engine, expire_on_commit=False)

        logger.info(f"BookRepository initialized: {self.engine.url.render_as_string(hide_password=True)}")

    def get_session(self) -> Session:
        """Get database session."""
        return self.SessionLocal()

    def save(self, book: Book) -> Book:
        """
        Insert or update a book by id.

        Args:
            book: Book to persist

        Returns:
            The stored book

        Raises:
            RepositoryError: on any database failure
        """
        data = book.to_dict()

        try:
            with self.get_session() as session:
                model = session.get(BookModel, book.id)
                if model is None:
                    model = BookModel(id=book.id)
                    session.add(model)

                for key, value in data.items():
                    if key != "id":
                        setattr(model, key, value)

                session.commit()
                session.refresh(model)
                stored = _to_book(model)
        except SQLAlchemyError as e:
            logger.warning(f"Failed to save book {book.id}: {e}")
            raise RepositoryError("絵本の保存に失敗しました", detail=str(e)) from e

        logger.debug(f"Saved book {stored.id}: {stored.title}")
        return stored

    def get(self, book_id: str) -> Optional[Book]:
        try:
            with self.get_session() as session:
                model = session.get(BookModel, book_id)
                return _to_book(model) if model else None
        except SQLAlchemyError as e:
            raise RepositoryError("絵本の取得に失敗しました", detail=str(e)) from e

    def find_by_management_number(self, management_number: str) -> Optional[Book]:
        """
        Find a book by its lending-library management number.

        Args:
            management_number: e.g. "あ31"

        Returns:
            Book or None
        """
        try:
            with self.get_session() as session:
                model = session.query(BookModel).filter(
                    BookModel.management_number == management_number,
                ).first()
                return _to_book(model) if model else None
        except SQLAlchemyError as e:
            raise RepositoryError("絵本の検索に失敗しました", detail=str(e)) from e

    def list_books(self, limit: int = 100, offset: int = 0) -> list[Book]:
        """List books ordered by kana group, then title."""
        try:
            with self.get_session() as session:
                models = (
                    session.query(BookModel)
                    .order_by(BookModel.kana_group.asc(), BookModel.title.asc())
                    .offset(offset)
                    .limit(limit)
                    .all()
                )
                return [_to_book(m) for m in models]
        except SQLAlchemyError as e:
            raise RepositoryError("絵本一覧の取得に失敗しました", detail=str(e)) from e

    def count(self) -> int:
        try:
            with self.get_session() as session:
                return session.query(BookModel).count()
        except SQLAlchemyError as e:
            raise RepositoryError("絵本数の取得に失敗しました", detail=str(e)) from e
