"""Immutable in-memory stores for the catalog and the borrow history.

Both stores are built once at startup and never mutated afterwards, so
concurrent requests can read them without locking.
"""

import logging
from typing import Any, Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from bookrec.exceptions import BookNotFoundError, DatasetError
from bookrec.recommender.tokenizer import iter_tokens

# Configure module logger
logger = logging.getLogger(__name__)


def _text_field(value: Any, field_name: str) -> Any:
    """Coerce scalar titles and names such as ``1984`` to strings."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        logger.warning(
            f"Coerced numeric {field_name} to string",
            extra={"field": field_name, "value": value},
        )
        return str(value)
    return value


class Book(BaseModel):
    """A single catalog entry.

    Only the fields the engines look at are declared. Any other descriptive
    field in the dataset (publisher, description, ...) is kept as-is and
    returned to clients unchanged.

    ``genre`` is left untyped on purpose: some entries in the wild carry a
    plain string or nothing at all, and those must load without failing.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: int
    title: str = ""
    author: str = ""
    series: Optional[str] = None
    genre: Any = None
    cover_url: Optional[str] = Field(default=None, alias="coverUrl")

    @field_validator("title", "author", "series", mode="before")
    @classmethod
    def coerce_text(cls, value: Any, info: ValidationInfo) -> Any:
        return _text_field(value, info.field_name)


class BorrowRecord(BaseModel):
    """A historical borrow event."""

    model_config = ConfigDict(extra="allow")

    title: str = ""
    genre: Any = None
    borrower: Optional[Any] = None

    @field_validator("title", mode="before")
    @classmethod
    def coerce_title(cls, value: Any, info: ValidationInfo) -> Any:
        return _text_field(value, info.field_name)


class CatalogStore:
    """All books, indexed by id, in load order."""

    def __init__(self, books: List[Book]):
        self._books: List[Book] = list(books)
        self._by_id: Dict[int, Book] = {}

        for book in self._books:
            if book.id in self._by_id:
                raise DatasetError(
                    "books", f"duplicate book id {book.id}"
                )
            self._by_id[book.id] = book

        logger.info("Catalog loaded", extra={"num_books": len(self._books)})

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> "CatalogStore":
        """Build a store from raw JSON objects."""
        return cls([Book.model_validate(record) for record in records])

    def by_id(self, book_id: int) -> Book:
        """Return the stored book with ``book_id``.

        Raises:
            BookNotFoundError: If no book has that id.
        """
        try:
            return self._by_id[book_id]
        except KeyError:
            raise BookNotFoundError(book_id) from None

    def all(self) -> List[Book]:
        """Return every book in load order."""
        return list(self._books)

    def distinct_genres(self) -> List[str]:
        """Return every distinct genre token, in first-seen order."""
        seen: Dict[str, None] = {}
        for book in self._books:
            for token in iter_tokens(book.genre, owner=f"book {book.id}"):
                seen.setdefault(token, None)
        return list(seen)

    def __iter__(self) -> Iterator[Book]:
        return iter(self._books)

    def __len__(self) -> int:
        return len(self._books)


class HistoryStore:
    """All borrow records, in load order."""

    def __init__(self, records: List[BorrowRecord]):
        self._records: List[BorrowRecord] = list(records)
        logger.info("Borrow history loaded", extra={"num_records": len(self._records)})

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> "HistoryStore":
        """Build a store from raw JSON objects."""
        return cls([BorrowRecord.model_validate(record) for record in records])

    def all(self) -> List[BorrowRecord]:
        return list(self._records)

    def __iter__(self) -> Iterator[BorrowRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)
