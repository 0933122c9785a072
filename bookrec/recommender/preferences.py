"""Per-user viewing history.

The tracker is created once at startup, lives for the whole process and is
never persisted. It is the only mutable structure the engines read.
"""

import logging
import threading
from typing import Dict, Hashable, List, Set

from bookrec.recommender.stores import Book

# Configure module logger
logger = logging.getLogger(__name__)


class PreferenceTracker:
    """Thread-safe map from user id to the books that user has viewed."""

    def __init__(self):
        self._lock = threading.Lock()
        self._history: Dict[Hashable, List[Book]] = {}

    def record_view(self, user_id: Hashable, book: Book) -> None:
        """Append ``book`` to the user's history. Repeats are kept.

        Args:
            user_id: Opaque user identifier.
            book: The book that was viewed.
        """
        with self._lock:
            self._history.setdefault(user_id, []).append(book)

        logger.debug(
            "Recorded book view",
            extra={"user_id": user_id, "book_id": book.id},
        )

    def history_of(self, user_id: Hashable) -> List[Book]:
        """Return the user's viewed books in order, or ``[]`` if unseen."""
        with self._lock:
            return list(self._history.get(user_id, []))

    def viewed_ids(self, user_id: Hashable) -> Set[int]:
        """Return the ids of every book the user has viewed."""
        return {book.id for book in self.history_of(user_id)}

    def __len__(self) -> int:
        with self._lock:
            return len(self._history)
