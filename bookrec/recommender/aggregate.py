"""Frequency rankings over the borrow history."""

import logging
from collections import Counter
from typing import Dict, List, Union

from bookrec.exceptions import InvalidRequestError
from bookrec.recommender.stores import HistoryStore
from bookrec.recommender.tokenizer import iter_tokens

# Configure module logger
logger = logging.getLogger(__name__)

DEFAULT_TOP_GENRES = 3
DEFAULT_TOP_BOOKS = 5


def _check_limit(limit: int) -> None:
    if limit < 0:
        raise InvalidRequestError(
            "limit must be non-negative", details={"limit": limit}
        )


class AggregationEngine:
    """Computes top-N genre and title rankings.

    Ties are broken by the order in which a key was first seen while
    scanning the history, never alphabetically. ``Counter.most_common``
    gives exactly that: it sorts stably over insertion order.
    """

    def __init__(self, history: HistoryStore):
        self.history = history

    def genre_counts(self) -> Counter:
        """Count every genre token occurrence across all borrow records."""
        counts: Counter = Counter()
        for index, record in enumerate(self.history):
            counts.update(iter_tokens(record.genre, owner=f"record {index}"))
        return counts

    def title_counts(self) -> Counter:
        """Count completed borrows per title."""
        return Counter(record.title for record in self.history if record.borrower)

    def top_genres(self, limit: int = DEFAULT_TOP_GENRES) -> List[Dict[str, Union[str, int]]]:
        """Return the most borrowed genres.

        Args:
            limit: Maximum number of entries to return.

        Returns:
            List of ``{"genre": token, "count": n}``, highest count first.

        Example:
            >>> engine.top_genres()
            [{'genre': '科幻', 'count': 12}, {'genre': '冒险', 'count': 9}]
        """
        _check_limit(limit)
        ranking = [
            {"genre": genre, "count": count}
            for genre, count in self.genre_counts().most_common(limit)
        ]
        logger.debug("Top genres computed", extra={"limit": limit, "num_results": len(ranking)})
        return ranking

    def top_books(self, limit: int = DEFAULT_TOP_BOOKS) -> List[Dict[str, Union[str, int]]]:
        """Return the most borrowed titles as ``{"title", "count"}`` entries."""
        _check_limit(limit)
        ranking = [
            {"title": title, "count": count}
            for title, count in self.title_counts().most_common(limit)
        ]
        logger.debug("Top books computed", extra={"limit": limit, "num_results": len(ranking)})
        return ranking
