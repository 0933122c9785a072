"""Content-based book recommendations.

Two recommenders live here and they match genres differently:

- ``recommend_by_tokenized_genre`` splits every raw genre string into
  tokens and matches on token-set intersection.
- ``recommend_multi_criteria`` matches genres by verbatim membership in the
  raw ``genre`` list, so ``"Sci-Fi"`` does not match a book tagged
  ``["Sci-Fi,Adventure"]``.

Both behaviours are what clients observe today and are kept distinct.
"""

import logging
from typing import Hashable, Iterable, List, Optional

from bookrec.exceptions import InvalidRequestError
from bookrec.recommender.preferences import PreferenceTracker
from bookrec.recommender.stores import Book, CatalogStore
from bookrec.recommender.tokenizer import tokenize

# Configure module logger
logger = logging.getLogger(__name__)

# Cap on "you may also like" results
MAX_SIMILAR_RESULTS = 10


class RecommendationEngine:
    """Recommends books from the catalog.

    Args:
        catalog: The immutable book catalog.
        preferences: Per-user viewing history. A fresh, empty tracker is
            used when omitted.
    """

    def __init__(
        self,
        catalog: CatalogStore,
        preferences: Optional[PreferenceTracker] = None,
    ):
        self.catalog = catalog
        self.preferences = preferences if preferences is not None else PreferenceTracker()

    def recommend_by_tokenized_genre(
        self,
        requested_genres: Optional[Iterable[str]],
        user_id: Optional[Hashable] = None,
    ) -> List[Book]:
        """Return every book sharing a genre token with ``requested_genres``.

        A book also qualifies when the user has viewed it before. Books are
        returned in catalog order, uncapped.

        Args:
            requested_genres: Genre tokens to look for. Compared
                case-sensitively and as given.
            user_id: Optional user whose viewing history widens the match.

        Returns:
            Matching books in catalog order.

        Raises:
            InvalidRequestError: If no genre is requested.
        """
        wanted = set(requested_genres or ())
        if not wanted:
            raise InvalidRequestError("Genres are required")

        viewed = self.preferences.viewed_ids(user_id) if user_id is not None else set()

        matches = [
            book
            for book in self.catalog
            if book.id in viewed
            or not wanted.isdisjoint(tokenize(book.genre, owner=f"book {book.id}"))
        ]

        logger.info(
            "Genre recommendations generated",
            extra={
                "requested_genres": sorted(wanted),
                "user_id": user_id,
                "num_recommendations": len(matches),
            },
        )
        return matches

    recommend_by_genres = recommend_by_tokenized_genre

    def recommend_by_verbatim_genre_membership(self, genres: Iterable[str]) -> List[Book]:
        """Return books whose raw genre list contains each requested string.

        Results for each requested genre are concatenated, so a book listed
        under two requested genres appears twice.
        """
        matches: List[Book] = []
        for genre in genres:
            matches.extend(
                book
                for book in self.catalog
                if isinstance(book.genre, list) and genre in book.genre
            )
        return matches

    def recommend_by_series(self, series: Optional[str]) -> List[Book]:
        if not series:
            return []
        return [book for book in self.catalog if book.series == series]

    def recommend_by_author(self, author: str) -> List[Book]:
        return [book for book in self.catalog if book.author == author]

    def recommend_multi_criteria(
        self,
        author: Optional[str],
        genres: Optional[List[str]],
        exclude_title: Optional[str] = None,
        series: Optional[str] = None,
    ) -> List[Book]:
        """Return books similar to a given one.

        Candidates are gathered by series, then author, then genre. The
        excluded title is dropped, duplicates are removed by title keeping
        the first occurrence, and at most ``MAX_SIMILAR_RESULTS`` books are
        returned. Series matches therefore win over author matches, which
        win over genre matches.

        Args:
            author: Author to match exactly. Required.
            genres: Raw genre strings to match verbatim. Required, may be
                empty.
            exclude_title: Title of the book being viewed.
            series: Optional series to match exactly.

        Raises:
            InvalidRequestError: If ``author`` or ``genres`` is missing.
        """
        if author is None:
            raise InvalidRequestError("Author is required")
        if genres is None:
            raise InvalidRequestError("Genre is required")

        candidates = (
            self.recommend_by_series(series)
            + self.recommend_by_author(author)
            + self.recommend_by_verbatim_genre_membership(genres)
        )

        seen_titles = set()
        unique: List[Book] = []
        for book in candidates:
            if book.title == exclude_title or book.title in seen_titles:
                continue
            seen_titles.add(book.title)
            unique.append(book)

        recommendations = unique[:MAX_SIMILAR_RESULTS]

        logger.info(
            "Similar-book recommendations generated",
            extra={
                "series": series,
                "author": author,
                "num_candidates": len(candidates),
                "num_recommendations": len(recommendations),
            },
        )
        return recommendations
