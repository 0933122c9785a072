"""Catalog and recommendation endpoints for the BookRec API.

These are the paths the existing front end calls, so their names and
response shapes are kept as they are.
"""

import logging
from typing import Any, List, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from bookrec.api.dependencies import get_library
from bookrec.api.metrics import metrics_service
from bookrec.recommender.stores import Book
from bookrec.recommender.utils import Library

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["books"])


class RecommendRequest(BaseModel):
    """Body of ``POST /recommend``.

    Attributes:
        genres: Genre tokens the user is interested in.
        userId: Optional user whose viewing history widens the match.
    """

    genres: Optional[List[str]] = Field(default=None, description="Requested genre tokens")
    userId: Optional[Union[int, str]] = Field(default=None, description="Optional user id")


class SimilarBooksRequest(BaseModel):
    """Body of ``POST /maybeUlike``, describing the book being viewed."""

    series: Optional[str] = None
    author: Optional[str] = None
    genre: Optional[List[str]] = None
    title: Optional[str] = None


def _user_key(user_id: Optional[Union[int, str]]) -> Optional[str]:
    # Query strings and JSON bodies must land on the same history entry
    return None if user_id is None else str(user_id)


@router.get("/genres", response_model=List[str])
def list_genres(library: Library = Depends(get_library)) -> List[str]:
    """Return every distinct genre token in the catalog."""
    with metrics_service.track("distinct_genres"):
        return library.catalog.distinct_genres()


@router.get(
    "/getBookDetails/{book_id}",
    response_model=Book,
    response_model_exclude_unset=True,
)
def get_book_details(
    book_id: int,
    userId: Optional[str] = None,
    library: Library = Depends(get_library),
) -> Book:
    """Return one book by id.

    When ``userId`` is given the view is recorded in that user's history,
    which later widens ``POST /recommend`` results for the same user.

    Raises:
        BookNotFoundError: If the id is unknown (404).
    """
    book = library.catalog.by_id(book_id)
    if userId is not None:
        library.preferences.record_view(_user_key(userId), book)
    return book


@router.post("/recommend", response_model=List[Book], response_model_exclude_unset=True)
def recommend(
    request: RecommendRequest,
    library: Library = Depends(get_library),
) -> List[Book]:
    """Return books sharing at least one genre token with the request.

    Raises:
        InvalidRequestError: If ``genres`` is missing or empty (400).
    """
    with metrics_service.track("recommend_by_genres"):
        return library.recommender.recommend_by_genres(
            request.genres, user_id=_user_key(request.userId)
        )


@router.post("/maybeUlike", response_model=List[Book], response_model_exclude_unset=True)
def maybe_you_like(
    request: SimilarBooksRequest,
    library: Library = Depends(get_library),
) -> List[Book]:
    """Return up to ten books similar to the one described in the body.

    Raises:
        InvalidRequestError: If ``author`` or ``genre`` is missing (400).
    """
    with metrics_service.track("recommend_multi_criteria"):
        return library.recommender.recommend_multi_criteria(
            author=request.author,
            genres=request.genre,
            exclude_title=request.title,
            series=request.series,
        )


@router.get("/announcement")
def get_announcement(library: Library = Depends(get_library)) -> Any:
    """Return the announcement payload exactly as loaded."""
    return library.announcement
