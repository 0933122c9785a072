"""Borrowing statistics endpoints for the BookRec API."""

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bookrec.api.dependencies import get_library
from bookrec.api.metrics import metrics_service
from bookrec.recommender.utils import Library

router = APIRouter(tags=["statistics"])


class GenreCount(BaseModel):
    genre: str
    count: int


class BookCount(BaseModel):
    title: str
    count: int


@router.get("/top-three-genres", response_model=List[GenreCount])
def top_three_genres(library: Library = Depends(get_library)) -> List[dict]:
    """Return the three most borrowed genres."""
    with metrics_service.track("top_genres"):
        return library.aggregator.top_genres(3)


@router.get("/top-books", response_model=List[BookCount])
def top_books(library: Library = Depends(get_library)) -> List[dict]:
    """Return the five most borrowed titles."""
    with metrics_service.track("top_books"):
        return library.aggregator.top_books(5)
