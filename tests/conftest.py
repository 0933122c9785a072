"""Shared fixtures: a small catalog and borrow history."""

import json

import pytest

from bookrec.recommender.utils import Library

SAMPLE_BOOKS = [
    {
        "id": 1,
        "title": "X",
        "author": "Au",
        "series": "S",
        "genre": ["Sci-Fi,Adventure"],
        "coverUrl": "https://example.com/1.jpg",
    },
    {
        "id": 2,
        "title": "三体",
        "author": "刘慈欣",
        "series": "地球往事",
        "genre": ["科幻，悬疑"],
        "coverUrl": "https://example.com/2.jpg",
        "publisher": "重庆出版社",
    },
    {
        "id": 3,
        "title": "球状闪电",
        "author": "刘慈欣",
        "genre": ["科幻"],
        "coverUrl": "https://example.com/3.jpg",
    },
    {
        "id": 4,
        "title": "Pride and Prejudice",
        "author": "Jane Austen",
        "genre": ["Romance", "Classic"],
        "coverUrl": "https://example.com/4.jpg",
    },
    {
        "id": 5,
        "title": "Emma",
        "author": "Jane Austen",
        "genre": ["Romance"],
        "coverUrl": "https://example.com/5.jpg",
    },
    {
        "id": 6,
        "title": "Broken Genre",
        "author": "Nobody",
        "genre": "Romance",
    },
    {
        "id": 7,
        "title": "No Genre",
        "author": "Nobody",
    },
]

SAMPLE_RECORDS = [
    {"title": "三体", "genre": ["科幻，悬疑"], "borrower": "u1"},
    {"title": "Emma", "genre": ["Romance"], "borrower": "u2"},
    {"title": "三体", "genre": ["科幻，悬疑"], "borrower": "u3"},
    {"title": "球状闪电", "genre": ["科幻"]},
    {"title": "Emma", "genre": ["Romance"], "borrower": "u1"},
    {"title": "Pride and Prejudice", "genre": ["Romance", "Classic"], "borrower": "u4"},
    {"title": "X", "genre": None, "borrower": "u5"},
]

SAMPLE_ANNOUNCEMENT = {"title": "Notice", "items": [{"content": "Closed on Monday"}]}


@pytest.fixture
def sample_books():
    return [dict(book) for book in SAMPLE_BOOKS]


@pytest.fixture
def sample_records():
    return [dict(record) for record in SAMPLE_RECORDS]


@pytest.fixture
def library(sample_books, sample_records) -> Library:
    """A fully wired library over the sample data."""
    return Library.from_records(sample_books, sample_records, SAMPLE_ANNOUNCEMENT)


@pytest.fixture
def data_dir(tmp_path, sample_books, sample_records):
    """A dataset directory holding the sample data as JSON files."""
    for name, payload in (
        ("books.json", sample_books),
        ("record.json", sample_records),
        ("announcement.json", SAMPLE_ANNOUNCEMENT),
    ):
        (tmp_path / name).write_text(json.dumps(payload, ensure_ascii=False), encoding="utf-8")
    return tmp_path
