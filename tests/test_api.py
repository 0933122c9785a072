"""Tests for the FastAPI application endpoints.

This module contains integration tests for the BookRec API endpoints,
run against the shared sample library.
"""

import pytest
from fastapi.testclient import TestClient

from bookrec.api.main import create_app
from bookrec.api.metrics import metrics_service


@pytest.fixture
def client(library):
    """Test client over an app serving the sample library."""
    return TestClient(create_app(library=library))


def test_ping_endpoint(client):
    """Test that the /ping endpoint returns correct status and JSON."""
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_status_endpoint(client):
    """Test that the /status endpoint reports the loaded datasets."""
    response = client.get("/status")

    assert response.status_code == 200
    data = response.json()

    assert data["datasets_loaded"] is True
    assert data["num_books"] == 7
    assert data["num_records"] == 7
    assert isinstance(data["timestamp_last_loaded"], str)


def test_top_three_genres(client):
    response = client.get("/top-three-genres")

    assert response.status_code == 200
    assert response.json() == [
        {"genre": "科幻", "count": 3},
        {"genre": "Romance", "count": 3},
        {"genre": "悬疑", "count": 2},
    ]


def test_top_books(client):
    response = client.get("/top-books")

    assert response.status_code == 200
    data = response.json()
    assert len(data) <= 5
    assert data[0] == {"title": "三体", "count": 2}


def test_genres_endpoint(client):
    response = client.get("/genres")

    assert response.status_code == 200
    data = response.json()
    assert data == ["Sci-Fi", "Adventure", "科幻", "悬疑", "Romance", "Classic"]
    assert len(data) == len(set(data))


def test_get_book_details(client, sample_books):
    """The book comes back with its original field names and extra fields."""
    response = client.get("/getBookDetails/2")

    assert response.status_code == 200
    assert response.json() == sample_books[1]


def test_get_book_details_unknown_id(client):
    response = client.get("/getBookDetails/999")

    assert response.status_code == 404
    assert response.json()["error"] == "Book not found"


def test_recommend_endpoint(client):
    response = client.post("/recommend", json={"genres": ["Sci-Fi"]})

    assert response.status_code == 200
    data = response.json()
    assert [book["id"] for book in data] == [1]
    assert data[0]["coverUrl"] == "https://example.com/1.jpg"


def test_recommend_empty_genres_is_bad_request(client):
    """An empty genre list is a client error, never an empty 200."""
    response = client.post("/recommend", json={"genres": []})

    assert response.status_code == 400
    assert response.json()["error"] == "Genres are required"


def test_recommend_missing_genres_is_bad_request(client):
    response = client.post("/recommend", json={})

    assert response.status_code == 400


def test_viewed_books_widen_recommendations(client):
    """Viewing a book with a userId adds it to that user's recommendations."""
    assert client.get("/getBookDetails/7", params={"userId": "42"}).status_code == 200

    response = client.post("/recommend", json={"genres": ["Sci-Fi"], "userId": 42})
    assert [book["id"] for book in response.json()] == [1, 7]

    response = client.post("/recommend", json={"genres": ["Sci-Fi"]})
    assert [book["id"] for book in response.json()] == [1]


def test_maybe_you_like(client):
    response = client.post(
        "/maybeUlike",
        json={"series": "S", "author": "Other", "genre": ["Romance"], "title": "Y"},
    )

    assert response.status_code == 200
    assert [book["id"] for book in response.json()] == [1, 4, 5]


def test_maybe_you_like_without_series_or_title(client):
    response = client.post(
        "/maybeUlike",
        json={"author": "刘慈欣", "genre": ["科幻"]},
    )

    assert response.status_code == 200
    assert [book["title"] for book in response.json()] == ["三体", "球状闪电"]


@pytest.mark.parametrize(
    "payload",
    [
        {"genre": ["Romance"], "title": "Y"},
        {"author": "Jane Austen", "title": "Y"},
        {"author": "Jane Austen", "genre": "Romance"},
    ],
)
def test_maybe_you_like_missing_fields(client, payload):
    response = client.post("/maybeUlike", json=payload)

    assert response.status_code == 400
    assert "error" in response.json()


def test_announcement_passthrough(client):
    response = client.get("/announcement")

    assert response.status_code == 200
    assert response.json() == {"title": "Notice", "items": [{"content": "Closed on Monday"}]}


def test_metrics_endpoint_counts_calls(client):
    metrics_service.reset()
    client.get("/top-books")
    client.get("/top-books")
    client.post("/recommend", json={"genres": ["Romance"]})

    response = client.get("/metrics")

    assert response.status_code == 200
    data = response.json()
    assert data["total_calls"] == 3
    assert data["operations"]["top_books"]["count"] == 2
    assert data["operations"]["recommend_by_genres"]["count"] == 1


def test_request_id_header(client):
    response = client.get("/ping")
    assert "X-Request-ID" in response.headers
