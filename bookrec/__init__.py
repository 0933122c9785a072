"""BookRec: book catalog recommendation service.

This package provides a backend service that answers questions about genre
popularity and borrowing frequency, and recommends books from a static
in-memory catalog.

Modules:
    api: FastAPI application and REST API endpoints
    recommender: Genre tokenization, stores, recommendation and aggregation
    scraper: Book metadata scraping by ISBN
"""

__version__ = "0.1.0"
