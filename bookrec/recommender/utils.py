"""Utility functions for the recommendation engines.

This module provides helpers for loading the JSON datasets and wiring the
stores and engines together into a single ``Library`` container.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from bookrec.config import config
from bookrec.exceptions import DatasetError
from bookrec.recommender.aggregate import AggregationEngine
from bookrec.recommender.engine import RecommendationEngine
from bookrec.recommender.preferences import PreferenceTracker
from bookrec.recommender.stores import CatalogStore, HistoryStore

# Configure module logger
logger = logging.getLogger(__name__)


@dataclass
class Library:
    """Everything a request needs, built once at startup.

    Attributes:
        catalog: Immutable book catalog.
        history: Immutable borrow history.
        announcement: Opaque announcement payload, served verbatim.
        preferences: Per-user viewing history, the only mutable part.
    """

    catalog: CatalogStore
    history: HistoryStore
    announcement: Any = None
    preferences: PreferenceTracker = field(default_factory=PreferenceTracker)
    loaded_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        self.recommender = RecommendationEngine(self.catalog, self.preferences)
        self.aggregator = AggregationEngine(self.history)

    @classmethod
    def from_records(
        cls,
        books: List[Dict[str, Any]],
        records: List[Dict[str, Any]],
        announcement: Any = None,
    ) -> "Library":
        """Build a library from raw JSON objects."""
        return cls(
            catalog=CatalogStore.from_records(books),
            history=HistoryStore.from_records(records),
            announcement=announcement,
        )


def check_datasets_exist(data_dir: str) -> bool:
    """Check whether every dataset file exists in ``data_dir``."""
    data_path = Path(data_dir)
    filenames = (
        config.BOOKS_FILENAME,
        config.RECORDS_FILENAME,
        config.ANNOUNCEMENT_FILENAME,
    )
    return all((data_path / name).exists() for name in filenames)


def load_json(path: Path) -> Any:
    """Read a UTF-8 JSON file.

    Raises:
        DatasetError: If the file is missing or not valid JSON.
    """
    if not path.exists():
        raise DatasetError(str(path), "file not found", status_code=503)

    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise DatasetError(str(path), f"invalid JSON: {e}") from e


def _load_list(path: Path) -> List[Dict[str, Any]]:
    data = load_json(path)
    if not isinstance(data, list):
        raise DatasetError(str(path), f"expected a JSON array, got {type(data).__name__}")
    return data


def load_library(data_dir: Optional[str] = None) -> Library:
    """Load the three datasets from ``data_dir`` into a ``Library``.

    Args:
        data_dir: Directory holding ``books.json``, ``record.json`` and
            ``announcement.json``. Defaults to ``BOOKREC_DATA_DIR``.

    Returns:
        A fully wired ``Library``.

    Raises:
        DatasetError: If the directory or a file is missing, or a file is
            malformed.
    """
    data_path = Path(data_dir or config.DATA_DIR)
    if not data_path.is_dir():
        raise DatasetError(str(data_path), "data directory not found", status_code=503)

    logger.info(f"Loading datasets from {data_path}")

    books = _load_list(data_path / config.BOOKS_FILENAME)
    records = _load_list(data_path / config.RECORDS_FILENAME)
    announcement = load_json(data_path / config.ANNOUNCEMENT_FILENAME)

    try:
        library = Library.from_records(books, records, announcement)
    except ValueError as e:
        # pydantic.ValidationError is a ValueError
        raise DatasetError(str(data_path), str(e)) from e

    logger.info(
        "Datasets loaded",
        extra={
            "data_dir": str(data_path),
            "num_books": len(library.catalog),
            "num_records": len(library.history),
        },
    )
    return library
