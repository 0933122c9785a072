"""Request dependencies shared by the route modules.

The library is loaded from disk on first use and cached on the application
state, so the server starts even before the datasets are in place.
"""

import logging
import threading

from fastapi import Request

from bookrec.recommender.utils import Library, load_library
from bookrec.scraper.metadata import ScrapePool

# Configure module logger
logger = logging.getLogger(__name__)

_load_lock = threading.Lock()


def get_library(request: Request) -> Library:
    """Return the application's ``Library``, loading it if needed.

    Raises:
        DatasetError: If the datasets cannot be loaded.
    """
    state = request.app.state
    if state.library is not None:
        return state.library

    with _load_lock:
        if state.library is None:
            logger.info("Library not loaded yet, loading datasets")
            state.library = load_library(state.data_dir)
    return state.library


def get_scrape_pool(request: Request) -> ScrapePool:
    return request.app.state.scrape_pool
