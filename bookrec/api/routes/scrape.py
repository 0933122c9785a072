"""Metadata scraping endpoint for the BookRec API."""

import logging
from typing import Dict, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from bookrec.api.dependencies import get_scrape_pool
from bookrec.api.metrics import metrics_service
from bookrec.exceptions import InvalidRequestError, UpstreamFailure
from bookrec.scraper.metadata import ScrapePool

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(tags=["scraper"])


class ScrapeRequest(BaseModel):
    isbn: Optional[Union[int, str]] = None


@router.post("/scrape")
def scrape(
    request: ScrapeRequest,
    pool: ScrapePool = Depends(get_scrape_pool),
) -> Dict[str, str]:
    """Scrape title, author and cover image for an ISBN.

    Runs on the bounded scrape pool. Failures are logged with their cause
    and answered with a generic 500.

    Raises:
        InvalidRequestError: If ``isbn`` is missing (400).
        UpstreamFailure: If the scrape fails (500).
    """
    if request.isbn is None or not str(request.isbn).strip():
        raise InvalidRequestError("isbn is required")

    isbn = str(request.isbn).strip()
    try:
        with metrics_service.track("scrape"):
            result = pool.fetch(isbn)
    except UpstreamFailure as e:
        logger.error("Scrape failed", extra={**e.details, "cause": e.cause})
        raise

    return result.to_dict()
