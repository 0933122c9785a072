"""Book metadata scraper for books.com.tw.

Looks a book up by ISBN on the books.com.tw search page and extracts its
title, author and cover image. This is an external collaborator: it shares
no state with the catalog or history stores.

Failures are raised as ``UpstreamFailure`` sub-kinds so callers can tell a
timeout (worth retrying) from a missing element or a failed session.
"""

import logging
import random
import time
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import asdict, dataclass
from typing import Dict, Optional

import requests
from bs4 import BeautifulSoup

from bookrec.config import config
from bookrec.exceptions import (
    InvalidRequestError,
    ScraperLaunchError,
    ScrapeTimeoutError,
    SelectorMissingError,
    UpstreamFailure,
)

# Configure module logger
logger = logging.getLogger(__name__)

SEARCH_URL = "https://search.books.com.tw/search/query/key/{isbn}/cat/all"

TITLE_SELECTOR = "h4 a"
AUTHOR_SELECTOR = "div p.author a"
COVER_SELECTOR = "img.b-lazy"

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/115.0 Safari/537.36"
)


@dataclass
class ScrapedBook:
    """Metadata scraped for one ISBN."""

    title: str
    author: str
    img: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class MetadataScraper:
    """Fetches book metadata with timeouts, retries, and backoff.

    Only the navigation step (the HTTP GET) is retried; a page that loads
    but lacks an expected element fails immediately.
    """

    def __init__(
        self,
        timeout: float = config.SCRAPE_TIMEOUT,
        max_retries: int = config.SCRAPE_MAX_RETRIES,
        base_backoff: float = config.SCRAPE_BACKOFF,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the scraper.

        Args:
            timeout: Per-attempt navigation timeout in seconds
            max_retries: Maximum number of navigation attempts
            base_backoff: Base delay for exponential backoff
            session: Optional pre-configured session (used by tests)
        """
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_backoff = base_backoff
        self.session = session

    def fetch(self, isbn: str, deadline: Optional[float] = None) -> ScrapedBook:
        """
        Scrape title, author and cover for ``isbn``.

        Args:
            isbn: Book ISBN to search for
            deadline: Optional ``time.monotonic()`` instant after which no
                further navigation attempt is started

        Raises:
            InvalidRequestError: If ``isbn`` is empty
            ScrapeTimeoutError: If every navigation attempt timed out or the
                deadline passed
            SelectorMissingError: If the page lacks an expected element
            ScraperLaunchError: If the site could not be reached (connection
                errors) or refused the request with a non-retryable status
        """
        isbn = (isbn or "").strip()
        if not isbn:
            raise InvalidRequestError("isbn is required")

        html = self._navigate(isbn, deadline)
        result = self._extract(isbn, html)

        logger.info(
            "Scraped book metadata",
            extra={"isbn": isbn, "title": result.title},
        )
        return result

    def _get_session(self) -> requests.Session:
        if self.session is None:
            self.session = requests.Session()
            self.session.headers.update({"User-Agent": USER_AGENT})
        return self.session

    def _navigate(self, isbn: str, deadline: Optional[float] = None) -> str:
        session = self._get_session()
        url = SEARCH_URL.format(isbn=isbn)
        last_cause = "no attempt made"

        for attempt in range(self.max_retries):
            attempt_timeout = self.timeout
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.error("Scrape deadline passed before attempt", extra={"isbn": isbn})
                    raise ScrapeTimeoutError(isbn, f"deadline passed after {attempt} attempts")
                attempt_timeout = min(self.timeout, remaining)

            try:
                logger.debug(f"Navigation attempt {attempt + 1}/{self.max_retries}: {url}")
                response = session.get(url, timeout=attempt_timeout)
            except requests.exceptions.Timeout:
                last_cause = f"timed out after {attempt_timeout:g}s"
                logger.warning(f"Timeout on attempt {attempt + 1}", extra={"isbn": isbn})
            except requests.exceptions.ConnectionError as e:
                last_cause = f"connection error: {e}"
                logger.warning(
                    f"Connection error on attempt {attempt + 1}: {e}",
                    extra={"isbn": isbn},
                )
            else:
                if response.status_code == 200:
                    return response.text

                if response.status_code == 429 or response.status_code >= 500:
                    last_cause = f"HTTP {response.status_code}"
                    logger.warning(
                        f"Retryable status {response.status_code} on attempt {attempt + 1}",
                        extra={"isbn": isbn},
                    )
                else:
                    raise ScraperLaunchError(isbn, f"HTTP {response.status_code}")

            if attempt < self.max_retries - 1:
                self._backoff(attempt, deadline)

        logger.error(f"All {self.max_retries} navigation attempts failed", extra={"isbn": isbn})
        if last_cause.startswith("timed out"):
            raise ScrapeTimeoutError(isbn, last_cause)
        raise ScraperLaunchError(isbn, last_cause)

    def _backoff(self, attempt: int, deadline: Optional[float] = None) -> None:
        """Sleep with exponential backoff and jitter, never past ``deadline``."""
        delay = self.base_backoff * (2 ** attempt)
        total_delay = delay + random.uniform(0, delay)
        if deadline is not None:
            total_delay = max(0.0, min(total_delay, deadline - time.monotonic()))
        logger.debug(f"Backing off for {total_delay:.2f} seconds")
        time.sleep(total_delay)

    def _extract(self, isbn: str, html: str) -> ScrapedBook:
        soup = BeautifulSoup(html, "html.parser")

        title_tag = soup.select_one(TITLE_SELECTOR)
        author_tag = soup.select_one(AUTHOR_SELECTOR)
        cover_tag = soup.select_one(COVER_SELECTOR)

        for selector, tag in (
            (TITLE_SELECTOR, title_tag),
            (AUTHOR_SELECTOR, author_tag),
            (COVER_SELECTOR, cover_tag),
        ):
            if tag is None:
                raise SelectorMissingError(isbn, f"selector '{selector}' not found")

        # Lazy-loaded covers keep the real URL in data-src until scripts run
        img = cover_tag.get("src") or cover_tag.get("data-src") or ""

        return ScrapedBook(
            title=(title_tag.get("title") or title_tag.get_text()).strip(),
            author=(author_tag.get("title") or author_tag.get_text()).strip(),
            img=img,
        )

    def close(self) -> None:
        if self.session is not None:
            self.session.close()


class ScrapePool:
    """Runs scrapes on a small fixed pool of worker threads.

    Bounds how many scrapes can hit the site at once and applies a
    request-level timeout on top of the per-attempt one.
    """

    def __init__(
        self,
        scraper_factory=MetadataScraper,
        max_workers: int = config.SCRAPE_MAX_WORKERS,
        timeout: float = config.SCRAPE_REQUEST_TIMEOUT,
    ):
        self.scraper_factory = scraper_factory
        self.timeout = timeout
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="scraper"
        )

    def _run(self, isbn: str, deadline: float) -> ScrapedBook:
        scraper = self.scraper_factory()
        try:
            return scraper.fetch(isbn, deadline=deadline)
        finally:
            scraper.close()

    def fetch(self, isbn: str, timeout: Optional[float] = None) -> ScrapedBook:
        """Scrape ``isbn`` on the pool, waiting at most ``timeout`` seconds."""
        timeout = self.timeout if timeout is None else timeout
        # Workers stop retrying once the caller has given up
        deadline = time.monotonic() + timeout
        future = self._executor.submit(self._run, isbn, deadline)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            raise ScrapeTimeoutError(isbn, f"request timed out after {timeout}s") from None
        except (UpstreamFailure, InvalidRequestError):
            raise
        except Exception as e:
            raise ScraperLaunchError(isbn, f"{type(e).__name__}: {e}") from e

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
