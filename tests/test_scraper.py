"""Tests for the metadata scraper and its worker pool."""

import threading
import time
from unittest.mock import Mock

import pytest
import requests

from bookrec.config import config
from bookrec.exceptions import (
    InvalidRequestError,
    ScraperLaunchError,
    ScrapeTimeoutError,
    SelectorMissingError,
)
from bookrec.scraper.metadata import (
    SEARCH_URL,
    USER_AGENT,
    MetadataScraper,
    ScrapedBook,
    ScrapePool,
)

BOOK_PAGE = """
<html><body><div class="table-td">
  <h4><a title=" Dune " href="/item/1">Dune</a></h4>
  <p class="author"><a title="Frank Herbert" href="/a/1">Frank Herbert</a></p>
  <img class="b-lazy" src="https://im.example.com/dune.jpg" data-src="https://im.example.com/lazy.jpg">
</div></body></html>
"""


def _response(status_code=200, text=BOOK_PAGE):
    return Mock(status_code=status_code, text=text)


def _scraper(session, max_retries=3):
    return MetadataScraper(session=session, base_backoff=0, max_retries=max_retries, timeout=1)


def test_fetch_extracts_metadata():
    session = Mock()
    session.get.return_value = _response()

    result = _scraper(session).fetch("9780441013593")

    assert result == ScrapedBook(
        title="Dune",
        author="Frank Herbert",
        img="https://im.example.com/dune.jpg",
    )
    session.get.assert_called_once_with(SEARCH_URL.format(isbn="9780441013593"), timeout=1)


def test_fetch_falls_back_to_lazy_image_source():
    session = Mock()
    session.get.return_value = _response(
        text=BOOK_PAGE.replace('src="https://im.example.com/dune.jpg" ', "")
    )

    assert _scraper(session).fetch("1").img == "https://im.example.com/lazy.jpg"


def test_fetch_requires_isbn():
    with pytest.raises(InvalidRequestError):
        _scraper(Mock()).fetch("")


def test_timeouts_are_retried_then_reported():
    session = Mock()
    session.get.side_effect = requests.exceptions.Timeout()

    with pytest.raises(ScrapeTimeoutError) as exc_info:
        _scraper(session, max_retries=3).fetch("1")

    assert session.get.call_count == 3
    assert exc_info.value.details["retryable"] is True


def test_server_errors_are_retried():
    session = Mock()
    session.get.side_effect = [_response(status_code=503), _response()]

    assert _scraper(session).fetch("1").title == "Dune"
    assert session.get.call_count == 2


def test_connection_errors_report_launch_failure():
    session = Mock()
    session.get.side_effect = requests.exceptions.ConnectionError("refused")

    with pytest.raises(ScraperLaunchError):
        _scraper(session, max_retries=2).fetch("1")

    assert session.get.call_count == 2


def test_client_errors_are_not_retried():
    session = Mock()
    session.get.return_value = _response(status_code=403)

    with pytest.raises(ScraperLaunchError):
        _scraper(session).fetch("1")

    assert session.get.call_count == 1


@pytest.mark.parametrize("missing", ["<h4>", '<p class="author">', 'class="b-lazy"'])
def test_missing_element_is_not_retried(missing):
    session = Mock()
    page = BOOK_PAGE.replace(missing, "<span>" if missing.startswith("<") else 'class="other"')
    session.get.return_value = _response(text=page)

    with pytest.raises(SelectorMissingError):
        _scraper(session).fetch("1")

    assert session.get.call_count == 1


def test_pool_returns_result_and_closes_scraper():
    scraper = Mock()
    scraper.fetch.return_value = ScrapedBook(title="T", author="A", img="I")
    pool = ScrapePool(scraper_factory=lambda: scraper, max_workers=1, timeout=5)

    try:
        assert pool.fetch("1") == ScrapedBook(title="T", author="A", img="I")
    finally:
        pool.shutdown()

    scraper.close.assert_called_once()


def test_pool_applies_request_timeout():
    release = threading.Event()

    class SlowScraper:
        def fetch(self, isbn, deadline=None):
            release.wait(5)
            return ScrapedBook(title="late", author="", img="")

        def close(self):
            pass

    pool = ScrapePool(scraper_factory=SlowScraper, max_workers=1, timeout=5)
    try:
        with pytest.raises(ScrapeTimeoutError):
            pool.fetch("1", timeout=0.05)
    finally:
        release.set()
        pool.shutdown()


def test_pool_wraps_unexpected_errors():
    scraper = Mock()
    scraper.fetch.side_effect = RuntimeError("browser crashed")
    pool = ScrapePool(scraper_factory=lambda: scraper, max_workers=1, timeout=5)

    try:
        with pytest.raises(ScraperLaunchError) as exc_info:
            pool.fetch("1")
    finally:
        pool.shutdown()

    assert "browser crashed" in exc_info.value.cause


def test_pool_deadline_leaves_room_for_retry():
    session = Mock()
    session.get.side_effect = [requests.exceptions.Timeout(), _response()]
    pool = ScrapePool(
        scraper_factory=lambda: MetadataScraper(
            session=session, timeout=0.3, max_retries=3, base_backoff=0.01
        ),
        max_workers=1,
        timeout=2,
    )

    try:
        result = pool.fetch("9787536692930")
    finally:
        pool.shutdown()

    assert result.title == "Dune"
    assert session.get.call_count == 2
    assert session.get.call_args.kwargs["timeout"] <= 0.3


def test_passed_deadline_stops_retrying():
    session = Mock()
    session.get.side_effect = requests.exceptions.Timeout()
    scraper = MetadataScraper(session=session, timeout=5, max_retries=5, base_backoff=0)

    with pytest.raises(ScrapeTimeoutError):
        scraper.fetch("123", deadline=time.monotonic() - 1)

    session.get.assert_not_called()


def test_default_request_timeout_covers_all_attempts():
    budget = config.SCRAPE_MAX_RETRIES * config.SCRAPE_TIMEOUT
    assert config.SCRAPE_REQUEST_TIMEOUT > config.SCRAPE_TIMEOUT
    assert config.SCRAPE_REQUEST_TIMEOUT >= budget


def test_session_is_created_lazily_with_user_agent():
    scraper = MetadataScraper()
    assert scraper.session is None

    session = scraper._get_session()

    try:
        assert isinstance(session, requests.Session)
        assert scraper._get_session() is session
        assert session.headers["User-Agent"] == USER_AGENT
    finally:
        scraper.close()
