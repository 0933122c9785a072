"""Configuration management."""
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


class Config:
    """Application configuration."""

    # Datasets
    DATA_DIR = os.getenv("BOOKREC_DATA_DIR", "data")
    BOOKS_FILENAME = "books.json"
    RECORDS_FILENAME = "record.json"
    ANNOUNCEMENT_FILENAME = "announcement.json"

    # Server
    HOST = os.getenv("HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8888"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Scraper
    # Per navigation attempt
    SCRAPE_TIMEOUT = float(os.getenv("SCRAPE_TIMEOUT", "10"))
    SCRAPE_MAX_WORKERS = int(os.getenv("SCRAPE_MAX_WORKERS", "2"))
    SCRAPE_MAX_RETRIES = int(os.getenv("SCRAPE_MAX_RETRIES", "3"))
    SCRAPE_BACKOFF = float(os.getenv("SCRAPE_BACKOFF", "1.0"))
    # Whole request; the default leaves room for every attempt plus backoff
    SCRAPE_REQUEST_TIMEOUT = float(
        os.getenv(
            "SCRAPE_REQUEST_TIMEOUT",
            str(SCRAPE_MAX_RETRIES * SCRAPE_TIMEOUT + SCRAPE_BACKOFF * 2 ** SCRAPE_MAX_RETRIES),
        )
    )


config = Config()
