"""Book metadata scraping.

Isolated from the recommendation engines: it fetches a single book's
metadata from a third-party site by ISBN.
"""
