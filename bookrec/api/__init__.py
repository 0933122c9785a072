"""FastAPI application module for BookRec.

This module contains the FastAPI application, route handlers, and API
endpoints for the book catalog service.
"""
