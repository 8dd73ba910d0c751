# src/meeplescore/middleware/__init__.py

"""Middleware for the MeepleScore API."""

from .logging import REQUEST_ID_HEADER, RequestLoggingMiddleware

__all__ = ["REQUEST_ID_HEADER", "RequestLoggingMiddleware"]
