"""Project exceptions.

Extraction-time failures are returned as data inside the envelope and
never raised; these exceptions cover the host side of the boundary.
"""

from __future__ import annotations


class ExtractionError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class TransportDecodeError(ExtractionError):
    """A compressed payload could not be inflated or parsed."""


class PageLoadError(ExtractionError):
    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)
