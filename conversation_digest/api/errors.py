from __future__ import annotations

from typing import Optional


class FetchError(Exception):
    """Raised when a read against the conversation API fails.

    Covers connection errors, timeouts, non-success statuses and
    response bodies that cannot be decoded into the expected records.
    """

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code
