"""Connection context for the conversation API.

The session carries everything a fetcher needs to reach the service:
base URL, bearer token and request timeout. Nothing is read from module
globals, so several sessions against different servers can coexist.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from conversation_digest.api.config import (
    DEFAULT_MAX_WORKERS,
    DEFAULT_TIMEOUT,
    load_api_config,
    load_token,
)
from conversation_digest.api.errors import FetchError

logger = logging.getLogger(__name__)


class ApiSession:
    """Authenticated HTTP session against the conversation API.

    The token identifies the "current user" whose conversations are
    returned by the service. It is sent as a Bearer token when present.
    """

    def __init__(
        self,
        api_url: str,
        token: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        max_workers: int = DEFAULT_MAX_WORKERS,
        http: Optional[requests.Session] = None,
    ):
        if not api_url:
            raise ValueError("api_url is required")
        self._api_url = api_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._max_workers = max(1, int(max_workers))
        self._http = http or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: Optional[Dict[str, Any]] = None,
        token: Optional[str] = None,
    ) -> "ApiSession":
        """Build a session from the stored config and token store."""
        config = config or load_api_config()
        return cls(
            api_url=config.get("api_url", ""),
            token=token or load_token(),
            timeout=float(config.get("timeout", DEFAULT_TIMEOUT)),
            max_workers=int(config.get("max_workers", DEFAULT_MAX_WORKERS)),
        )

    @property
    def api_url(self) -> str:
        return self._api_url

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.is_authenticated:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def get_json(self, path: str) -> Any:
        """GET a resource relative to the API URL and decode its JSON body.

        Raises FetchError on connection failure, timeout, non-2xx status
        or a body that is not valid JSON.
        """
        url = f"{self._api_url}/{path.lstrip('/')}"
        logger.debug("GET %s", url)

        try:
            resp = self._http.get(url, headers=self._headers(), timeout=self._timeout)
            resp.raise_for_status()
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            raise FetchError(f"GET {url} failed with status {status}", url=url, status_code=status) from exc
        except requests.Timeout as exc:
            raise FetchError(f"GET {url} timed out after {self._timeout}s", url=url) from exc
        except requests.RequestException as exc:
            raise FetchError(f"GET {url} failed: {exc}", url=url) from exc

        try:
            return resp.json()
        except ValueError as exc:
            raise FetchError(f"GET {url} returned a body that is not JSON", url=url,
                             status_code=resp.status_code) from exc

    def close(self):
        self._http.close()

    def __enter__(self) -> "ApiSession":
        return self

    def __exit__(self, *exc_info):
        self.close()
