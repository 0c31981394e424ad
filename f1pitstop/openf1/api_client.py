"""
OpenF1 API client with:
- Transport-level retries with exponential backoff
- Rate limiting to avoid 429 errors
- Session-based connection pooling
- Comparison filters (``position<=20``, ``date>=...``) in query strings
"""
import time
from typing import Any, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from f1pitstop.config import cfg
from f1pitstop.utils.logger import logger


class OpenF1Error(RuntimeError):
    """Raised when the OpenF1 API answers with a non-OK status."""

    def __init__(self, status_code: int, reason: str, url: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"Fetch failed: {status_code} {reason}".rstrip())


def build_query_string(params: Optional[dict[str, Any]]) -> str:
    """
    Encode query parameters the way OpenF1 expects them.

    A key ending in ``<`` or ``>`` is a comparison filter and is joined with
    ``=``: ``{"position<": 20}`` becomes ``position<=20``. None values are
    dropped.
    """
    parts = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        name = quote(str(key), safe="<>_")
        parts.append(f"{name}={quote(str(value), safe=':-.')}")
    return "&".join(parts)


class OpenF1Client:
    """
    HTTP client for the OpenF1 REST API.

    Handles retries and rate limiting transparently. Caching is the
    job of QueryClient, not of this class.
    """

    def __init__(self, base_url: str | None = None, session: requests.Session | None = None) -> None:
        self.base_url = (base_url or cfg.api.base_url).rstrip("/")
        self._last_request_time: float = 0.0

        if session is None:
            session = requests.Session()
            retry_strategy = Retry(
                total=cfg.api.max_retries,
                backoff_factor=cfg.api.backoff_factor,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods=["GET"],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session
        self.session.headers.update({"Accept": "application/json"})

    def _rate_limit(self) -> None:
        """Enforce minimum delay between requests."""
        elapsed = time.monotonic() - self._last_request_time
        wait = cfg.api.rate_limit_delay - elapsed
        if wait > 0:
            time.sleep(wait)
        self._last_request_time = time.monotonic()

    def build_url(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> str:
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        query = build_query_string(params)
        return f"{url}?{query}" if query else url

    def get(self, endpoint: str, params: Optional[dict[str, Any]] = None) -> list[dict]:
        """
        Fetch records from an OpenF1 endpoint.

        Args:
            endpoint: API endpoint path (e.g. '/drivers').
            params: Query parameters; see build_query_string for filters.

        Returns:
            List of records (dicts). Non-list payloads are returned as [].

        Raises:
            OpenF1Error: On a non-OK HTTP status.
            requests.RequestException: On transport failures.
        """
        url = self.build_url(endpoint, params)
        logger.debug(f"Fetching: {url}")

        self._rate_limit()
        try:
            response = self.session.get(url, timeout=cfg.api.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"Request failed for {url}: {e}")
            raise

        if not response.ok:
            err = OpenF1Error(response.status_code, response.reason or "", url)
            logger.error(f"HTTP error for {url}: {err}")
            raise err

        data = response.json()
        return data if isinstance(data, list) else []
