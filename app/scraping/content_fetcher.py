"""
Page retrieval and readable-text extraction.
"""

from __future__ import annotations

import logging

import requests

from app.config import FetchSettings
from app.errors import FetchError
from app.scraping.logging_utils import log_event
from app.scraping.parsing.html_parsers import PageTextExtractor

logger = logging.getLogger(__name__)


class ContentFetcher:
    """
    Fetches one URL and returns its main-content text.

    Single attempt per call: no retry, no backoff. Every failure surfaces
    as ``FetchError`` so callers can degrade per URL.
    """

    def __init__(
        self,
        *,
        settings: FetchSettings,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self.request_headers = {"User-Agent": settings.user_agent}

    def fetch_text(self, url: str) -> str:
        response = self._request(url)
        text = PageTextExtractor.extract_text(
            response.text,
            max_length=self._settings.max_content_length,
        )
        log_event(
            logger,
            logging.INFO,
            "page_fetched",
            url=url,
            status_code=response.status_code,
            content_length=len(text),
        )
        return text

    def _request(self, url: str) -> requests.Response:
        try:
            response = self._session.get(
                url,
                headers=self.request_headers,
                timeout=self._settings.timeout_seconds,
                allow_redirects=True,
            )
        except requests.Timeout as exc:
            self._log_failure(url=url, error="timeout")
            raise FetchError(
                f"Request timed out after {self._settings.timeout_seconds:g}s",
                url=url,
            ) from exc
        except requests.RequestException as exc:
            self._log_failure(url=url, error=str(exc))
            raise FetchError(f"Request failed: {exc}", url=url) from exc

        if not 200 <= response.status_code < 300:
            self._log_failure(url=url, error="non_2xx", status_code=response.status_code)
            raise FetchError(
                f"HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _log_failure(*, url: str, error: str, status_code: int | None = None) -> None:
        log_event(
            logger,
            logging.WARNING,
            "page_fetch_failed",
            url=url,
            error=error,
            status_code=status_code,
        )
