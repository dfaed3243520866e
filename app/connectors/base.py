"""
app/connectors/base.py

Base search connector abstraction and shared HTTP mechanics.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import requests

from app.domain.site_analysis import CompetitorResult
from app.errors import DiscoveryError

logger = logging.getLogger(__name__)


class BaseSearchConnector(ABC):
    """
    Connector interface for turning a search phrase into competitor stubs.
    """

    source: str

    def __init__(
        self,
        *,
        source: str,
        timeout_seconds: float,
        session: requests.Session | None = None,
    ) -> None:
        self.source = source
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    @abstractmethod
    def discover(self, search_phrase: str) -> list[CompetitorResult]:
        """
        Return ranked competitor stubs (``success=False``, no entities).
        """

    def _request_json(
        self,
        *,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """
        Execute one HTTP request and return parsed JSON.

        Raises DiscoveryError on transport failure, non-2xx status, or a
        body that is not JSON.
        """

        try:
            response = self._session.request(
                method=method,
                url=url,
                params=params,
                headers=headers,
                timeout=self._timeout_seconds,
            )
            response.raise_for_status()
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else None
            logger.error(
                "Search request failed source=%s status=%s error=%s",
                self.source,
                status_code,
                exc,
            )
            raise DiscoveryError(f"{self.source}: search request failed (HTTP {status_code}).") from exc
        except requests.RequestException as exc:
            logger.error("Search request failed source=%s error=%s", self.source, exc)
            raise DiscoveryError(f"{self.source}: search request failed.") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise DiscoveryError(f"{self.source}: response was not valid JSON.") from exc
