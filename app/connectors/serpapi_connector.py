"""
app/connectors/serpapi_connector.py

SerpAPI connector for competitor discovery.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from app.config import SearchSettings
from app.connectors.base import BaseSearchConnector
from app.domain.site_analysis import CompetitorResult
from app.errors import DiscoveryError
from app.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


class SerpAPIConnector(BaseSearchConnector):
    """
    Queries SerpAPI organic results and maps them into competitor stubs.
    """

    def __init__(
        self,
        *,
        settings: SearchSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(
            source="serpapi",
            timeout_seconds=settings.timeout_seconds,
            session=session,
        )
        self._settings = settings

    def discover(self, search_phrase: str) -> list[CompetitorResult]:
        if not self._settings.api_key:
            raise DiscoveryError("SerpAPI key not configured")

        payload = self._request_json(
            method="GET",
            url=self._settings.base_url,
            params={
                "engine": self._settings.engine,
                "q": search_phrase,
                "num": self._settings.max_results,
                "api_key": self._settings.api_key,
            },
        )
        if not isinstance(payload, dict):
            raise DiscoveryError(f"{self.source}: unexpected response shape.")
        if payload.get("error"):
            raise DiscoveryError(f"{self.source}: {payload['error']}")

        organic = payload.get("organic_results") or []
        competitors: list[CompetitorResult] = []
        for index, item in enumerate(organic[: self._settings.max_results]):
            stub = self._to_stub(item, index=index)
            if stub is not None:
                competitors.append(stub)

        log_event(
            logger,
            logging.INFO,
            "competitor_discovery_completed",
            search_phrase=search_phrase,
            organic_results=len(organic),
            competitors=len(competitors),
        )
        return competitors

    @staticmethod
    def _to_stub(item: Any, *, index: int) -> CompetitorResult | None:
        if not isinstance(item, dict):
            return None
        link = (item.get("link") or "").strip()
        if not link:
            return None

        position = item.get("position")
        if not isinstance(position, int) or isinstance(position, bool):
            position = index + 1

        return CompetitorResult(
            url=link,
            title=(item.get("title") or "").strip(),
            snippet=(item.get("snippet") or "").strip(),
            position=position,
            success=False,
        )
