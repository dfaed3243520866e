"""
BeautifulSoup-based readable-text extraction for fetched pages.
"""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag

STRIPPED_ELEMENTS = ["script", "style", "nav", "footer", "header"]

CONTENT_SELECTORS = [
    "main",
    '[role="main"]',
    ".main-content",
    ".content",
    "article",
    ".post-content",
    ".entry-content",
]


class PageTextExtractor:
    """
    Deterministic main-content text extraction for HTML documents.
    """

    @classmethod
    def extract_text(cls, html: str, *, max_length: int) -> str:
        """
        Strip page chrome, pick the main content node, and return collapsed text.
        """

        soup = BeautifulSoup(html, "html.parser")
        for node in soup.find_all(STRIPPED_ELEMENTS):
            node.decompose()

        content_node = cls._select_content_node(soup)
        text = ""
        if content_node is not None:
            text = content_node.get_text(" ")
        if not cls._clean_text(text):
            fallback = soup.body if soup.body is not None else soup
            text = fallback.get_text(" ")

        return cls._clean_text(text)[:max_length]

    @staticmethod
    def _select_content_node(soup: BeautifulSoup) -> Tag | None:
        for selector in CONTENT_SELECTORS:
            node = soup.select_one(selector)
            if node is not None:
                return node
        return None

    @staticmethod
    def _clean_text(value: str) -> str:
        return re.sub(r"\s+", " ", value).strip()
