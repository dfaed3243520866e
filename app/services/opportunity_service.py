"""
app/services/opportunity_service.py

Content-based topical opportunity detection.

An opportunity is a specific product or technology that several analyzed
competitors mention while the primary page never does. Candidates are
filtered against the primary page's own vocabulary (page text, entity
names, URL path, search phrase) so that renamed versions of what the
site already covers are not reported.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import cmp_to_key
from urllib.parse import urlparse

from app.domain.site_analysis import AnalysisResult, Entity, TopicalOpportunity

TECH_TERMS = ("crm", "erp", "api", "sdk", "saas", "platform", "tool", "software")

GENERIC_TERMS = (
    "marketing",
    "digital",
    "content",
    "social",
    "search",
    "optimization",
    "management",
    "strategy",
    "solution",
    "service",
    "agency",
    "company",
    "business",
    "analytics",
    "tracking",
    "lead",
    "generation",
    "email",
    "campaign",
    "advertising",
    "promotion",
    "seo",
    "sem",
    "ppc",
)

_CONTENT_SPLIT = re.compile(r"[\s\-_.,;:!?()]+")
_NAME_SPLIT = re.compile(r"[\s\-_]+")
_PATH_SPLIT = re.compile(r"[\s\-_/]+")

_CATEGORY_RANK = {"Product": 3, "Technology": 2}


def domain_name(url: str) -> str:
    """
    Hostname without a ``www.`` prefix; the raw value when it does not parse.
    """

    hostname = urlparse(url).hostname
    if not hostname:
        return url
    return hostname.replace("www.", "", 1)


def _words(pattern: re.Pattern[str], text: str, *, min_length: int = 1) -> set[str]:
    return {word for word in pattern.split(text) if len(word) >= min_length}


@dataclass
class _Candidate:
    category: str
    confidence: int
    sites: list[str] = field(default_factory=list)


class OpportunityFinder:
    """
    Finds competitor entities that are absent from a primary site.
    """

    def __init__(
        self,
        *,
        min_confidence: int = 85,
        min_service_confidence: int = 90,
        min_sites: int = 2,
        limit: int = 3,
    ) -> None:
        self._min_confidence = min_confidence
        self._min_service_confidence = min_service_confidence
        self._min_sites = min_sites
        self._limit = limit

    def find(self, result: AnalysisResult) -> list[TopicalOpportunity]:
        competitors = [item for item in result.competitors or [] if item.success and item.entities]
        if not competitors:
            return []

        content = (result.original_content or "").lower()
        vocabulary = self._primary_vocabulary(result, content)

        candidates: dict[str, _Candidate] = {}
        for competitor in competitors:
            site = domain_name(competitor.url)
            for entity in competitor.entities or []:
                if not self._is_opportunity(entity, content=content, vocabulary=vocabulary):
                    continue
                key = entity.name.lower()
                candidate = candidates.setdefault(
                    key,
                    _Candidate(category=entity.category or "Other", confidence=entity.confidence),
                )
                if site not in candidate.sites:
                    candidate.sites.append(site)
                    candidate.confidence = max(candidate.confidence, entity.confidence)

        ranked = sorted(
            (
                (name, candidate)
                for name, candidate in candidates.items()
                if len(candidate.sites) >= self._min_sites
            ),
            key=cmp_to_key(self._compare),
        )
        return [
            TopicalOpportunity(
                url=result.url,
                name=" ".join(word[:1].upper() + word[1:] for word in name.split(" ")),
                sites=list(candidate.sites),
                confidence=candidate.confidence,
                category=candidate.category,
            )
            for name, candidate in ranked[: self._limit]
        ]

    @staticmethod
    def _primary_vocabulary(result: AnalysisResult, content: str) -> set[str]:
        vocabulary = _words(_CONTENT_SPLIT, content, min_length=4)
        for entity in result.entities:
            lowered = entity.name.lower()
            vocabulary.add(lowered)
            vocabulary |= _words(_NAME_SPLIT, lowered)
        url_path = " ".join(result.url.split("/")).lower()
        vocabulary |= _words(_PATH_SPLIT, url_path, min_length=3)
        vocabulary |= _words(_NAME_SPLIT, result.search_phrase.lower())
        return vocabulary

    def _is_opportunity(self, entity: Entity, *, content: str, vocabulary: set[str]) -> bool:
        name = entity.name
        lowered = name.lower()
        if entity.confidence < self._min_confidence:
            return False
        if not 2 < len(name) <= 30:
            return False
        if lowered in content:
            return False
        if any(word in vocabulary for word in _words(_NAME_SPLIT, lowered)):
            return False

        category = entity.category or "Other"
        relevant_category = category in {"Product", "Technology"} or (
            category == "Service" and entity.confidence >= self._min_service_confidence
        )
        if not relevant_category:
            return False

        if not (re.search(r"[A-Z]", name) or any(term in lowered for term in TECH_TERMS)):
            return False
        return not any(term in lowered for term in GENERIC_TERMS)

    @staticmethod
    def _compare(left: tuple[str, _Candidate], right: tuple[str, _Candidate]) -> int:
        a, b = left[1], right[1]
        confidence_diff = b.confidence - a.confidence
        if abs(confidence_diff) > 3:
            return confidence_diff
        sites_diff = len(b.sites) - len(a.sites)
        if sites_diff != 0:
            return sites_diff
        return _CATEGORY_RANK.get(b.category, 1) - _CATEGORY_RANK.get(a.category, 1)
