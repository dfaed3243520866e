"""
app/services/entity_extraction_service.py

Prompt -> model -> validated entity extraction for one page.
"""

from __future__ import annotations

import logging

from app.domain.site_analysis import Entity, SiteExtraction
from app.scraping.logging_utils import log_event
from llm_synthesis.adapter import BaseLLMAdapter
from llm_synthesis.prompt_builder import EntityPromptBuilder
from llm_synthesis.validator import ExtractionError, validate_extraction_output

logger = logging.getLogger(__name__)


class EntityExtractionService:
    """
    Extracts business entities from page text with a single model call.

    There is no retry: an unusable response raises ``ExtractionError``
    and adapter transport errors propagate unchanged.
    """

    def __init__(
        self,
        *,
        adapter: BaseLLMAdapter,
        prompt_builder: EntityPromptBuilder | None = None,
    ) -> None:
        self._adapter = adapter
        self._prompt_builder = prompt_builder or EntityPromptBuilder()

    def extract(self, *, content: str, url: str) -> SiteExtraction:
        prompt = self._prompt_builder.build_prompt(content, url)
        raw = self._adapter.generate(prompt)

        try:
            parsed = validate_extraction_output(raw)
        except ExtractionError as exc:
            log_event(
                logger,
                logging.WARNING,
                "entity_extraction_failed",
                url=url,
                stage=exc.stage,
                errors=exc.errors,
            )
            raise

        entities = [
            Entity(name=item.name, confidence=item.confidence, category=item.category)
            for item in parsed.entities
        ]
        log_event(
            logger,
            logging.INFO,
            "entities_extracted",
            url=url,
            entities=len(entities),
            search_phrase=parsed.search_phrase,
        )
        return SiteExtraction(
            entities=entities,
            summary=parsed.summary,
            search_phrase=parsed.search_phrase,
        )
