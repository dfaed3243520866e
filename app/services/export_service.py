"""
app/services/export_service.py

Flat tabular export of analysis results.

One row per entity. Primary entities carry ``source="primary"`` with the
primary page's search phrase and summary; entities of successful competitors
carry ``source="competitor"``, the competitor URL, an empty search phrase
and the competitor's analysis text (blank when absent). Results or
competitors without entities produce no rows.

No serialisation logic lives here; the router turns an ExportResult into CSV
or JSON.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from app.schemas.site_analysis import AnalysisResultResponse, EntityResponse

EXPORT_FIELDS: tuple[str, ...] = (
    "url",
    "source",
    "entity",
    "confidence",
    "category",
    "searchPhrase",
    "summary",
)


@dataclass
class ExportResult:
    """
    Flat rows plus the ordered column list used for CSV headers.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    fields: list[str] = field(default_factory=lambda: list(EXPORT_FIELDS))


def _entity_row(
    entity: EntityResponse,
    *,
    url: str,
    source: str,
    search_phrase: str,
    summary: str | None,
) -> dict[str, Any]:
    values = (url, source, entity.name, entity.confidence, entity.category, search_phrase, summary)
    # blank cells, never nulls
    return {name: "" if value is None else value for name, value in zip(EXPORT_FIELDS, values)}


class AnalysisExportService:
    """
    Flattens analyze results for spreadsheet and BI consumption.
    """

    def export(self, results: Sequence[AnalysisResultResponse]) -> ExportResult:
        rows: list[dict[str, Any]] = []
        for result in results:
            for entity in result.entities:
                rows.append(
                    _entity_row(
                        entity,
                        url=result.url,
                        source="primary",
                        search_phrase=result.search_phrase,
                        summary=result.summary,
                    )
                )
            for competitor in result.competitors or []:
                if not competitor.success:
                    continue
                for entity in competitor.entities or []:
                    rows.append(
                        _entity_row(
                            entity,
                            url=competitor.url,
                            source="competitor",
                            search_phrase="",
                            summary=competitor.analysis,
                        )
                    )
        return ExportResult(rows=rows)


_service: AnalysisExportService | None = None


def get_analysis_export_service() -> AnalysisExportService:
    global _service
    if _service is None:
        _service = AnalysisExportService()
    return _service
