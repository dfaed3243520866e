"""
app/api/routers/export_router.py

Tabular export of analyze results.

POST /api/analyze/export?format=csv|json

Body: an analyze response (or ``{"results": [...]}``).

CSV  → StreamingResponse, Content-Type: text/csv
       Content-Disposition: attachment; filename="site_analysis_export.csv"
JSON → JSONResponse {"rows": int, "fields": list[str], "data": list[dict]}
"""

from __future__ import annotations

import csv
import io
import logging
from collections.abc import Iterator
from itertools import chain

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import JSONResponse, StreamingResponse

from app.schemas.site_analysis import ErrorResponse, ExportRequest, error_payload
from app.services.export_service import (
    AnalysisExportService,
    ExportResult,
    get_analysis_export_service,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["export"])

EXPORT_FILENAME = "site_analysis_export.csv"
_VALID_FORMATS = frozenset({"csv", "json"})


def _csv_lines(result: ExportResult) -> Iterator[str]:
    """Yield the header line, then one CSV line per export row."""
    line = io.StringIO()
    writer = csv.writer(line, lineterminator="\r\n")
    for values in chain(
        [result.fields],
        ([row.get(name, "") for name in result.fields] for row in result.rows),
    ):
        writer.writerow(values)
        yield line.getvalue()
        line.seek(0)
        line.truncate(0)


def _to_csv_streaming(result: ExportResult, filename: str) -> StreamingResponse:
    return StreamingResponse(
        content=_csv_lines(result),
        media_type="text/csv; charset=utf-8",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            "X-Row-Count": str(len(result.rows)),
        },
    )


def _to_json_response(result: ExportResult) -> JSONResponse:
    return JSONResponse(
        content={
            "rows": len(result.rows),
            "fields": result.fields,
            "data": result.rows,
        }
    )


@router.post(
    "/analyze/export",
    response_model=None,
    responses={status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse}},
    summary="Export analyze results as CSV or JSON",
)
def export_analysis(
    payload: ExportRequest,
    output_format: str = Query(
        default="csv",
        alias="format",
        description='Output format: "csv" (file download) or "json".',
    ),
    service: AnalysisExportService = Depends(get_analysis_export_service),
) -> StreamingResponse | JSONResponse:
    """
    Flatten analyze results to one row per primary or competitor entity.
    """
    output_format = output_format.strip().lower()
    if output_format not in _VALID_FORMATS:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_payload(
                f"Invalid format {output_format!r}. Must be one of: {sorted(_VALID_FORMATS)}."
            ),
        )

    result = service.export(payload.results)
    logger.info("Analysis export format=%r rows=%d", output_format, len(result.rows))

    if output_format == "csv":
        return _to_csv_streaming(result, EXPORT_FILENAME)
    return _to_json_response(result)
