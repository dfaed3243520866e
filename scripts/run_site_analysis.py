"""
Run site entity analysis from CLI.

    python -m scripts.run_site_analysis https://example.com [--competitors] [--format csv]
"""

from __future__ import annotations

import argparse
import csv
import json
import logging
import os
import sys

from app.config import get_analysis_capabilities, get_analysis_settings
from app.mappers.analysis_mapper import build_analyze_response
from app.services.export_service import AnalysisExportService
from app.services.site_analysis_orchestrator import build_site_analysis_orchestrator


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Extract business entities from web pages.")
    parser.add_argument("urls", nargs="+", help="Page URLs to analyze.")
    parser.add_argument(
        "--competitors",
        dest="find_competitors",
        action="store_true",
        help="Discover and analyze competitors (requires SERPAPI_API_KEY).",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=("json", "csv"),
        default="json",
        help="json prints the full analyze payload; csv prints one row per entity.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, os.getenv("LOG_LEVEL", "WARNING").strip().upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if not get_analysis_capabilities().llm_configured:
        print("LLM API key not configured. Set LLM_API_KEY or OPENAI_API_KEY.", file=sys.stderr)
        return 1

    max_urls = get_analysis_settings().max_urls_per_request
    if len(args.urls) > max_urls:
        print(f"At most {max_urls} urls may be analyzed per run.", file=sys.stderr)
        return 2

    orchestrator = build_site_analysis_orchestrator()
    report = orchestrator.analyze(urls=args.urls, find_competitors=args.find_competitors)
    response = build_analyze_response(report)

    if args.output_format == "csv":
        result = AnalysisExportService().export(response.results)
        writer = csv.DictWriter(sys.stdout, fieldnames=result.fields, lineterminator="\n")
        writer.writeheader()
        writer.writerows(result.rows)
    else:
        print(json.dumps(response.model_dump(mode="json", by_alias=True), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
