from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.config import (
    ALLOWED_DENOMINATORS,
    ALLOWED_LLM_ADAPTERS,
    DENOMINATOR_PRIMARY_ONLY,
    AnalysisCapabilities,
    get_analysis_capabilities,
    load_env_files,
    resolve_llm_api_key,
)
from app.schemas.site_analysis import HealthResponse, error_payload

URLS_REQUIRED_MESSAGE = "urls field is required and must be a non-empty array"


def _validate_env() -> None:
    """
    Validate environment variables at startup.

    Raises RuntimeError listing every invalid variable so the operator can
    fix all problems in one restart cycle.

    Rules:
    - LLM_ADAPTER must be a known adapter name.
    - MARKET_INTEL_DENOMINATOR must be a known denominator mode.
    - A missing LLM API key is only warned about; analyze requests answer
      500 until one is configured. The check is skipped when LLM_ADAPTER=mock.
    """

    load_env_files()

    errors: list[str] = []

    adapter = os.getenv("LLM_ADAPTER", "openai").strip().lower() or "openai"
    if adapter not in ALLOWED_LLM_ADAPTERS:
        errors.append(
            f"LLM_ADAPTER='{adapter}' is not valid. Allowed values: {sorted(ALLOWED_LLM_ADAPTERS)}."
        )

    denominator = (
        os.getenv("MARKET_INTEL_DENOMINATOR", DENOMINATOR_PRIMARY_ONLY).strip().lower()
        or DENOMINATOR_PRIMARY_ONLY
    )
    if denominator not in ALLOWED_DENOMINATORS:
        errors.append(
            f"MARKET_INTEL_DENOMINATOR='{denominator}' is not valid. "
            f"Allowed values: {sorted(ALLOWED_DENOMINATORS)}."
        )

    if errors:
        raise RuntimeError(
            "Startup validation failed, invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )

    if adapter != "mock" and not resolve_llm_api_key():
        logging.getLogger(__name__).warning(
            "LLM API key is not set. Provide LLM_API_KEY or OPENAI_API_KEY; "
            "analyze requests will fail until one is configured."
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Log which pipeline stages are usable with the configured credentials."""
    capabilities = get_analysis_capabilities()
    logging.getLogger(__name__).info(
        "Site analysis ready llm_configured=%s competitor_discovery=%s",
        capabilities.llm_configured,
        capabilities.competitor_discovery,
    )
    yield


async def _request_validation_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    Answer body validation failures with 400 ``{error}`` instead of FastAPI's 422.
    """

    locations = [tuple(error.get("loc", ())) for error in exc.errors()]
    # ("body",) missing body, ("body", <pos>) malformed JSON, ("body", "urls", ...) bad field
    concerns_urls = any(
        loc[:1] == ("body",)
        and (len(loc) == 1 or loc[1] == "urls" or isinstance(loc[1], int))
        for loc in locations
    )
    message = URLS_REQUIRED_MESSAGE if concerns_urls else "Invalid request"
    logging.getLogger(__name__).info(
        "Rejected request path=%s errors=%d", request.url.path, len(locations)
    )
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=error_payload(message))


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _configure_logging()
    _validate_env()

    application = FastAPI(
        title="Site Entity Analyzer API",
        version="1.0.0",
        lifespan=_lifespan,
    )
    application.add_exception_handler(RequestValidationError, _request_validation_handler)

    from app.api.routers import analyze_router, export_router

    application.include_router(analyze_router)
    application.include_router(export_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck(
        capabilities: AnalysisCapabilities = Depends(get_analysis_capabilities),
    ) -> HealthResponse:
        return HealthResponse(
            status="ok",
            llm_configured=capabilities.llm_configured,
            competitor_discovery=capabilities.competitor_discovery,
        )

    return application


app = create_app()
