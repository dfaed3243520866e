"""
app/errors.py

Error taxonomy for the site analysis pipeline.
"""

from __future__ import annotations

from llm_synthesis.validator import ExtractionError


class AnalysisPipelineError(RuntimeError):
    """
    Base class for recoverable pipeline failures.
    """


class FetchError(AnalysisPipelineError):
    """
    Raised when a page cannot be retrieved (network error, timeout, non-2xx).
    """

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class DiscoveryError(AnalysisPipelineError):
    """
    Raised when competitor discovery is unavailable or the search API fails.
    """


class AnalysisError(AnalysisPipelineError):
    """
    Raised when fetch + extract fails for one competitor site.
    """

    def __init__(self, message: str, *, url: str, cause: Exception | None = None) -> None:
        self.url = url
        self.cause = cause
        super().__init__(message)


__all__ = [
    "AnalysisError",
    "AnalysisPipelineError",
    "DiscoveryError",
    "ExtractionError",
    "FetchError",
]
