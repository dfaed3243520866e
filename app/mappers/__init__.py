"""
app/mappers package marker.
"""

from app.mappers.analysis_mapper import build_analyze_response, to_result_response

__all__ = [
    "build_analyze_response",
    "to_result_response",
]
