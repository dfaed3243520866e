"""
app/connectors package marker.
"""

from app.connectors.base import BaseSearchConnector
from app.connectors.serpapi_connector import SerpAPIConnector

__all__ = [
    "BaseSearchConnector",
    "SerpAPIConnector",
]
