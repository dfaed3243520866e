"""
app/api/routers package marker.
"""

from app.api.routers.analyze_router import router as analyze_router
from app.api.routers.export_router import router as export_router

__all__ = [
    "analyze_router",
    "export_router",
]
