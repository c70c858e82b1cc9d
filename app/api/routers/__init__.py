"""
app/api/routers package marker.
"""

from app.api.routers.price_analytics import router as price_analytics_router
from app.api.routers.price_upload import router as price_upload_router

__all__ = [
    "price_analytics_router",
    "price_upload_router",
]
