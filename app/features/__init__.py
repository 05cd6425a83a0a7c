"""
Features module initialization.
"""

from app.features.insights import router as insights_router
from app.features.frontend import mount_frontend

__all__ = [
    "insights_router",
    "mount_frontend",
]
