"""
Frontend (single-page app) serving feature module.
"""

from app.features.frontend.routes import build_frontend_router, mount_frontend

__all__ = [
    "build_frontend_router",
    "mount_frontend",
]
