"""
Static asset serving for the built single-page app.

Only active in production; during development the frontend dev server serves
the app and proxies /api to this process.
"""

from pathlib import Path

from fastapi import APIRouter, FastAPI, HTTPException
from fastapi.responses import FileResponse

from app.core.config import Settings
from app.core.logging import get_logger

logger = get_logger(__name__)

INDEX_DOCUMENT = "index.html"


def build_frontend_router(static_root: Path) -> APIRouter:
    """
    Build a catch-all router serving files from static_root.

    Unknown paths fall back to the index document so client-side routing can
    take over. Paths under /api never fall back.
    """
    static_root = static_root.resolve()
    index_path = static_root / INDEX_DOCUMENT
    router = APIRouter()

    @router.get("/{full_path:path}", include_in_schema=False)
    async def serve_frontend(full_path: str) -> FileResponse:
        if full_path == "api" or full_path.startswith("api/"):
            raise HTTPException(status_code=404, detail="Not Found")

        candidate = (static_root / full_path).resolve()
        if full_path and static_root in candidate.parents and candidate.is_file():
            return FileResponse(candidate)

        return FileResponse(index_path)

    return router


def mount_frontend(app: FastAPI, settings: Settings) -> bool:
    """
    Attach the frontend router when running in production with a built app.

    Must be called after the API routers so the catch-all route sits last.

    Returns:
        True if the frontend is being served
    """
    if not settings.is_production():
        logger.info("Development mode, frontend is served by its own dev server")
        return False

    static_root = Path(settings.STATIC_DIR)
    if not (static_root / INDEX_DOCUMENT).is_file():
        logger.warning(
            f"No {INDEX_DOCUMENT} in {static_root.resolve()}, frontend will not be served",
            extra={"static_dir": str(static_root)}
        )
        return False

    app.include_router(build_frontend_router(static_root))
    logger.info(f"Serving frontend from {static_root.resolve()}")
    return True
