"""
Budget insights API routes.
"""

import asyncio

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.core.dependencies import get_insights_gate
from app.core.logging import get_logger
from app.shared.schemas import ErrorResponse, InsightsRequest, InsightsResponse
from app.shared.utils import run_until_disconnected
from app.features.insights.services import InsightsPipeline

logger = get_logger(__name__)
router = APIRouter()


# Dependencies
def get_insights_pipeline(
    settings: Settings = Depends(get_settings),
    gate: asyncio.Semaphore = Depends(get_insights_gate),
) -> InsightsPipeline:
    """Get an insights pipeline bound to the current settings."""
    return InsightsPipeline(settings=settings, gate=gate)


@router.post(
    "/insights",
    response_model=InsightsResponse,
    responses={
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
)
async def generate_insights(
    payload: InsightsRequest,
    request: Request,
    settings: Settings = Depends(get_settings),
    pipeline: InsightsPipeline = Depends(get_insights_pipeline),
) -> JSONResponse:
    """
    Generate AI insights for a month of transactions and budgets.

    The body is Gemini's structured answer as returned: a spending breakdown,
    saving tips, risk areas and a 0-100 financial health score. Failures are
    reported as {"error": ...}.
    """
    insights = await run_until_disconnected(
        request,
        pipeline.generate_insights(payload),
        poll_interval=settings.DISCONNECT_POLL_INTERVAL,
    )

    # JSONResponse bypasses response_model so well-formed answers are relayed untouched
    return JSONResponse(status_code=200, content=insights)
