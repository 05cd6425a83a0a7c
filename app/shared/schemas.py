"""
Shared Pydantic models for request/response schemas.
"""

from typing import Any, List
from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(description="Human readable failure message")
    code: str = Field(description="Machine readable error code")


# Health models
class HealthEnvironment(BaseModel):
    """Which integrations have credentials configured."""

    hasGemini: bool = Field(description="Whether a Gemini API key is configured")
    hasSupabase: bool = Field(description="Whether a Supabase URL is configured")


class HealthResponse(BaseModel):
    """Health check payload."""

    status: str = Field(default="ok", description="Always 'ok' while the process is serving")
    env: HealthEnvironment = Field(description="Configured integrations")


# Insight models
class InsightsRequest(BaseModel):
    """Request for generating monthly budget insights."""

    transactions: List[Any] = Field(description="Transaction records, forwarded to the model as JSON")
    budgets: List[Any] = Field(description="Budget records, forwarded to the model as JSON")
    month: int = Field(ge=1, le=12, description="Calendar month being analysed (1-12)")
    year: int = Field(description="Calendar year being analysed")


class InsightsResponse(BaseModel):
    """Structured insights returned by the model."""

    breakdown: str = Field(description="Detailed breakdown of spending patterns")
    saving_tips: List[str] = Field(description="List of actionable saving tips")
    risk_areas: List[str] = Field(description="Financial areas that need attention")
    financial_health_score: float = Field(ge=0, le=100, description="Financial health score from 0-100")
