"""
Core dependencies for dependency injection.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import google.generativeai as genai
from fastapi import Request

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigurationError
from app.core.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ModelInvocationConfig:
    """Everything needed to build a schema-constrained Gemini model for one request."""

    api_key: str
    model: str
    response_schema: Dict[str, Any] = field(default_factory=dict)
    temperature: Optional[float] = None

    def generation_config(self) -> Dict[str, Any]:
        config: Dict[str, Any] = {
            "response_mime_type": "application/json",
            "response_schema": self.response_schema,
        }
        if self.temperature is not None:
            config["temperature"] = self.temperature
        return config


def create_gemini_model(config: ModelInvocationConfig):
    """
    Build a Gemini GenerativeModel for a single invocation.

    Args:
        config: Per-request invocation settings

    Returns:
        Configured Gemini GenerativeModel

    Raises:
        ConfigurationError: If Gemini API key is not configured
    """
    if not config.api_key:
        raise ConfigurationError(
            "Gemini API key not configured",
            error_code="GEMINI_API_KEY_MISSING"
        )

    # Configure the Gemini client
    genai.configure(api_key=config.api_key)

    return genai.GenerativeModel(
        model_name=config.model,
        generation_config=config.generation_config(),
    )


def get_insights_gate(request: Request) -> asyncio.Semaphore:
    """
    Get the per-application semaphore bounding in-flight Gemini calls.

    Created lazily so applications started without a lifespan (e.g. in tests)
    still get one.
    """
    gate = getattr(request.app.state, "insights_gate", None)
    if gate is None:
        settings: Settings = getattr(request.app.state, "settings", None) or get_settings()
        limit = settings.MAX_CONCURRENT_INSIGHTS
        gate = asyncio.Semaphore(limit)
        request.app.state.insights_gate = gate
        logger.debug(f"Created insights gate with limit {limit}")
    return gate
