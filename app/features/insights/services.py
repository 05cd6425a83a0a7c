"""
Insights generation service backed by Google Gemini.
"""

import asyncio
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from app.core.config import Settings
from app.core.dependencies import ModelInvocationConfig, create_gemini_model
from app.core.exceptions import ConfigurationError, SchemaViolationError, UpstreamError
from app.core.logging import get_logger
from app.features.insights.prompts import INSIGHTS_RESPONSE_SCHEMA, build_insights_prompt
from app.shared.schemas import InsightsRequest, InsightsResponse
from app.shared.utils import Timer, load_json_object, run_gated

logger = get_logger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to generate insights"


class InsightsPipeline:
    """Turns a month of transactions and budgets into structured Gemini insights."""

    def __init__(
        self,
        settings: Settings,
        gate: Optional[asyncio.Semaphore] = None,
        model_factory: Optional[Callable[[ModelInvocationConfig], Any]] = None,
    ):
        self.settings = settings
        self.gate = gate or asyncio.Semaphore(settings.MAX_CONCURRENT_INSIGHTS)
        self.model_factory = model_factory or create_gemini_model

    def invocation_config(self) -> ModelInvocationConfig:
        """Build the per-request Gemini configuration from settings."""
        return ModelInvocationConfig(
            api_key=self.settings.GEMINI_API_KEY or "",
            model=self.settings.GEMINI_MODEL,
            response_schema=INSIGHTS_RESPONSE_SCHEMA,
            temperature=self.settings.GEMINI_TEMPERATURE,
        )

    async def generate_insights(self, request: InsightsRequest) -> Dict[str, Any]:
        """
        Generate spending insights for the requested month.

        Args:
            request: Validated insights request

        Returns:
            The model's JSON object, unmodified. In lenient mode an empty or
            unparseable model response yields an empty dict.

        Raises:
            ConfigurationError: If no Gemini API key is configured
            UpstreamError: If the Gemini call fails or times out
            SchemaViolationError: In strict mode, if the output breaks the schema
        """
        if not self.settings.GEMINI_API_KEY:
            raise ConfigurationError(
                "Gemini API key not configured",
                error_code="GEMINI_API_KEY_MISSING"
            )

        prompt = build_insights_prompt(
            transactions=request.transactions,
            budgets=request.budgets,
            month=request.month,
            year=request.year,
        )

        logger.info(
            "Starting insights generation",
            extra={
                "month": request.month,
                "year": request.year,
                "transaction_count": len(request.transactions),
                "budget_count": len(request.budgets),
                "model": self.settings.GEMINI_MODEL,
            }
        )

        with Timer("gemini_insights_generation"):
            text = await self._invoke_model(prompt)

        insights = self.parse_insights_text(text)

        logger.info(
            "Insights generated",
            extra={
                "month": request.month,
                "year": request.year,
                "fields": sorted(insights.keys()),
            }
        )
        return insights

    async def _invoke_model(self, prompt: str) -> str:
        """Send the prompt to Gemini and return the raw response text."""
        try:
            model = self.model_factory(self.invocation_config())
            response = await run_gated(
                self.gate,
                asyncio.wait_for(
                    model.generate_content_async(prompt),
                    timeout=self.settings.GEMINI_TIMEOUT_SECONDS,
                ),
            )
        except asyncio.TimeoutError:
            raise UpstreamError(
                f"Gemini request timed out after {self.settings.GEMINI_TIMEOUT_SECONDS:g}s",
                error_code="GEMINI_TIMEOUT"
            )
        except ConfigurationError:
            raise
        except Exception as e:
            raise UpstreamError(
                str(e) or GENERIC_FAILURE_MESSAGE,
                error_code="GEMINI_REQUEST_FAILED",
                details={"exception_type": type(e).__name__},
            ) from e

        try:
            return response.text or ""
        except ValueError as e:
            # .text raises when the candidate carries no text parts (e.g. blocked output)
            logger.warning(f"Gemini response had no text: {e}")
            return ""

    def parse_insights_text(self, text: str) -> Dict[str, Any]:
        """
        Parse the model's text into an insights object.

        Lenient mode returns {} for empty or malformed output; strict mode
        raises SchemaViolationError instead.
        """
        try:
            insights = load_json_object(text)
        except ValueError as e:
            if self.settings.STRICT_RESPONSE_SCHEMA:
                raise SchemaViolationError(
                    "Model response was not a JSON object",
                    error_code="INSIGHTS_SCHEMA_VIOLATION",
                    details={"reason": str(e)},
                ) from e
            logger.warning(f"Unparseable insights response, returning empty result: {e}")
            return {}

        if self.settings.STRICT_RESPONSE_SCHEMA:
            try:
                InsightsResponse.model_validate(insights)
            except PydanticValidationError as e:
                raise SchemaViolationError(
                    "Model response did not match the insights schema",
                    error_code="INSIGHTS_SCHEMA_VIOLATION",
                    details={"errors": [error["msg"] for error in e.errors()]},
                ) from e

        return insights
