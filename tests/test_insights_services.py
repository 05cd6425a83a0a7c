"""
Tests for the insights pipeline, prompt and request helpers.
"""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.exceptions import (
    ClientDisconnectedError,
    ConfigurationError,
    SchemaViolationError,
    UpstreamError,
)
from app.features.insights.prompts import INSIGHTS_RESPONSE_SCHEMA, build_insights_prompt
from app.features.insights.services import InsightsPipeline
from app.shared.schemas import InsightsRequest
from app.shared.utils import run_until_disconnected
from conftest import SAMPLE_INSIGHTS, SAMPLE_REQUEST, build_settings

REQUEST = InsightsRequest(**SAMPLE_REQUEST)


def run(coro):
    return asyncio.run(coro)


class TestPrompt:
    """Prompt text and response schema must describe the same contract."""

    def test_prompt_embeds_data_and_period(self):
        prompt = build_insights_prompt(
            transactions=[{"amount": 12.5, "note": "café"}],
            budgets=[],
            month=11,
            year=2025,
        )
        assert "11/2025" in prompt
        assert '[{"amount":12.5,"note":"café"}]' in prompt
        assert "Budgets:\n[]" in prompt

    def test_prompt_names_every_schema_field(self):
        prompt = build_insights_prompt([], [], 1, 2024)
        for name in INSIGHTS_RESPONSE_SCHEMA["required"]:
            assert name in prompt
        assert "0-100" in prompt

    def test_schema_requires_exactly_the_insights_fields(self):
        properties = INSIGHTS_RESPONSE_SCHEMA["properties"]
        assert INSIGHTS_RESPONSE_SCHEMA["type"] == "object"
        assert set(properties) == set(INSIGHTS_RESPONSE_SCHEMA["required"]) == set(SAMPLE_INSIGHTS)
        assert properties["breakdown"]["type"] == "string"
        assert properties["saving_tips"]["items"] == {"type": "string"}
        assert properties["risk_areas"]["items"] == {"type": "string"}
        assert properties["financial_health_score"]["type"] == "number"


class TestInsightsPipeline:
    """Pipeline behaviour with a stubbed Gemini model."""

    def test_one_call_per_invocation(self, model_factory):
        factory, model = model_factory()
        pipeline = InsightsPipeline(build_settings(), model_factory=factory)

        result = run(pipeline.generate_insights(REQUEST))

        assert result == SAMPLE_INSIGHTS
        model.generate_content_async.assert_awaited_once()

    def test_out_of_range_score_is_passed_through(self, model_factory):
        factory, _ = model_factory(text='{"financial_health_score": 140}')
        pipeline = InsightsPipeline(build_settings(), model_factory=factory)

        assert run(pipeline.generate_insights(REQUEST)) == {"financial_health_score": 140}

    def test_missing_key_raises_configuration_error(self, model_factory):
        factory, _ = model_factory()
        pipeline = InsightsPipeline(build_settings(GEMINI_API_KEY=""), model_factory=factory)

        with pytest.raises(ConfigurationError):
            run(pipeline.generate_insights(REQUEST))
        factory.assert_not_called()

    def test_provider_error_becomes_upstream_error(self, model_factory):
        factory, _ = model_factory(side_effect=ConnectionError("connection reset"))
        pipeline = InsightsPipeline(build_settings(), model_factory=factory)

        with pytest.raises(UpstreamError) as exc_info:
            run(pipeline.generate_insights(REQUEST))
        assert exc_info.value.message == "connection reset"
        assert exc_info.value.status_code == 500

    def test_timeout_becomes_upstream_error(self):
        async def slow(prompt):
            await asyncio.sleep(5)

        model = MagicMock()
        model.generate_content_async = slow
        pipeline = InsightsPipeline(
            build_settings(GEMINI_TIMEOUT_SECONDS=0.01),
            model_factory=MagicMock(return_value=model),
        )

        with pytest.raises(UpstreamError) as exc_info:
            run(pipeline.generate_insights(REQUEST))
        assert exc_info.value.error_code == "GEMINI_TIMEOUT"

    def test_blocked_response_without_text_is_empty(self):
        class Blocked:
            @property
            def text(self):
                raise ValueError("no parts")

        model = MagicMock()
        model.generate_content_async = AsyncMock(return_value=Blocked())
        pipeline = InsightsPipeline(build_settings(), model_factory=MagicMock(return_value=model))

        assert run(pipeline.generate_insights(REQUEST)) == {}

    def test_strict_mode_rejects_non_json(self, model_factory):
        factory, _ = model_factory(text="not json")
        pipeline = InsightsPipeline(build_settings(STRICT_RESPONSE_SCHEMA=True), model_factory=factory)

        with pytest.raises(SchemaViolationError) as exc_info:
            run(pipeline.generate_insights(REQUEST))
        assert exc_info.value.status_code == 502

    def test_strict_mode_accepts_conformant_answer(self, model_factory):
        factory, _ = model_factory()
        pipeline = InsightsPipeline(build_settings(STRICT_RESPONSE_SCHEMA=True), model_factory=factory)

        assert run(pipeline.generate_insights(REQUEST)) == SAMPLE_INSIGHTS

    def test_gate_bounds_concurrent_calls(self):
        in_flight = 0
        peak = 0

        async def generate(prompt):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return SimpleNamespace(text="{}")

        model = MagicMock()
        model.generate_content_async = generate

        async def scenario():
            pipeline = InsightsPipeline(
                build_settings(),
                gate=asyncio.Semaphore(2),
                model_factory=MagicMock(return_value=model),
            )
            await asyncio.gather(*(pipeline.generate_insights(REQUEST) for _ in range(6)))

        run(scenario())
        assert peak == 2


class TestDisconnectHandling:
    """Work is cancelled when the client goes away."""

    def _request(self, disconnected: bool):
        return SimpleNamespace(
            url=SimpleNamespace(path="/api/ai/insights"),
            method="POST",
            is_disconnected=AsyncMock(return_value=disconnected),
        )

    def test_cancels_work_on_disconnect(self):
        cancelled = False

        async def slow_work():
            nonlocal cancelled
            try:
                await asyncio.sleep(5)
            except asyncio.CancelledError:
                cancelled = True
                raise

        with pytest.raises(ClientDisconnectedError):
            run(run_until_disconnected(self._request(True), slow_work(), poll_interval=0.01))
        assert cancelled

    def test_returns_result_while_connected(self):
        async def work():
            await asyncio.sleep(0.03)
            return {"ok": True}

        request = self._request(False)
        result = run(run_until_disconnected(request, work(), poll_interval=0.01))

        assert result == {"ok": True}
        assert request.is_disconnected.await_count >= 1
