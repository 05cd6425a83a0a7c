"""
Shared fixtures for the test suite.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.config import Settings


SAMPLE_INSIGHTS = {
    "breakdown": "x",
    "saving_tips": ["a"],
    "risk_areas": ["b"],
    "financial_health_score": 72,
}

SAMPLE_INSIGHTS_TEXT = (
    '{"breakdown":"x","saving_tips":["a"],"risk_areas":["b"],"financial_health_score":72}'
)

SAMPLE_REQUEST = {
    "transactions": [{"amount": -50, "category": "food"}],
    "budgets": [{"category": "food", "limit": 200}],
    "month": 3,
    "year": 2024,
}


def build_settings(**overrides) -> Settings:
    """Settings isolated from the developer's environment files."""
    values = {
        "GEMINI_API_KEY": "test-key",
        "VITE_SUPABASE_URL": None,
        "ENVIRONMENT": "development",
        "NODE_ENV": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def build_model(text=None, side_effect=None) -> MagicMock:
    """A stand-in GenerativeModel whose async call returns the given text."""
    model = MagicMock()
    model.generate_content_async = AsyncMock(
        return_value=SimpleNamespace(text=text),
        side_effect=side_effect,
    )
    return model


@pytest.fixture
def model_factory():
    """Returns (factory, model); factory records the invocation configs it receives."""

    def make(text=SAMPLE_INSIGHTS_TEXT, side_effect=None):
        model = build_model(text=text, side_effect=side_effect)
        factory = MagicMock(return_value=model)
        return factory, model

    return make
