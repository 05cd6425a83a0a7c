"""
Shared components and utilities initialization.
"""

from app.shared.schemas import (
    ErrorResponse,
    HealthEnvironment,
    HealthResponse,
    InsightsRequest,
    InsightsResponse,
)

from app.shared.utils import (
    to_json_text,
    load_json_object,
    run_gated,
    run_until_disconnected,
    Timer,
)

__all__ = [
    # Schemas
    "ErrorResponse",
    "HealthEnvironment",
    "HealthResponse",
    "InsightsRequest",
    "InsightsResponse",
    # Utils
    "to_json_text",
    "load_json_object",
    "run_gated",
    "run_until_disconnected",
    "Timer",
]
