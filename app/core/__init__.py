"""
Core initialization module.
"""

from app.core.config import get_settings, settings, Settings
from app.core.logging import setup_logging, get_logger
from app.core.dependencies import (
    ModelInvocationConfig,
    create_gemini_model,
    get_insights_gate,
)
from app.core.exceptions import (
    ApplicationError,
    ValidationError,
    ConfigurationError,
    ServiceError,
    UpstreamError,
    SchemaViolationError,
    ClientDisconnectedError,
)

__all__ = [
    "get_settings",
    "settings",
    "Settings",
    "setup_logging",
    "get_logger",
    "ModelInvocationConfig",
    "create_gemini_model",
    "get_insights_gate",
    "ApplicationError",
    "ValidationError",
    "ConfigurationError",
    "ServiceError",
    "UpstreamError",
    "SchemaViolationError",
    "ClientDisconnectedError",
]
