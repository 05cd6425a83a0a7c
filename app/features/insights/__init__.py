"""
Insights feature module.
"""

from app.features.insights.routes import router
from app.features.insights.services import InsightsPipeline

__all__ = [
    "router",
    "InsightsPipeline",
]
