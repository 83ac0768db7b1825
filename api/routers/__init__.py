"""
Router package for the Bad Idea API.

This package contains all API routers organized by domain:
- health: Health check endpoints
- ideas: Daily Bad Idea and archive
- roast: Idea Roaster (quota-limited)
- advisor_chat: Devil's Advocate SSE streaming (quota-limited)
- usage: Quota lookup
- internal: Scheduled idea pre-generation
"""

from api.routers.health import router as health_router
from api.routers.ideas import router as ideas_router
from api.routers.roast import router as roast_router
from api.routers.advisor_chat import router as advisor_chat_router
from api.routers.usage import router as usage_router
from api.routers.internal import router as internal_router

__all__ = [
    "health_router",
    "ideas_router",
    "roast_router",
    "advisor_chat_router",
    "usage_router",
    "internal_router",
]
