"""
API Routes module.

This module contains all FastAPI route handlers organized by resource:
- chat: conversation turns, subjects, prompt and response templates
- sessions: per-requestor history endpoints
"""

from .chat import router as chat_router
from .sessions import router as sessions_router

__all__ = [
    "chat_router",
    "sessions_router",
]
