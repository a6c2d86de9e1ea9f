"""
Subject Router application.

Routes free-text queries to the data subject they concern and answers them:
- API routes (FastAPI endpoints) and an interactive CLI
- Services (classification, dispatch, processors, caches, drivers)
- Schemas (request/response models and reference data)
- Core (configuration and error types)
"""

from subject_router.core.exceptions import NotFoundError, RateLimitedError
from subject_router.schemas.reference import ReferenceDescriptor, ReferenceType
from subject_router.services.conversation_router import ConversationRouter

__all__ = [
    "NotFoundError",
    "RateLimitedError",
    "ReferenceDescriptor",
    "ReferenceType",
    "ConversationRouter",
]
