"""
Services module.

This module contains the routing pipeline and its collaborators:
- conversation_router: classifies queries and dispatches them per subject
- relational_processor / document_processor: per-backend answer generation
- reference_catalog: subject registry and connection lookup
- session_store / cache: expiring per-requestor history and TTL caches
- llm_client: language model completions (Ollama or OpenAI-compatible)
- memory_store / embedder: chromadb passage index with local embeddings
- sql_driver / document_driver: relational and document data access
- template_store: prompt and response templates
"""

from .cache import TTLCache
from .classifier import parse_classification
from .conversation_router import ConversationRouter
from .reference_catalog import ReferenceCatalog
from .session_store import ChatHistory, ChatRole, SessionStore
from .template_store import TemplateStore

__all__ = [
    "TTLCache",
    "parse_classification",
    "ConversationRouter",
    "ReferenceCatalog",
    "ChatHistory",
    "ChatRole",
    "SessionStore",
    "TemplateStore",
]
