"""
Core configuration and shared error types.

This module contains application-wide settings and exceptions:
- config: environment variables and their defaults
- exceptions: the error taxonomy used across services
"""

from .exceptions import (
    SubjectRouterError,
    ConfigurationError,
    NotFoundError,
    SubjectNotFoundError,
    TemplateNotFoundError,
    LanguageModelError,
    RateLimitedError,
    BackendError,
)

__all__ = [
    "SubjectRouterError",
    "ConfigurationError",
    "NotFoundError",
    "SubjectNotFoundError",
    "TemplateNotFoundError",
    "LanguageModelError",
    "RateLimitedError",
    "BackendError",
]
