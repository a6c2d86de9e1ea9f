"""
Schema and Data Models module.

This module contains Pydantic models for request/response validation and
static reference data:
- ConverseRequest / ConverseResponse: one conversation turn over HTTP
- ReferenceDescriptor / ReferenceType: the backend behind a subject
"""

from .chat import ConverseRequest, ConverseResponse
from .reference import ReferenceDescriptor, ReferenceType

__all__ = [
    "ConverseRequest",
    "ConverseResponse",
    "ReferenceDescriptor",
    "ReferenceType",
]
