from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReferenceType(str, Enum):
    RELATIONAL = "relational"
    DOCUMENT = "document"


# Legacy names accepted in reference data files
_TYPE_ALIASES = {
    "sql": ReferenceType.RELATIONAL,
    "pdf": ReferenceType.DOCUMENT,
}


class ReferenceDescriptor(BaseModel):
    """Static description of the backend behind one subject."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: str
    type: ReferenceType
    reference: str
    connection: Optional[str] = Field(default=None, alias="connection_identifier")

    @field_validator("subject", "reference", mode="before")
    @classmethod
    def strip_required(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("must be a non-empty string")
        return v.strip()

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, str):
            key = v.strip().lower()
            return _TYPE_ALIASES.get(key, key)
        return v
