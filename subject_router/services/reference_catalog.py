"""
Registry of subjects and the backends behind them.

Reference data is loaded once from a JSON file shaped like:

    {
      "subjects": [
        {"subject": "Invoices", "type": "relational",
         "reference": "dbo.Invoices", "connection": "Sales"},
        {"subject": "Handbook", "type": "document",
         "reference": "docs/handbook.pdf"}
      ],
      "connections": {"Sales": "mssql+aioodbc://..."}
    }

A connection value can be overridden with the environment variable
`<NAME>_CONNECTION_STRING`.
"""
import json
import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from subject_router.core.exceptions import ConfigurationError, SubjectNotFoundError
from subject_router.schemas.reference import ReferenceDescriptor

_ENV_NAME_RE = re.compile(r"[^A-Za-z0-9]+")


def connection_env_var(name: str) -> str:
    return f"{_ENV_NAME_RE.sub('_', name).strip('_').upper()}_CONNECTION_STRING"


class ReferenceCatalog:
    def __init__(
        self,
        descriptors: List[ReferenceDescriptor],
        connections: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._descriptors: Dict[str, ReferenceDescriptor] = {}
        for descriptor in descriptors:
            key = descriptor.subject.lower()
            if key in self._descriptors:
                raise ConfigurationError(f"Duplicate subject '{descriptor.subject}' in reference data.")
            self._descriptors[key] = descriptor
        self._connections = dict(connections or {})
        self._environ = os.environ if environ is None else environ

    @classmethod
    def from_dict(cls, data: Mapping, environ: Optional[Mapping[str, str]] = None) -> "ReferenceCatalog":
        try:
            descriptors = [ReferenceDescriptor.model_validate(item) for item in data.get("subjects", [])]
        except ValidationError as e:
            raise ConfigurationError(f"Invalid reference data: {e}") from e
        return cls(descriptors, data.get("connections") or {}, environ=environ)

    @classmethod
    def from_file(cls, path: str, environ: Optional[Mapping[str, str]] = None) -> "ReferenceCatalog":
        file_path = Path(path)
        if not file_path.is_file():
            raise ConfigurationError(f"Reference data file '{path}' not found.")
        try:
            data = json.loads(file_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Reference data file '{path}' is not valid JSON: {e}") from e

        catalog = cls.from_dict(data, environ=environ)
        logging.info(f"[ReferenceCatalog] Loaded {len(catalog.list_all())} subjects from {path}")
        return catalog

    def list_all(self) -> List[ReferenceDescriptor]:
        return list(self._descriptors.values())

    def subjects(self) -> List[str]:
        return [d.subject for d in self._descriptors.values()]

    def get(self, subject: str) -> ReferenceDescriptor:
        descriptor = self._descriptors.get(subject.strip().lower())
        if descriptor is None:
            raise SubjectNotFoundError(subject)
        return descriptor

    def connection_string(self, descriptor: ReferenceDescriptor) -> str:
        """Configured connection for the descriptor, else its reference."""
        name = descriptor.connection
        if name:
            value = self._environ.get(connection_env_var(name)) or self._connections.get(name)
            if value:
                return value
            logging.warning(
                f"[ReferenceCatalog] No connection configured for '{name}', "
                f"using reference of subject {descriptor.subject}"
            )
        return descriptor.reference

    def resolve(self, subject: str) -> Tuple[ReferenceDescriptor, str]:
        descriptor = self.get(subject)
        return descriptor, self.connection_string(descriptor)
