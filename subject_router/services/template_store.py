import json
from pathlib import Path
from typing import Dict

from subject_router.core.exceptions import ConfigurationError, TemplateNotFoundError

PROMPTS = "prompts"
RESPONSES = "responses"


class TemplateStore:
    """
    Key -> template lookup backed by `<file_key>.json` files in one directory.

    Files are re-read on every lookup so templates can be edited while the
    service is running.
    """

    def __init__(self, templates_dir: str):
        self.templates_dir = Path(templates_dir)

    def _load(self, file_key: str) -> Dict[str, str]:
        path = self.templates_dir / f"{file_key}.json"
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise TemplateNotFoundError(file_key, "*") from None
        except ValueError as e:
            raise ConfigurationError(f"Template file {path} is not valid JSON: {e}") from e

    def get(self, file_key: str, message_key: str) -> str:
        value = self._load(file_key).get(message_key)
        if not value:
            raise TemplateNotFoundError(file_key, message_key)
        return str(value)

    def prompt(self, key: str, **fields) -> str:
        template = self.get(PROMPTS, key)
        return template.format(**fields) if fields else template

    def response(self, key: str) -> str:
        return self.get(RESPONSES, key)
