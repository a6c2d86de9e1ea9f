from pathlib import Path

import pdfplumber
from fastapi.concurrency import run_in_threadpool

from subject_router.core.exceptions import BackendError


def _extract_pdf(path: Path) -> str:
    """Extract text from each PDF page and concatenate with newlines."""
    text = []

    with pdfplumber.open(path) as pdf:
        for page in pdf.pages:
            text.append(page.extract_text() or "")

    return "\n".join(text)


def _extract_txt(path: Path) -> str:
    """Read UTF-8 text with decoding errors ignored."""
    return path.read_text(encoding="utf-8", errors="ignore")


class DocumentDriver:
    """Reads the full text of a document referenced by a file path."""

    def _resolve(self, path: str) -> Path:
        return Path(path).expanduser().resolve()

    async def can_connect(self, path: str) -> bool:
        return self._resolve(path).is_file()

    async def extract_text(self, path: str) -> str:
        resolved = self._resolve(path)
        if not resolved.is_file():
            raise BackendError(f"Document '{path}' not found.")

        extract = _extract_pdf if resolved.suffix.lower() == ".pdf" else _extract_txt
        try:
            return await run_in_threadpool(extract, resolved)
        except OSError as e:
            raise BackendError(f"Failed to read '{path}': {e}") from e
