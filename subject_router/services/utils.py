import hashlib
import re
from typing import List

_COLLECTION_INVALID_RE = re.compile(r"[^a-z0-9_-]+")


def clean_user_text(raw_text: str) -> str:
    if not raw_text:
        return ""
    return " ".join(raw_text.split())


def collection_name(subject: str) -> str:
    """
    Map a subject to a name chromadb accepts (3-63 chars, alphanumeric ends).

    A digest of the subject is appended so subjects that sanitize to the same
    text still get separate collections.
    """
    key = subject.strip().lower()
    digest = hashlib.sha1(key.encode("utf-8")).hexdigest()[:8]
    name = _COLLECTION_INVALID_RE.sub("_", key)[:54].strip("_-") or "subject"
    return f"{name}_{digest}"


def chunk_text(text: str, chunk_size: int = 1000, overlap: int = 100) -> List[str]:
    """Split text into overlapping word-aligned passages of roughly `chunk_size` chars."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if not 0 <= overlap < chunk_size:
        raise ValueError("overlap must be between 0 and chunk_size")

    words = text.split()
    chunks: List[str] = []
    current: List[str] = []
    length = 0

    for word in words:
        if current and length + len(word) + 1 > chunk_size:
            chunks.append(" ".join(current))
            # carry trailing words into the next chunk
            carried: List[str] = []
            carried_len = 0
            for w in reversed(current):
                if carried_len + len(w) + 1 > overlap:
                    break
                carried.insert(0, w)
                carried_len += len(w) + 1
            current = carried
            length = carried_len
        current.append(word)
        length += len(word) + 1

    if current:
        chunks.append(" ".join(current))
    return chunks
