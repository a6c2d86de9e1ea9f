"""
Parsing of the subject classification reply.

Contract with the `is_classified` prompt: the model answers with exactly one
subject name from the offered list, or with the word `None` when the query
concerns no subject. The reply is normalized (surrounding whitespace, quotes,
backticks, trailing punctuation) and then:

- the sentinel `None` (any casing) is unclassified
- a reply equal to a known subject (any casing) selects that subject
- anything else is unclassified; the parser never guesses
"""
from typing import Iterable, Optional

UNCLASSIFIED_SENTINEL = "none"

_STRIP_CHARS = " \t\r\n\"'`*.,;:!"


def normalize_reply(reply: str) -> str:
    return (reply or "").strip().strip(_STRIP_CHARS).strip()


def parse_classification(reply: str, subjects: Iterable[str]) -> Optional[str]:
    """
    Map a classification reply to one of `subjects`.

    Returns:
        The matching subject name as registered, or None when unclassified
    """
    candidate = normalize_reply(reply)
    lowered = candidate.lower()
    if not lowered or lowered == UNCLASSIFIED_SENTINEL:
        return None

    for subject in subjects:
        if subject.lower() == lowered:
            return subject
    return None
