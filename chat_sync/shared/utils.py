"""Shared utility functions."""
from datetime import datetime, tzinfo
from typing import Iterable, List

TAG_VOCABULARY = (
    "demo",
    "internal",
    "signup",
    "content",
    "support",
)


def contains_ci(text: str | None, needle: str) -> bool:
    """Return True if needle occurs in text, ignoring case."""
    if not text:
        return False
    return needle.lower() in text.lower()


def matching_terms(text: str | None, vocabulary: Iterable[str] = TAG_VOCABULARY) -> List[str]:
    """Return every vocabulary term found in text, in vocabulary order."""
    return [term for term in vocabulary if contains_ci(text, term)]


def initials(name: str | None, length: int = 2) -> str:
    if not name:
        return ""
    return name[:length].upper()


def as_local(value: datetime, tz: tzinfo | None) -> datetime:
    """Express value in tz; naive values are taken to be wall-clock time in tz already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)
