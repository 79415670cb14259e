"""Whitespace normalization and sentence helpers shared by extractors and builders."""

import re

_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")


def normalize_text(text: str | None) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text).strip()


def first_sentences(text: str | None, max_sentences: int) -> str:
    """Return the first ``max_sentences`` sentences of normalized text ('' if empty)."""
    cleaned = normalize_text(text)
    if not cleaned:
        return ""
    parts = _SENTENCE_END_RE.split(cleaned)
    return " ".join(parts[:max_sentences]).strip()
