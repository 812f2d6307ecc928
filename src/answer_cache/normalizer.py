"""Question normalization and hashing.

Two questions that differ only in case, accents, punctuation or spacing
normalize to the same text and therefore share one exact-cache key.
"""

import hashlib
import re
import unicodedata
from dataclasses import dataclass

_NON_ALNUM = re.compile(r"[^\w\s]|_")
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class NormalizedQuestion:
    normalized: str
    question_hash: str


def normalize(text: str) -> str:
    """Canonicalize a question.

    Case-folds, strips diacritics, drops anything that is not a letter,
    digit or whitespace, collapses whitespace runs and trims.
    """
    if not text:
        return ""

    text = unicodedata.normalize("NFKD", text.casefold())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _NON_ALNUM.sub("", text)
    return _WHITESPACE.sub(" ", text).strip()


def hash_text(normalized: str) -> str:
    """SHA-256 hex digest of already-normalized text."""
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()


def question_hash(text: str) -> str:
    """Hash of the normalized form of ``text``."""
    return hash_text(normalize(text))


def normalize_question(text: str) -> NormalizedQuestion:
    normalized = normalize(text)
    return NormalizedQuestion(normalized=normalized, question_hash=hash_text(normalized))
