"""
Tokenizer and normalizer for the Sentential Context Model.

Every component that turns text into tokens goes through tokenize(), so the
corpus, each sentence and the visitor's query are normalized identically.
Letters are recognized by Unicode category, not by an ASCII range, so
non-English content is not silently emptied.
"""

import re
import unicodedata
from typing import AbstractSet, List

# Terminal punctuation followed by whitespace ends a sentence
SENTENCE_BOUNDARY = re.compile(r"(?<=[.?!])\s+")


def _keep_char(char: str) -> bool:
    # Letters, combining marks (needed by Devanagari, Thai, ...) and whitespace
    return char.isspace() or unicodedata.category(char)[0] in ("L", "M")


def normalize_text(text: str) -> str:
    """Canonically compose the text, drop everything but letters and whitespace, lower-case it."""
    if not text:
        return ""
    composed = unicodedata.normalize("NFC", text)
    letters_only = "".join(char for char in composed if _keep_char(char))
    return letters_only.lower()


def tokenize(text: str, stop_words: AbstractSet[str] = frozenset()) -> List[str]:
    """Split text into normalized tokens with stop words removed.

    Args:
        text: Raw text (corpus, sentence or query).
        stop_words: Tokens to exclude.

    Returns:
        Tokens in their original order. Empty input yields an empty list.
    """
    return [token for token in normalize_text(text).split() if token not in stop_words]


def split_sentences(text: str) -> List[str]:
    """Segment text on '.', '?' or '!' followed by whitespace.

    Empty text yields a single empty sentence.
    """
    return SENTENCE_BOUNDARY.split(text or "")


def count_words(text: str) -> int:
    """Surface word count (whitespace-delimited), used for response budgets."""
    return len(text.split())
