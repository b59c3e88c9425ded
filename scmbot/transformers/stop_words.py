"""
Stop word list for the Sentential Context Model.

The set is loaded once per process and passed explicitly to every component
that filters tokens. Entries go through the same letter filter as corpus
text, so "don't" in a stop word file matches the token "dont".
"""

import logging
from pathlib import Path
from typing import FrozenSet, Iterable, Optional

from .tokenizer import normalize_text

logger = logging.getLogger(__name__)

DEFAULT_STOP_WORDS = (
    "a", "about", "above", "after", "again", "against", "all", "am", "an", "and",
    "any", "are", "arent", "as", "at", "be", "because", "been", "before", "being",
    "below", "between", "both", "but", "by", "can", "cant", "could", "couldnt",
    "did", "didnt", "do", "does", "doesnt", "doing", "dont", "down", "during",
    "each", "few", "for", "from", "further", "had", "hadnt", "has", "hasnt",
    "have", "havent", "having", "he", "hed", "hell", "her", "here", "heres",
    "hers", "herself", "hes", "him", "himself", "his", "how", "hows", "i", "id",
    "if", "ill", "im", "in", "into", "is", "isnt", "it", "its", "itself", "ive",
    "just", "lets", "me", "more", "most", "mustnt", "my", "myself", "no", "nor",
    "not", "now", "of", "off", "on", "once", "only", "or", "other", "ought",
    "our", "ours", "ourselves", "out", "over", "own", "same", "shant", "she",
    "shed", "shell", "shes", "should", "shouldnt", "so", "some", "such", "than",
    "that", "thats", "the", "their", "theirs", "them", "themselves", "then",
    "there", "theres", "these", "they", "theyd", "theyll", "theyre", "theyve",
    "this", "those", "through", "to", "too", "under", "until", "up", "very",
    "was", "wasnt", "we", "wed", "well", "were", "werent", "weve", "what",
    "whats", "when", "whens", "where", "wheres", "which", "while", "who",
    "whom", "whos", "why", "whys", "will", "with", "wont", "would", "wouldnt",
    "you", "youd", "youll", "your", "youre", "yours", "yourself", "yourselves",
    "youve",
)


def load_stop_words(path: Optional[str] = None, extra: Iterable[str] = ()) -> FrozenSet[str]:
    """Load the process-wide stop word set.

    Args:
        path: Optional file with one stop word per line. Blank lines and
              lines starting with '#' are ignored. When None, the built-in
              English list is used.
        extra: Additional words to include.

    Returns:
        Frozen set of normalized stop words.
    """
    if path:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
        words = [line.strip() for line in lines if line.strip() and not line.strip().startswith("#")]
        logger.info(f"[STOP_WORDS] Loaded {len(words)} stop words from {path}")
    else:
        words = list(DEFAULT_STOP_WORDS)

    normalized = set()
    for word in list(words) + list(extra):
        normalized.update(normalize_text(word).split())

    return frozenset(normalized)
