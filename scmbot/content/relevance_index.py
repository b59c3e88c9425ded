"""
Relevance index: TF-IDF scores of words per document.

Built by a separate job over all published content and consulted by the
indexed corpus supplier to decide which documents are worth fetching for a
query. Two stores share the same lookup() contract: an in-memory index
(tests, small sites) and a MySQL table managed by database_client.
"""

import logging
import math
from typing import AbstractSet, Any, Callable, Dict, Hashable, Iterable, List, Mapping, Tuple

from scmbot.transformers.tokenizer import tokenize
from scmbot.utils.text_cleanup import clean_content

logger = logging.getLogger(__name__)

Scores = Dict[str, Dict[Hashable, float]]


def build_relevance_scores(documents: Mapping[Hashable, str], stop_words: AbstractSet[str] = frozenset()) -> Scores:
    """Compute word -> (document id -> TF-IDF score).

    TF is the word count divided by the document length in tokens.
    IDF is smoothed: log((N + 1) / (df + 1)) + 1.

    Args:
        documents: Mapping of document id to cleaned text.
        stop_words: Tokens to leave out of the index.

    Returns:
        Sparse scores; words absent from a document have no entry for it.
    """
    n = len(documents)
    if n == 0:
        return {}

    term_counts: Dict[Hashable, Dict[str, int]] = {}
    lengths: Dict[Hashable, int] = {}
    document_frequency: Dict[str, int] = {}

    for doc_id, text in documents.items():
        tokens = tokenize(text, stop_words)
        counts: Dict[str, int] = {}
        for token in tokens:
            counts[token] = counts.get(token, 0) + 1
        term_counts[doc_id] = counts
        lengths[doc_id] = len(tokens)
        for token in counts:
            document_frequency[token] = document_frequency.get(token, 0) + 1

    idf = {
        term: math.log((n + 1) / (freq + 1)) + 1.0
        for term, freq in document_frequency.items()
    }

    scores: Scores = {}
    for doc_id, counts in term_counts.items():
        length = lengths[doc_id]
        for term, count in counts.items():
            scores.setdefault(term, {})[doc_id] = (count / length) * idf[term]

    return scores


class RelevanceIndex:
    """In-memory relevance index."""

    def __init__(self, scores: Scores = None):
        self._scores: Scores = scores or {}

    @classmethod
    def from_documents(cls, documents: Mapping[Hashable, str], stop_words: AbstractSet[str] = frozenset()):
        return cls(build_relevance_scores(documents, stop_words))

    def lookup(self, words: Iterable[str]) -> Scores:
        return {word: dict(self._scores[word]) for word in words if word in self._scores}

    def to_rows(self) -> List[Tuple[str, Hashable, float]]:
        return [
            (word, doc_id, score)
            for word, postings in self._scores.items()
            for doc_id, score in postings.items()
        ]

    def __len__(self):
        return len(self._scores)


class SqlRelevanceIndex:
    """Relevance index stored in the scm_relevance_index table."""

    def lookup(self, words: Iterable[str]) -> Scores:
        from scmbot import database_client

        scores: Scores = {}
        for row in database_client.lookup_relevance_scores(words):
            scores.setdefault(row["word"], {})[row["document_id"]] = float(row["score"])
        return scores

    def store(self, index: RelevanceIndex) -> int:
        from scmbot import database_client

        return database_client.replace_relevance_index(index.to_rows())


def rebuild_relevance_index(
    fetch_documents: Callable[[], List[Dict[str, Any]]],
    store: Any,
    stop_words: AbstractSet[str] = frozenset(),
) -> RelevanceIndex:
    """Build the index from every published document and hand it to the store.

    Args:
        fetch_documents: Returns {"id", "content"} rows (raw HTML content).
        store: Object with a store(RelevanceIndex) method.
        stop_words: Tokens to leave out of the index.

    Returns:
        The freshly built index.
    """
    rows = fetch_documents()
    documents = {row["id"]: clean_content(row["content"]) for row in rows}
    index = RelevanceIndex.from_documents(documents, stop_words)
    store.store(index)
    logger.info(f"[INDEX] Rebuilt relevance index: {len(index)} words over {len(documents)} documents")
    return index
