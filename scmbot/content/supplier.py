"""
Corpus suppliers for the Sentential Context Model.

A supplier turns a query into the raw text the model answers from. Two
strategies share the fetch_relevant_text() contract:

    - PublishedContentSupplier scans every published post and page.
    - IndexedCorpusSupplier asks the relevance index which documents match
      the query and fetches only those, falling back to the full scan when
      the index has nothing for the query.

Data-access errors propagate; the model logs them and treats the request as
having no corpus.
"""

import logging
from typing import AbstractSet, Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple

from scmbot.transformers.tokenizer import tokenize
from scmbot.utils.text_cleanup import clean_content

logger = logging.getLogger(__name__)

FULL_SCAN = "full"
INDEXED = "indexed"


def combine_documents(rows: Iterable[Dict[str, Any]]) -> str:
    """Join raw document contents and clean them into one corpus string."""
    content = " ".join(row.get("content") or "" for row in rows)

    logger.info(f"[SUPPLIER] Content in characters: {len(content)}")
    logger.info(f"[SUPPLIER] Content in MB: {len(content) / 1024 / 1024:.4f} MB")

    content = clean_content(content)

    logger.info(f"[SUPPLIER] Content in characters after cleanup: {len(content)}")
    logger.info(f"[SUPPLIER] Content in MB after cleanup: {len(content) / 1024 / 1024:.4f} MB")
    return content


class StaticCorpusSupplier:
    """Answers every query from a fixed set of documents."""

    def __init__(self, documents: Sequence[str]):
        self.documents = list(documents)

    def fetch_relevant_text(self, query: str) -> str:
        return combine_documents({"content": document} for document in self.documents)


class PublishedContentSupplier:
    """Scans all published content."""

    def __init__(self, fetch_documents: Optional[Callable[[], List[Dict[str, Any]]]] = None):
        if fetch_documents is None:
            from scmbot import database_client
            fetch_documents = database_client.fetch_published_content
        self.fetch_documents = fetch_documents

    def fetch_relevant_text(self, query: str) -> str:
        rows = self.fetch_documents()
        if not rows:
            logger.warning("[SUPPLIER] No published content found")
            return ""
        return combine_documents(rows)


class IndexedCorpusSupplier:
    """Fetches only the documents the relevance index associates with the query.

    The query tokens are grouped into consecutive windows of word_window
    words. A document matches a group when the index scores it for every word
    of the group; its relevance is the sum of those scores over all matched
    groups. When no group matches, single words are tried before giving up
    and falling back to the full scan.
    """

    def __init__(
        self,
        index,
        fetch_documents_by_ids: Optional[Callable[[List[Hashable]], List[Dict[str, Any]]]] = None,
        fallback=None,
        stop_words: AbstractSet[str] = frozenset(),
        word_window: int = 2,
        max_documents: int = 25,
    ):
        if word_window < 1:
            raise ValueError(f"word_window must be at least 1, got {word_window}")
        if max_documents < 1:
            raise ValueError(f"max_documents must be at least 1, got {max_documents}")
        if fetch_documents_by_ids is None:
            from scmbot import database_client
            fetch_documents_by_ids = database_client.fetch_content_by_ids

        self.index = index
        self.fetch_documents_by_ids = fetch_documents_by_ids
        self.fallback = fallback
        self.stop_words = stop_words
        self.word_window = word_window
        self.max_documents = max_documents

    def _score_groups(self, groups: List[List[str]], scores) -> Dict[Hashable, float]:
        totals: Dict[Hashable, float] = {}
        for group in groups:
            postings = [scores.get(word, {}) for word in group]
            if not all(postings):
                continue
            shared = set(postings[0])
            for posting in postings[1:]:
                shared &= set(posting)
            for doc_id in shared:
                totals[doc_id] = totals.get(doc_id, 0.0) + sum(posting[doc_id] for posting in postings)
        return totals

    def match_documents(self, query: str) -> List[Tuple[Hashable, float]]:
        """Return up to max_documents (document id, score) pairs, best first."""
        tokens = list(dict.fromkeys(tokenize(query, self.stop_words)))
        if not tokens:
            return []

        scores = self.index.lookup(tokens)
        groups = [tokens[i:i + self.word_window] for i in range(0, len(tokens), self.word_window)]
        totals = self._score_groups(groups, scores)
        if not totals and self.word_window > 1:
            totals = self._score_groups([[token] for token in tokens], scores)

        ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
        return ranked[:self.max_documents]

    def fetch_relevant_text(self, query: str) -> str:
        matches = self.match_documents(query)
        if not matches:
            logger.info("[SUPPLIER] No relevance index entry matches the query")
            if self.fallback is None:
                return ""
            logger.info("[SUPPLIER] Falling back to all published content")
            return self.fallback.fetch_relevant_text(query)

        rows = self.fetch_documents_by_ids([doc_id for doc_id, _ in matches])
        logger.info(f"[SUPPLIER] Index matched {len(matches)} documents, fetched {len(rows)}")
        if not rows:
            return ""
        return combine_documents(rows)


def create_supplier(strategy: str = None, stop_words: AbstractSet[str] = frozenset()):
    """Build the configured corpus supplier ("full" or "indexed")."""
    from scmbot import config
    from .relevance_index import SqlRelevanceIndex

    strategy = (strategy or config.SCM_CORPUS_STRATEGY).lower()
    full_scan = PublishedContentSupplier()

    if strategy == FULL_SCAN:
        return full_scan
    if strategy == INDEXED:
        return IndexedCorpusSupplier(
            SqlRelevanceIndex(),
            fallback=full_scan,
            stop_words=stop_words,
            word_window=config.SCM_INDEX_WORD_WINDOW,
            max_documents=config.SCM_INDEX_MAX_DOCUMENTS,
        )
    raise ValueError(f"Unknown corpus strategy: {strategy!r}")
