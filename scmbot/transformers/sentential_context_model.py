"""
Sentential Context Model pipeline.

query -> corpus supplier -> co-occurrence matrix (cached or built)
      -> sentence ranking -> fallback or budgeted response assembly

Only the two fallback paths draw randomness; the retrieval path is
deterministic for a given corpus, query and settings.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import FrozenSet, Optional, Protocol, Tuple

from .assembler import ResponseBudget, assemble
from .embedding_cache import EmbeddingCache
from .embeddings import CooccurrenceMatrix, build_cooccurrence_matrix
from .retriever import is_confident, rank
from .tokenizer import split_sentences, tokenize

logger = logging.getLogger(__name__)


class CorpusSupplier(Protocol):
    def fetch_relevant_text(self, query: str) -> str:
        """Return the raw text the query should be answered from."""
        ...


@dataclass(frozen=True)
class ModelSettings:
    window_size: int = 3
    similarity_threshold: float = 0.2
    budget: ResponseBudget = field(default_factory=ResponseBudget)
    no_content_responses: Tuple[str, ...] = ()
    low_similarity_responses: Tuple[str, ...] = ()
    stop_words: FrozenSet[str] = frozenset()

    def __post_init__(self):
        # Accept any iterable but store immutable values so settings stay hashable
        object.__setattr__(self, "no_content_responses", tuple(self.no_content_responses))
        object.__setattr__(self, "low_similarity_responses", tuple(self.low_similarity_responses))
        object.__setattr__(self, "stop_words", frozenset(self.stop_words))
        if self.window_size < 0:
            raise ValueError(f"window_size must be non-negative, got {self.window_size}")
        if not self.no_content_responses:
            raise ValueError("no_content_responses must not be empty")
        if not self.low_similarity_responses:
            raise ValueError("low_similarity_responses must not be empty")

    @classmethod
    def from_config(cls) -> "ModelSettings":
        """Build settings from scmbot.config (environment / .env)."""
        from scmbot import config
        from .stop_words import load_stop_words

        return cls(
            window_size=config.SCM_WINDOW_SIZE,
            similarity_threshold=config.SCM_SIMILARITY_THRESHOLD,
            budget=ResponseBudget(
                max_sentences=config.SCM_MAX_SENTENCES,
                max_tokens=config.SCM_MAX_TOKENS,
                before_sentence_ratio=config.SCM_BEFORE_SENTENCE_RATIO,
                before_token_ratio=config.SCM_BEFORE_TOKEN_RATIO,
            ),
            no_content_responses=tuple(config.SCM_NO_CONTENT_RESPONSES),
            low_similarity_responses=tuple(config.SCM_LOW_SIMILARITY_RESPONSES),
            stop_words=load_stop_words(config.SCM_STOP_WORDS_PATH),
        )


class SententialContextModel:
    """Answers a query from supplied text using co-occurrence statistics.

    Usage:
        model = SententialContextModel(ModelSettings.from_config(), supplier)
        answer = model.respond("What are your opening hours?")
    """

    def __init__(
        self,
        settings: ModelSettings,
        supplier: CorpusSupplier,
        cache: Optional[EmbeddingCache] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings
        self.supplier = supplier
        self.cache = cache
        self._rng = rng or random.Random()

    def respond(self, query: str) -> str:
        """Fetch the corpus for the query and answer from it."""
        try:
            corpus = self.supplier.fetch_relevant_text(query)
        except Exception as e:
            logger.exception(f"[SCM] Corpus supplier failed, continuing with empty corpus: {e}")
            corpus = ""

        if self._is_no_content(corpus):
            logger.info("[SCM] No matching content available")
            return self._rng.choice(self.settings.no_content_responses)

        return self.generate_response(query, corpus)

    def _is_no_content(self, corpus: Optional[str]) -> bool:
        if not corpus or not corpus.strip():
            return True
        return corpus.strip() in self.settings.no_content_responses

    def embeddings_for(self, corpus: str) -> CooccurrenceMatrix:
        """Read-through cache for the corpus co-occurrence matrix."""
        if self.cache is not None:
            cached = self.cache.load(corpus, self.settings.window_size, self.settings.stop_words)
            if cached is not None:
                return cached
        return self.rebuild_embeddings(corpus)

    def rebuild_embeddings(self, corpus: str) -> CooccurrenceMatrix:
        """Build the matrix from scratch and replace the cached copy, if any."""
        window_size = self.settings.window_size
        matrix = build_cooccurrence_matrix(tokenize(corpus, self.settings.stop_words), window_size)

        if self.cache is not None:
            try:
                self.cache.store(corpus, window_size, matrix, self.settings.stop_words)
            except OSError as e:
                logger.error(f"[SCM] Could not write embedding cache: {e}")
        return matrix

    def generate_response(self, query: str, corpus: str) -> str:
        """Answer the query from the given corpus text."""
        settings = self.settings
        logger.info(f"[SCM] Window Size: {settings.window_size}")
        logger.info(f"[SCM] Max Tokens: {settings.budget.max_tokens}")

        embeddings = self.embeddings_for(corpus)
        sentences = split_sentences(corpus)
        query_tokens = tokenize(query, settings.stop_words)

        result = rank(
            query_tokens,
            sentences,
            embeddings,
            stop_words=settings.stop_words,
            similarity_threshold=settings.similarity_threshold,
        )

        if not is_confident(result, settings.similarity_threshold):
            logger.info(f"[SCM] Low similarity detected: {result.highest}")
            return self._rng.choice(settings.low_similarity_responses)

        return assemble(result.best_index, sentences, settings.budget)
