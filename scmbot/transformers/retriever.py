"""
Sentence ranking for the Sentential Context Model.

Vectorizes every corpus sentence and the query against the same
co-occurrence matrix, scores each sentence by cosine similarity and picks
the best one. The key statistics are logged so operators can tune the
similarity threshold.
"""

import logging
from dataclasses import dataclass
from typing import AbstractSet, List, Mapping, Sequence

from .similarity import cosine_similarity, vectorize
from .tokenizer import tokenize

logger = logging.getLogger(__name__)


@dataclass
class RankResult:
    """Outcome of scoring every sentence against the query."""
    best_index: int
    scores: List[float]
    highest: float
    average: float
    matches_above_threshold: int
    total_sentences: int


def rank(
    query_tokens: Sequence[str],
    sentences: Sequence[str],
    embeddings: Mapping[str, Mapping[str, int]],
    stop_words: AbstractSet[str] = frozenset(),
    similarity_threshold: float = 0.2,
) -> RankResult:
    """Score every sentence against the query and find the best match.

    Ties go to the first sentence with the highest score.

    Args:
        query_tokens: Tokenized query.
        sentences: Corpus sentences in order.
        embeddings: Co-occurrence matrix built from the corpus.
        stop_words: Stop words applied when tokenizing each sentence.
        similarity_threshold: Only used for the "matches above threshold" statistic.

    Returns:
        RankResult with the best index, all scores and key statistics.
    """
    query_vector = vectorize(query_tokens, embeddings)

    scores = []
    for sentence in sentences:
        sentence_vector = vectorize(tokenize(sentence, stop_words), embeddings)
        scores.append(cosine_similarity(query_vector, sentence_vector))

    if not scores:
        # split_sentences() always yields at least one sentence, but callers may not use it
        scores = [0.0]

    best_index = 0
    for index, score in enumerate(scores):
        if score > scores[best_index]:
            best_index = index

    highest = scores[best_index]
    average = sum(scores) / len(scores)
    matches = sum(1 for score in scores if score > similarity_threshold)

    logger.info("[SCM] Key Stats:")
    logger.info(f"[SCM]  - Highest Similarity: {highest}")
    logger.info(f"[SCM]  - Average Similarity: {average}")
    logger.info(f"[SCM]  - Matches Above Threshold: {matches}")
    logger.info(f"[SCM]  - Total Sentences Analyzed: {len(sentences)}")

    return RankResult(
        best_index=best_index,
        scores=scores,
        highest=highest,
        average=average,
        matches_above_threshold=matches,
        total_sentences=len(sentences),
    )


def is_confident(result: RankResult, similarity_threshold: float) -> bool:
    """True when the best score reaches the threshold; below it the fallback fires."""
    return result.highest >= similarity_threshold
