"""
Co-occurrence embedding builder.

The "embedding" of a word is the sparse row of counts of the words seen
within window_size positions of it, on either side, across the corpus.
"""

import logging
from typing import Dict, Sequence

logger = logging.getLogger(__name__)

CooccurrenceMatrix = Dict[str, Dict[str, int]]


def build_cooccurrence_matrix(tokens: Sequence[str], window_size: int) -> CooccurrenceMatrix:
    """Build the co-occurrence matrix for a token sequence.

    For each position i, every position j in
    [max(0, i - window_size), min(len - 1, i + window_size)] with j != i
    increments matrix[tokens[i]][tokens[j]] by one. Every token gets a row,
    even when the window contributes nothing to it.

    Args:
        tokens: Normalized, stop-word-filtered tokens in corpus order.
        window_size: Number of neighbours considered on each side.

    Returns:
        Mapping of word -> (context word -> count).

    Raises:
        ValueError: If window_size is negative.
    """
    if window_size < 0:
        raise ValueError(f"window_size must be non-negative, got {window_size}")

    matrix: CooccurrenceMatrix = {}
    last = len(tokens) - 1

    for i, word in enumerate(tokens):
        row = matrix.setdefault(word, {})
        for j in range(max(0, i - window_size), min(last, i + window_size) + 1):
            if j == i:
                continue
            context_word = tokens[j]
            row[context_word] = row.get(context_word, 0) + 1

    logger.debug(
        f"[SCM] Built co-occurrence matrix: {len(matrix)} words from "
        f"{len(tokens)} tokens (window {window_size})"
    )
    return matrix
