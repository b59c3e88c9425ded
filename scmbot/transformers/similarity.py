"""
Sentence vectors and cosine similarity over sparse mappings.
"""

import math
from typing import Dict, Mapping, Sequence

SentenceVector = Dict[str, float]


def vectorize(tokens: Sequence[str], embeddings: Mapping[str, Mapping[str, int]]) -> SentenceVector:
    """Average the embedding rows of the tokens that have one.

    A token contributes iff it is a key of embeddings (an empty row still
    counts). With no contributing token the result is the empty vector.
    """
    vector: SentenceVector = {}
    contributing = 0

    for token in tokens:
        row = embeddings.get(token)
        if row is None:
            continue
        for context_word, count in row.items():
            vector[context_word] = vector.get(context_word, 0.0) + count
        contributing += 1

    if contributing > 0:
        for key in vector:
            vector[key] /= contributing

    return vector


def cosine_similarity(vector_a: Mapping[str, float], vector_b: Mapping[str, float]) -> float:
    """Dot product over the shared keys divided by the full magnitudes.

    Returns 0.0 when the vectors share no key or either magnitude is zero.
    """
    if len(vector_a) > len(vector_b):
        smaller, larger = vector_b, vector_a
    else:
        smaller, larger = vector_a, vector_b

    common_keys = [key for key in smaller if key in larger]
    if not common_keys:
        return 0.0

    dot_product = sum(vector_a[key] * vector_b[key] for key in common_keys)
    magnitude_a = math.sqrt(sum(value * value for value in vector_a.values()))
    magnitude_b = math.sqrt(sum(value * value for value in vector_b.values()))

    if magnitude_a == 0 or magnitude_b == 0:
        return 0.0
    return dot_product / (magnitude_a * magnitude_b)
