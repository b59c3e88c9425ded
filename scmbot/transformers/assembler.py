"""
Response assembler for the Sentential Context Model.

Starts from the best-matching sentence and greedily pulls in the sentences
around it. Sentence and word budgets are split between the sentences before
and after the match by two independent ratios. Word counts are taken from the
surface text (whitespace-delimited), not from normalized tokens.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Sequence

from .tokenizer import count_words

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResponseBudget:
    max_sentences: int = 5
    max_tokens: int = 500
    before_sentence_ratio: float = 0.0
    before_token_ratio: float = 0.0

    def __post_init__(self):
        if self.max_sentences < 0:
            raise ValueError(f"max_sentences must be non-negative, got {self.max_sentences}")
        if self.max_tokens < 0:
            raise ValueError(f"max_tokens must be non-negative, got {self.max_tokens}")
        for name in ("before_sentence_ratio", "before_token_ratio"):
            ratio = getattr(self, name)
            if not 0.0 <= ratio <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {ratio}")

    @property
    def sentences_before(self) -> int:
        return math.floor(self.max_sentences * self.before_sentence_ratio)

    @property
    def sentences_after(self) -> int:
        return self.max_sentences - self.sentences_before

    @property
    def tokens_before(self) -> int:
        return math.floor(self.max_tokens * self.before_token_ratio)

    @property
    def tokens_after(self) -> int:
        return self.max_tokens - self.tokens_before


def _collect(sentences: Sequence[str], indices: range, sentence_budget: int, token_budget: int) -> List[str]:
    """Take sentences in the given index order until a budget runs out.

    Stops at the first sentence that would overflow the token budget rather
    than skipping it.
    """
    taken = []
    tokens_used = 0

    for i in indices:
        if len(taken) >= sentence_budget or tokens_used >= token_budget:
            break
        sentence = sentences[i].strip()
        word_count = count_words(sentence)
        if tokens_used + word_count > token_budget:
            break
        taken.append(sentence)
        tokens_used += word_count

    return taken


def assemble(best_index: int, sentences: Sequence[str], budget: ResponseBudget) -> str:
    """Expand the best-matching sentence into a multi-sentence response.

    Args:
        best_index: Index of the best-matching sentence.
        sentences: All corpus sentences in order.
        budget: Sentence and word budgets with their before/after split.

    Returns:
        The response text, sentences in corpus order joined by single spaces.
    """
    if not 0 <= best_index < len(sentences):
        raise IndexError(f"best_index {best_index} out of range for {len(sentences)} sentences")

    before = _collect(
        sentences, range(best_index - 1, -1, -1), budget.sentences_before, budget.tokens_before
    )
    after = _collect(
        sentences, range(best_index + 1, len(sentences)), budget.sentences_after, budget.tokens_after
    )

    parts = list(reversed(before)) + [sentences[best_index].strip()] + after
    logger.debug(
        f"[SCM] Assembled response around sentence {best_index}: "
        f"{len(before)} before, {len(after)} after"
    )
    return " ".join(part for part in parts if part)
