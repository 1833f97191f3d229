"""
Connection detection between knowledge items.

Two documents are compared by the overlap of their "long" words (more than 4 characters, a crude stop-word
filter). The score is the set-cosine |A & B| / sqrt(|A| * |B|) over term presence, not term frequency, so
identical documents score 1.0 and documents with no shared long word score 0.0.
"""

import math
import re
from typing import Iterable, List, Set, Tuple

from src.core.entities import Connection, KnowledgeItem

CONNECTION_THRESHOLD = 0.1
MIN_TOKEN_LENGTH = 5

# ASCII word class, same tokens the dashboard has always produced
_NON_WORD = re.compile(r"\W+", re.ASCII)


def tokenize(text: str) -> Set[str]:
    """Lower-case, split on non-word runs and keep tokens longer than 4 characters."""
    return {token for token in _NON_WORD.split(text.lower()) if len(token) >= MIN_TOKEN_LENGTH}


def token_strength(tokens_a: Set[str], tokens_b: Set[str]) -> float:
    if not tokens_a or not tokens_b:
        return 0.0
    return len(tokens_a & tokens_b) / math.sqrt(len(tokens_a) * len(tokens_b))


def connection_strength(text_a: str, text_b: str) -> float:
    return token_strength(tokenize(text_a), tokenize(text_b))


def score_candidates(
    text: str,
    candidates: Iterable[Tuple[str, str]],
    threshold: float = CONNECTION_THRESHOLD,
) -> List[Tuple[str, float]]:
    """
    Score (candidate_id, candidate_text) pairs against `text`.

    Returns the candidates whose strength is strictly above `threshold`, strongest first
    (ties keep their input order).
    """
    target = tokenize(text)
    if not target:
        return []

    scored = []
    for candidate_id, candidate_text in candidates:
        strength = token_strength(target, tokenize(candidate_text))
        if strength > threshold:
            scored.append((candidate_id, strength))

    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored


def detect_connections(
    item: KnowledgeItem,
    pool: Iterable[KnowledgeItem],
    threshold: float = CONNECTION_THRESHOLD,
) -> List[Connection]:
    """Connections from `item` to every other item of `pool` that clears the threshold."""
    candidates = ((other.id, other.text) for other in pool if other.id != item.id)
    return [
        Connection(source_item_id=item.id, target_item_id=target_id, connection_strength=strength)
        for target_id, strength in score_candidates(item.text, candidates, threshold)
    ]
