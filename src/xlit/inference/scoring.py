"""
Candidate Scoring Utilities.

- Length normalization (Wu et al., 2016)
- Ranking of beam candidates by normalized score
- Deduplication of detokenized words
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple


@dataclass(frozen=True)
class ScoredWord:
    """A detokenized candidate and its score."""
    word: str
    score: float


def length_norm(length: int, alpha: float = 1.0) -> float:
    """Compute length normalization factor.
    
    Formula from Wu et al., 2016:
        lp(Y) = ((5 + |Y|) / (5 + 1)) ^ α
    
    Args:
        length: Number of emitted tokens.
        alpha: Length penalty exponent.
    
    Returns:
        Normalization factor (>= 1 for length >= 1).
    """
    return ((5 + length) / 6) ** alpha


def emitted_length(num_tokens: int) -> int:
    """Tokens emitted by the decoder, excluding the start marker (min 1)."""
    return max(1, num_tokens - 1)


def normalized_score(score: float, num_tokens: int, alpha: float = 1.0) -> float:
    """Divide a cumulative log-probability by the length penalty.
    
    Args:
        score: Cumulative log-probability.
        num_tokens: Sequence length including the start marker.
        alpha: Length penalty exponent.
    """
    return score / length_norm(emitted_length(num_tokens), alpha)


def rank_candidates(candidates: Iterable, alpha: float = 1.0) -> List[Tuple[float, object]]:
    """Sort beam candidates by normalized score, best first.
    
    Ties keep their input order.
    
    Args:
        candidates: Objects with `score` and `tokens` attributes.
        alpha: Length penalty exponent.
    
    Returns:
        List of (normalized_score, candidate).
    """
    scored = [
        (normalized_score(cand.score, len(cand.tokens), alpha), cand)
        for cand in candidates
    ]
    scored.sort(key=lambda item: item[0], reverse=True)
    return scored


def deduplicate(words: Iterable[ScoredWord]) -> List[ScoredWord]:
    """Keep the first occurrence of every non-empty word."""
    seen = set()
    unique = []
    for item in words:
        if not item.word or item.word in seen:
            continue
        seen.add(item.word)
        unique.append(item)
    return unique
