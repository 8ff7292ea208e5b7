"""
Dictionary Rescoring.

Interpolates the model's candidate probabilities with word probabilities
from a frequency dictionary:

    final = α · p_model / Σ p_model + (1 - α) · p_dict / Σ p_dict

Words absent from the dictionary get a final score of exactly 0.
"""

import math
from typing import List, Mapping, Sequence

from .scoring import ScoredWord


def rescore(
    words: Sequence[ScoredWord],
    dictionary: Mapping[str, float],
    alpha: float = 0.9
) -> List[ScoredWord]:
    """Re-rank candidates with a word probability dictionary.
    
    Args:
        words: Deduplicated candidates with log-space model scores.
        dictionary: Word -> probability mapping (missing = 0).
        alpha: Weight of the model probability in [0, 1].
    
    Returns:
        Candidates with interpolated probabilities, best first. Ties keep
        their input order.
    """
    if not words:
        return list(words)
    
    model_probs = [math.exp(item.score) for item in words]
    model_total = sum(model_probs)
    
    dict_probs = [dictionary.get(item.word, 0.0) for item in words]
    dict_total = sum(dict_probs)
    
    rescored = []
    for item, model_prob, dict_prob in zip(words, model_probs, dict_probs):
        if item.word not in dictionary:
            final = 0.0
        else:
            model_part = model_prob / model_total if model_total > 0 else 0.0
            dict_part = dict_prob / dict_total if dict_total > 0 else 0.0
            final = alpha * model_part + (1 - alpha) * dict_part
        rescored.append(ScoredWord(word=item.word, score=final))
    
    rescored.sort(key=lambda item: item.score, reverse=True)
    return rescored
