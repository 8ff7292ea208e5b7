"""Transliteration Inference Module."""

from .beam_search import beam_search, BeamCandidate, BeamSearchDecoder
from .rescoring import rescore
from .scoring import ScoredWord, deduplicate, length_norm, normalized_score
from .transliterator import Transliterator, SessionState

__all__ = [
    "beam_search",
    "BeamCandidate",
    "BeamSearchDecoder",
    "rescore",
    "ScoredWord",
    "deduplicate",
    "length_norm",
    "normalized_score",
    "Transliterator",
    "SessionState",
]
