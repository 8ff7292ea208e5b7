"""
Indic Word Transliteration (xlit) Subsystem.

Converts romanized words into ranked spellings in Indic scripts using a
pretrained character-level encoder-decoder and optional dictionary
rescoring.

Modules:
    - vocab / tokenizer: character vocabulary and token mapping
    - backend: encoder/decoder forward pass (TorchScript)
    - inference: beam search, scoring, rescoring, session
    - dictionary: word probability dictionaries (download + streaming parse)
"""

from .config import XlitConfig, DecodingConfig, RescoringConfig
from .errors import (
    XlitError,
    InvalidInput,
    UnsupportedLanguage,
    UnsupportedDirection,
    ModelLoadError,
    DecodeError,
    DictionaryMissing,
    NetworkError,
    TooManyRedirects,
    ExtractionError,
)
from .tokenizer import Tokenizer
from .vocab import Vocabulary, SpecialTokens

__version__ = "1.0.0"
__all__ = [
    "XlitConfig",
    "DecodingConfig",
    "RescoringConfig",
    "XlitError",
    "InvalidInput",
    "UnsupportedLanguage",
    "UnsupportedDirection",
    "ModelLoadError",
    "DecodeError",
    "DictionaryMissing",
    "NetworkError",
    "TooManyRedirects",
    "ExtractionError",
    "Tokenizer",
    "Vocabulary",
    "SpecialTokens",
]
