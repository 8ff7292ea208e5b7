"""
Error types for the transliteration subsystem.

Every failure raised by the package derives from XlitError. Input
validation errors also derive from ValueError so callers can catch the
builtin when they only care about bad arguments.
"""

from typing import Iterable


class XlitError(RuntimeError):
    """Base class for all transliteration errors."""


class InvalidInput(XlitError, ValueError):
    """Empty word, wrong argument types or a non-positive count."""


class UnsupportedLanguage(XlitError, ValueError):
    """Language code has no tag in the vocabulary (or no dictionary)."""

    def __init__(self, lang_code: str, supported: Iterable[str]):
        self.lang_code = lang_code
        self.supported = list(supported)
        super().__init__(
            f"Language code '{lang_code}' not supported. "
            f"Valid codes: {', '.join(self.supported)}"
        )


class UnsupportedDirection(XlitError, ValueError):
    """Transliteration into English was requested."""


class ModelLoadError(XlitError):
    """Vocabulary or model backend could not be loaded."""


class DecodeError(XlitError):
    """Model backend call failed during beam search."""


class DictionaryMissing(XlitError):
    """Rescoring needs a dictionary that is absent and could not be fetched."""


class NetworkError(XlitError):
    """Dictionary archive download failed."""


class TooManyRedirects(NetworkError):
    """Dictionary archive URL redirected more times than allowed."""


class ExtractionError(XlitError):
    """Dictionary archive is corrupt or lacks the requested language."""
