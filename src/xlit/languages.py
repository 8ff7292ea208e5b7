"""
Supported Target Languages for Transliteration.

Romanized input is always treated as English script; output is one of the
Indic scripts listed here. The list is static and available without
loading any model.
"""

from typing import Dict, List

from .errors import UnsupportedDirection, UnsupportedLanguage


SUPPORTED_LANGUAGES: Dict[str, str] = {
    "as": "Assamese",
    "bn": "Bengali",
    "brx": "Bodo",
    "gom": "Konkani",
    "gu": "Gujarati",
    "hi": "Hindi",
    "kn": "Kannada",
    "ks": "Kashmiri",
    "mai": "Maithili",
    "ml": "Malayalam",
    "mni": "Manipuri",
    "mr": "Marathi",
    "ne": "Nepali",
    "or": "Odia",
    "pa": "Punjabi",
    "sa": "Sanskrit",
    "sd": "Sindhi",
    "si": "Sinhala",
    "ta": "Tamil",
    "te": "Telugu",
    "ur": "Urdu",
}

# Romanized input script; never a valid target
SOURCE_LANGUAGE = "en"

DEFAULT_TARGET_LANGUAGE = "hi"


def get_language_tag(lang_code: str) -> str:
    """Get the vocabulary tag for a language code.
    
    Args:
        lang_code: Language code (e.g., 'ta', 'hi').
    
    Returns:
        Tag in the form '__code__' (e.g., '__ta__').
    """
    return f"__{lang_code}__"


def parse_language_tag(token: str):
    """Return the language code of a '__code__' token, or None."""
    if len(token) > 4 and token.startswith("__") and token.endswith("__"):
        return token[2:-2]
    return None


def get_supported_languages() -> List[str]:
    """Get the ordered list of target language codes."""
    return list(SUPPORTED_LANGUAGES)


def get_language_name(lang_code: str) -> str:
    """Get the full name of a language from its code.
    
    Args:
        lang_code: Language code.
    
    Returns:
        Full language name, 'English' for 'en', or 'Unknown' if not found.
    """
    if lang_code == SOURCE_LANGUAGE:
        return "English"
    return SUPPORTED_LANGUAGES.get(lang_code, "Unknown")


def is_supported_language(lang_code: str) -> bool:
    """Check if a language code is a supported transliteration target."""
    return lang_code in SUPPORTED_LANGUAGES


def validate_language(lang_code: str) -> None:
    """Validate that a language code is a supported target.
    
    Args:
        lang_code: Language code.
    
    Raises:
        UnsupportedDirection: If the code is English.
        UnsupportedLanguage: If the code is not in the supported list.
    """
    if lang_code == SOURCE_LANGUAGE:
        raise UnsupportedDirection(
            "Cannot transliterate to English. Input is romanized English "
            "and output must be an Indic script."
        )
    if not is_supported_language(lang_code):
        raise UnsupportedLanguage(lang_code, get_supported_languages())


if __name__ == "__main__":
    print("=" * 50)
    print("Supported Languages for Transliteration")
    print("=" * 50)
    print(f"\nSource script: English ({SOURCE_LANGUAGE})")
    print(f"\nTarget Languages ({len(SUPPORTED_LANGUAGES)}):")
    print("-" * 40)
    
    for code, name in SUPPORTED_LANGUAGES.items():
        print(f"  {code:4} {name:12} {get_language_tag(code)}")
