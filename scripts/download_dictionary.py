#!/usr/bin/env python3
"""
Download word probability dictionaries used for rescoring.

Usage:
    python scripts/download_dictionary.py --lang ta
    python scripts/download_dictionary.py --lang hi ml te
    python scripts/download_dictionary.py --all
"""

import argparse
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from src.xlit.config import DEFAULT_DICTIONARY_URL
from src.xlit.dictionary import DictionaryStore
from src.xlit.errors import XlitError
from src.xlit.languages import get_language_name, get_supported_languages


def download_dictionaries(langs, output_dir, url, force=False):
    """Download dictionaries for the given languages.
    
    Args:
        langs: Language codes to fetch.
        output_dir: Directory to store dictionary files.
        url: Archive URL.
        force: If True, re-download even if files exist.
    
    Returns:
        True if every language succeeded.
    """
    store = DictionaryStore(output_dir, archive_url=url)
    ok = True
    
    for lang in langs:
        if store.has(lang) and not force:
            print(f"✓ {store.path_for(lang)} already exists (use --force to re-download)")
            continue
        
        print(f"\nDownloading {get_language_name(lang)} ({lang}) dictionary...")
        try:
            path = store.download(lang)
            print(f"✓ Saved to {path}")
        except XlitError as e:
            print(f"✗ {lang}: {e}")
            ok = False
    
    return ok


def main():
    parser = argparse.ArgumentParser(description="Download word probability dictionaries")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--lang", nargs="+", help="Language codes")
    group.add_argument("--all", action="store_true", help="All supported languages")
    parser.add_argument("--output-dir", default="models/xlit/dictionaries",
                       help="Output directory")
    parser.add_argument("--url", default=DEFAULT_DICTIONARY_URL,
                       help="Dictionary archive URL")
    parser.add_argument("--force", action="store_true",
                       help="Re-download existing dictionaries")
    
    args = parser.parse_args()
    langs = get_supported_languages() if args.all else args.lang
    
    success = download_dictionaries(langs, Path(args.output_dir), args.url, args.force)
    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
