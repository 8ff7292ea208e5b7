"""
Word Probability Dictionaries.

One JSON file per language maps target-script words to probabilities:

    {
    "அம்மா": 0.00123,
    "அம்ம": 1.2e-06,
    ...
    }

Files can be gigabytes, so they are parsed line by line: each line holding
a single `"key": value` pair contributes one entry, anything else is
skipped. Missing files are fetched from a zip archive holding all
languages.
"""

import json
import os
import re
import tempfile
import warnings
import zipfile
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional, Tuple, Union

import requests
from tqdm import tqdm

from .errors import ExtractionError, NetworkError, TooManyRedirects, UnsupportedLanguage
from .languages import get_supported_languages, is_supported_language


ProgressCallback = Callable[[int, Optional[int]], None]

DICTIONARY_FILE_TEMPLATE = "{lang}_word_prob_dict.json"

_ENTRY_RE = re.compile(r'^\s*"((?:[^"\\]|\\.)*)"\s*:\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)\s*,?\s*$')

# Structural lines that are not entries and not malformed either
_STRUCTURAL_LINES = {"", "{", "}", "},", "{}"}


def parse_entry(line: str) -> Optional[Tuple[str, float]]:
    """Parse one `"word": probability` line.
    
    Returns:
        (lower-cased word, probability), or None if the line does not hold
        exactly one well-formed entry.
    """
    match = _ENTRY_RE.match(line)
    if match is None:
        return None
    
    try:
        # Reuse the JSON string grammar to resolve \uXXXX and other escapes
        word = json.loads(f'"{match.group(1)}"')
    except json.JSONDecodeError:
        return None
    
    return word.lower(), float(match.group(2))


def parse_dictionary_lines(lines: Iterable[str]) -> Tuple[Dict[str, float], int]:
    """Build a dictionary from an iterable of lines.
    
    Args:
        lines: Lines of a dictionary file.
    
    Returns:
        Tuple of (word -> probability, number of malformed lines skipped).
    """
    entries: Dict[str, float] = {}
    skipped = 0
    
    for line in lines:
        entry = parse_entry(line)
        if entry is None:
            if line.strip() not in _STRUCTURAL_LINES:
                skipped += 1
            continue
        word, prob = entry
        entries[word] = prob
    
    return entries, skipped


class DictionaryStore:
    """On-disk store of per-language word probability dictionaries.
    
    Args:
        directory: Directory holding '{lang}_word_prob_dict.json' files.
        archive_url: URL of the zip archive with every language's file.
        max_redirects: Redirects followed before giving up.
        timeout: HTTP connect/read timeout in seconds.
        chunk_size: Download chunk size in bytes.
        verbose: Print status lines and show a progress bar.
    """
    
    def __init__(
        self,
        directory: Union[str, Path],
        archive_url: str,
        max_redirects: int = 5,
        timeout: float = 60.0,
        chunk_size: int = 1024 * 1024,
        verbose: bool = True
    ):
        self.directory = Path(directory)
        self.archive_url = archive_url
        self.max_redirects = max_redirects
        self.timeout = timeout
        self.chunk_size = chunk_size
        self.verbose = verbose
    
    def path_for(self, lang_code: str) -> Path:
        return self.directory / DICTIONARY_FILE_TEMPLATE.format(lang=lang_code)
    
    def has(self, lang_code: str) -> bool:
        """Check if the dictionary file exists locally (no network access)."""
        return self.path_for(lang_code).is_file()
    
    def load(self, lang_code: str) -> Dict[str, float]:
        """Stream-parse a local dictionary file.
        
        Raises:
            FileNotFoundError: If the file is absent.
        """
        path = self.path_for(lang_code)
        
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            entries, skipped = parse_dictionary_lines(f)
        
        if skipped:
            warnings.warn(f"Skipped {skipped} malformed lines in {path}")
        
        if self.verbose:
            print(f"[Dictionary] Loaded {len(entries)} words for '{lang_code}'")
        
        return entries
    
    def download(
        self,
        lang_code: str,
        on_progress: Optional[ProgressCallback] = None
    ) -> Path:
        """Download the archive and extract the language's dictionary.
        
        Args:
            lang_code: Target language code.
            on_progress: Called with (bytes_downloaded, total_bytes or None)
                after every chunk. Without a callback a tqdm bar is shown
                when verbose.
        
        Returns:
            Path of the extracted dictionary file.
        """
        if not is_supported_language(lang_code):
            raise UnsupportedLanguage(lang_code, get_supported_languages())
        
        self.directory.mkdir(parents=True, exist_ok=True)
        
        fd, archive_name = tempfile.mkstemp(suffix=".zip", dir=self.directory)
        os.close(fd)
        archive_path = Path(archive_name)
        
        try:
            self._fetch_archive(archive_path, lang_code, on_progress)
            return self._extract(archive_path, lang_code)
        finally:
            archive_path.unlink(missing_ok=True)
    
    def _fetch_archive(
        self,
        dest: Path,
        lang_code: str,
        on_progress: Optional[ProgressCallback]
    ) -> None:
        if self.verbose:
            print(f"[Dictionary] Downloading {self.archive_url}")
        
        progress_bar = None
        try:
            with requests.Session() as http:
                http.max_redirects = self.max_redirects
                with http.get(self.archive_url, stream=True, timeout=self.timeout) as resp:
                    resp.raise_for_status()
                    
                    total = int(resp.headers.get("content-length", 0) or 0) or None
                    if on_progress is None and self.verbose:
                        progress_bar = tqdm(
                            total=total,
                            unit="B",
                            unit_scale=True,
                            desc=f"Dictionary ({lang_code})"
                        )
                    
                    done = 0
                    with open(dest, "wb") as f:
                        for chunk in resp.iter_content(chunk_size=self.chunk_size):
                            if not chunk:
                                continue
                            f.write(chunk)
                            done += len(chunk)
                            
                            if on_progress is not None:
                                on_progress(done, total)
                            elif progress_bar is not None:
                                progress_bar.update(len(chunk))
        except requests.TooManyRedirects as e:
            raise TooManyRedirects(
                f"More than {self.max_redirects} redirects fetching {self.archive_url}"
            ) from e
        except requests.RequestException as e:
            raise NetworkError(f"Failed to download dictionary archive: {e}") from e
        finally:
            if progress_bar is not None:
                progress_bar.close()
    
    def _extract(self, archive_path: Path, lang_code: str) -> Path:
        target = self.path_for(lang_code)
        tmp_path = target.with_suffix(target.suffix + ".tmp")
        
        try:
            with zipfile.ZipFile(archive_path) as archive:
                member = self._find_member(archive, lang_code)
                
                with archive.open(member) as src, open(tmp_path, "wb") as dst:
                    while True:
                        block = src.read(self.chunk_size)
                        if not block:
                            break
                        dst.write(block)
        except zipfile.BadZipFile as e:
            tmp_path.unlink(missing_ok=True)
            raise ExtractionError(f"Dictionary archive is corrupt: {e}") from e
        except (OSError, zipfile.LargeZipFile) as e:
            tmp_path.unlink(missing_ok=True)
            raise ExtractionError(f"Failed to extract dictionary for '{lang_code}': {e}") from e
        
        tmp_path.replace(target)
        
        if self.verbose:
            print(f"[Dictionary] Saved {target}")
        
        return target
    
    @staticmethod
    def _find_member(archive: zipfile.ZipFile, lang_code: str) -> str:
        """Pick the archive entry for lang_code.
        
        An exact '{lang}_word_prob_dict.json' file name wins; otherwise the
        first file whose name starts with '{lang}_'.
        """
        expected = DICTIONARY_FILE_TEMPLATE.format(lang=lang_code)
        prefix = f"{lang_code}_"
        
        matches = []
        for name in archive.namelist():
            if name.endswith("/"):
                continue
            base = name.rsplit("/", 1)[-1]
            if base == expected:
                return name
            if base.startswith(prefix):
                matches.append(name)
        
        if not matches:
            raise ExtractionError(f"No dictionary for '{lang_code}' in archive")
        return matches[0]
