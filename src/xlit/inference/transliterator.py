"""
High-Level Transliteration API.

The Transliterator is the session object. It owns the configuration and
lazily loads, once per session:
- the vocabulary and model backend (together, on first use)
- one word probability dictionary per language (on first rescoring call)

Pipeline per request:
    word -> Tokenizer -> encode -> beam search -> length normalization
         -> detokenize -> dedup -> (dictionary rescoring) -> top `count`
"""

import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence

from ..backend.base import ModelBackend
from ..backend.torchscript import TorchScriptBackend
from ..config import XlitConfig
from ..dictionary import DictionaryStore, ProgressCallback
from ..errors import (
    DecodeError,
    DictionaryMissing,
    ExtractionError,
    InvalidInput,
    ModelLoadError,
    NetworkError,
)
from ..languages import get_supported_languages
from ..tokenizer import Tokenizer
from ..vocab import Vocabulary
from .beam_search import BeamSearchDecoder
from .rescoring import rescore
from .scoring import ScoredWord, deduplicate


BackendFactory = Callable[[XlitConfig], ModelBackend]


class SessionState(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    DISPOSED = "disposed"


@dataclass(frozen=True)
class LoadedModel:
    """Vocabulary and backend loaded together; never partially built."""
    vocab: Vocabulary
    tokenizer: Tokenizer
    backend: ModelBackend


def torchscript_backend_factory(config: XlitConfig) -> ModelBackend:
    """Default backend: TorchScript modules from config.model_dir."""
    return TorchScriptBackend.from_files(
        config.encoder_path,
        config.decoder_path,
        device=config.device
    )


class Transliterator:
    """Romanized word -> ranked Indic script spellings.
    
    Args:
        config: Session configuration (defaults to XlitConfig()).
        backend_factory: Builds the model backend from the config.
        dictionary_store: Store for word probability dictionaries. Built
            from config.rescoring when omitted.
        vocab: Pre-loaded vocabulary; read from config.vocab_path if None.
    """
    
    def __init__(
        self,
        config: Optional[XlitConfig] = None,
        backend_factory: Optional[BackendFactory] = None,
        dictionary_store: Optional[DictionaryStore] = None,
        vocab: Optional[Vocabulary] = None
    ):
        self.config = config or XlitConfig()
        self._backend_factory = backend_factory or torchscript_backend_factory
        self._preloaded_vocab = vocab
        
        if dictionary_store is None:
            dictionary_store = DictionaryStore(
                self.config.dictionary_dir,
                archive_url=self.config.rescoring.archive_url,
                max_redirects=self.config.rescoring.max_redirects,
                timeout=self.config.rescoring.timeout,
                verbose=self.config.verbose
            )
        self.dictionary_store = dictionary_store
        
        self._state = SessionState.UNINITIALIZED
        self._model: Optional[LoadedModel] = None
        self._init_lock = threading.Lock()
        
        # Load-once cache, never evicted until dispose()
        self._dictionaries: Dict[str, Dict[str, float]] = {}
        self._dictionary_locks: Dict[str, threading.Lock] = {}
        self._dictionary_guard = threading.Lock()
        
        # Incremented by dispose(); in-flight requests compare against it
        self._generation = 0
    
    def _log(self, message: str):
        if self.config.verbose:
            print(f"[Transliterator] {message}")
    
    @property
    def state(self) -> SessionState:
        return self._state
    
    @property
    def is_initialized(self) -> bool:
        return self._state is SessionState.READY
    
    @staticmethod
    def get_supported_languages() -> List[str]:
        """Target language codes (static, no model needed)."""
        return get_supported_languages()
    
    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    
    def initialize(self) -> LoadedModel:
        """Load the vocabulary and model backend.
        
        Idempotent and safe to call from several threads: only the first
        caller loads, the others wait and reuse its result.
        
        Raises:
            ModelLoadError: If either the vocabulary or the backend fails.
        """
        model = self._model
        if self._state is SessionState.READY and model is not None:
            return model
        
        with self._init_lock:
            if self._state is SessionState.READY and self._model is not None:
                return self._model
            
            vocab = self._load_vocab()
            
            try:
                backend = self._backend_factory(self.config)
            except ModelLoadError:
                raise
            except Exception as e:
                raise ModelLoadError(f"Failed to load transliteration models: {e}") from e
            
            model = LoadedModel(vocab=vocab, tokenizer=Tokenizer(vocab), backend=backend)
            self._model = model
            self._state = SessionState.READY
            
            self._log(
                f"Model loaded: src_vocab={vocab.src_size}, tgt_vocab={vocab.tgt_size}, "
                f"languages={len(vocab.language_codes())}"
            )
            return model
    
    def _load_vocab(self) -> Vocabulary:
        if self._preloaded_vocab is not None:
            return self._preloaded_vocab
        
        vocab_path = self.config.vocab_path
        if not vocab_path.exists():
            raise ModelLoadError(f"Vocab file not found at {vocab_path}")
        
        try:
            return Vocabulary.from_file(vocab_path)
        except (OSError, ValueError) as e:
            raise ModelLoadError(f"Failed to load vocabulary {vocab_path}: {e}") from e
    
    def dispose(self) -> None:
        """Release the model backend and cached dictionaries. Idempotent.
        
        Requests still decoding fail on their next backend call; requests
        loading a dictionary fail with DecodeError and do not cache it.
        """
        with self._init_lock:
            model = self._model
            self._model = None
            if self._state is SessionState.READY:
                self._state = SessionState.DISPOSED
            
            if model is not None:
                model.backend.close()
                self._log("Model released")
        
        with self._dictionary_guard:
            self._generation += 1
            self._dictionaries.clear()
    
    def __enter__(self) -> "Transliterator":
        return self
    
    def __exit__(self, *exc):
        self.dispose()
    
    # ------------------------------------------------------------------
    # Dictionaries
    # ------------------------------------------------------------------
    
    def has_dictionary(self, lang_code: str) -> bool:
        """Check local presence of a language's dictionary (no network)."""
        return self.dictionary_store.has(lang_code)
    
    def download_dictionary(
        self,
        lang_code: str,
        on_progress: Optional[ProgressCallback] = None
    ):
        """Fetch a language's dictionary from the configured archive.
        
        Raises:
            UnsupportedLanguage, NetworkError, TooManyRedirects, ExtractionError
        """
        with self._dictionary_lock(lang_code):
            return self.dictionary_store.download(lang_code, on_progress=on_progress)
    
    def _dictionary_lock(self, lang_code: str) -> threading.Lock:
        with self._dictionary_guard:
            lock = self._dictionary_locks.get(lang_code)
            if lock is None:
                lock = threading.Lock()
                self._dictionary_locks[lang_code] = lock
            return lock
    
    def _check_generation(self, generation: int) -> None:
        if self._generation != generation:
            raise DecodeError("Transliterator was disposed during the request")
    
    def get_dictionary(
        self,
        lang_code: str,
        generation: Optional[int] = None
    ) -> Dict[str, float]:
        """Return the cached dictionary, loading (and downloading) it once.
        
        Args:
            lang_code: Target language code.
            generation: Session generation the caller started in. A load that
                outlives a dispose() is discarded instead of cached.
        
        Raises:
            DictionaryMissing: If the file is absent and cannot be fetched.
            DecodeError: If the session was disposed while loading.
        """
        if generation is None:
            generation = self._generation
        
        cached = self._dictionaries.get(lang_code)
        if cached is not None:
            return cached
        
        lock = self._dictionary_lock(lang_code)
        with lock:
            cached = self._dictionaries.get(lang_code)
            if cached is not None:
                return cached
            
            if not self.dictionary_store.has(lang_code):
                if not self.config.rescoring.auto_download:
                    raise DictionaryMissing(
                        f"No dictionary for '{lang_code}' and auto download is disabled"
                    )
                self._log(f"Dictionary for '{lang_code}' not found, downloading")
                try:
                    self.dictionary_store.download(lang_code)
                except (NetworkError, ExtractionError) as e:
                    raise DictionaryMissing(
                        f"Dictionary for '{lang_code}' unavailable: {e}"
                    ) from e
            
            try:
                dictionary = self.dictionary_store.load(lang_code)
            except OSError as e:
                raise DictionaryMissing(
                    f"Failed to read dictionary for '{lang_code}': {e}"
                ) from e
            
            with self._dictionary_guard:
                self._check_generation(generation)
                self._dictionaries[lang_code] = dictionary
            return dictionary
    
    # ------------------------------------------------------------------
    # Transliteration
    # ------------------------------------------------------------------
    
    @staticmethod
    def _validate(word, lang_code, count) -> None:
        if not isinstance(word, str):
            raise InvalidInput(f"Expected word to be a string, got {type(word).__name__}")
        if not isinstance(lang_code, str):
            raise InvalidInput(
                f"Expected lang_code to be a string, got {type(lang_code).__name__}"
            )
        if not word.strip():
            raise InvalidInput("Word cannot be empty")
        if isinstance(count, bool) or not isinstance(count, int) or count < 1:
            raise InvalidInput(f"Expected count to be a positive integer, got {count!r}")
    
    def transliterate_scored(
        self,
        word: str,
        lang_code: str,
        count: int = 5,
        rescore_with_dictionary: Optional[bool] = None
    ) -> List[ScoredWord]:
        """Transliterate a word and return scored candidates.
        
        Args:
            word: Romanized word (e.g. "amma").
            lang_code: Target language code (e.g. "ta").
            count: Maximum number of candidates.
            rescore_with_dictionary: Override config.rescoring.enabled.
        
        Returns:
            Up to `count` distinct words, best first. Scores are
            length-normalized log-probabilities, or interpolated
            probabilities when rescored.
        """
        self._validate(word, lang_code, count)
        
        model = self.initialize()
        generation = self._generation
        src_ids = model.tokenizer.encode(word, lang_code)
        
        decoding = self.config.decoding
        decoder = BeamSearchDecoder(
            backend=model.backend,
            vocab_size=model.vocab.tgt_size,
            eos_id=model.vocab.eos_id,
            beam_size=max(decoding.beam_width, count),
            max_length=decoding.max_length,
            min_length=decoding.min_length,
            length_penalty=decoding.length_penalty,
            timeout=decoding.timeout
        )
        
        ranked = decoder.decode_ranked(src_ids)
        words = deduplicate(
            ScoredWord(word=model.tokenizer.decode(cand.tokens), score=score)
            for score, cand in ranked
        )
        
        if rescore_with_dictionary is None:
            rescore_with_dictionary = self.config.rescoring.enabled
        
        if rescore_with_dictionary:
            dictionary = self.get_dictionary(lang_code, generation)
            words = rescore(words, dictionary, alpha=self.config.rescoring.alpha)
        
        self._check_generation(generation)
        return words[:count]
    
    def transliterate(
        self,
        word: str,
        lang_code: str,
        count: int = 5,
        rescore_with_dictionary: Optional[bool] = None
    ) -> List[str]:
        """Transliterate a romanized word into an Indic script.
        
        Args:
            word: Romanized word (e.g. "amma").
            lang_code: Target language code (e.g. "ta", "hi", "ml").
            count: Number of candidates to return.
            rescore_with_dictionary: Override config.rescoring.enabled.
        
        Returns:
            Up to `count` distinct candidate spellings, best first.
        """
        return [
            item.word
            for item in self.transliterate_scored(
                word, lang_code, count, rescore_with_dictionary
            )
        ]
    
    def transliterate_batch(
        self,
        words: Sequence[str],
        lang_code: str,
        count: int = 5,
        rescore_with_dictionary: Optional[bool] = None
    ) -> List[List[str]]:
        """Transliterate several words into the same language."""
        if isinstance(words, str):
            raise InvalidInput("Expected a sequence of words, got a single string")
        
        return [
            self.transliterate(word, lang_code, count, rescore_with_dictionary)
            for word in words
        ]
    
    @classmethod
    def from_model_dir(cls, model_dir, **kwargs) -> "Transliterator":
        """Create a session whose model files live in model_dir.
        
        Args:
            model_dir: Directory with vocab.json and the scripted modules.
            **kwargs: Extra XlitConfig fields.
        """
        config = XlitConfig(model_dir=model_dir, **kwargs)
        return cls(config=config)
