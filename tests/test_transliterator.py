"""
Tests for the Transliterator session.

Tests cover:
- Input validation and language errors
- End-to-end transliteration with a stub backend
- Lazy, single-flight initialization and disposal
- Dictionary rescoring, caching and download fallback
"""

import json
import sys
import tempfile
import threading
import time
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from stubs import AMMA_TA, FakeDictionaryStore, ScriptedBackend, VOCAB_DATA, make_vocab

from src.xlit.config import DecodingConfig, RescoringConfig, XlitConfig
from src.xlit.errors import (
    DecodeError,
    DictionaryMissing,
    InvalidInput,
    ModelLoadError,
    NetworkError,
    UnsupportedDirection,
    UnsupportedLanguage,
)
from src.xlit.inference import SessionState, Transliterator


class CountingFactory:
    """Backend factory that records how often it is called."""
    
    def __init__(self, delay=0.0, error=None):
        self.delay = delay
        self.error = error
        self.backends = []
        self.lock = threading.Lock()
    
    def __call__(self, config):
        time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        backend = ScriptedBackend()
        with self.lock:
            self.backends.append(backend)
        return backend
    
    @property
    def calls(self):
        return len(self.backends)


def make_session(factory=None, store=None, rescore=False, auto_download=True, **decoding):
    config = XlitConfig(
        decoding=DecodingConfig(**decoding),
        rescoring=RescoringConfig(enabled=rescore, auto_download=auto_download),
        verbose=False
    )
    return Transliterator(
        config=config,
        backend_factory=factory or CountingFactory(),
        dictionary_store=store or FakeDictionaryStore(),
        vocab=make_vocab()
    )


class TestValidation(unittest.TestCase):
    """Invalid input is rejected before any model call."""
    
    def setUp(self):
        self.factory = CountingFactory()
        self.session = make_session(self.factory)
    
    def test_invalid_inputs(self):
        cases = [
            ("", "ta", 1),
            ("   ", "ta", 1),
            (123, "ta", 1),
            ("amma", 5, 1),
            ("amma", "ta", 0),
            ("amma", "ta", -2),
            ("amma", "ta", 1.5),
            ("amma", "ta", True),
        ]
        for word, lang, count in cases:
            with self.assertRaises(InvalidInput, msg=repr((word, lang, count))):
                self.session.transliterate(word, lang, count)
        
        self.assertEqual(self.factory.calls, 0)
    
    def test_invalid_input_is_value_error(self):
        with self.assertRaises(ValueError):
            self.session.transliterate("", "ta")
    
    def test_english_target(self):
        with self.assertRaises(UnsupportedDirection):
            self.session.transliterate("amma", "en", 1)
    
    def test_unsupported_language(self):
        with self.assertRaises(UnsupportedLanguage) as ctx:
            self.session.transliterate("amma", "xx", 1)
        
        self.assertEqual(ctx.exception.supported, ["hi", "ta"])
        self.assertIn("Valid codes: hi, ta", str(ctx.exception))
        self.assertEqual(self.factory.backends[0].calls, [])
    
    def test_batch_rejects_plain_string(self):
        with self.assertRaises(InvalidInput):
            self.session.transliterate_batch("amma", "ta")


class TestTransliterate(unittest.TestCase):
    """End-to-end pipeline with the scripted backend."""
    
    def setUp(self):
        self.factory = CountingFactory()
        self.session = make_session(self.factory)
    
    def test_single_result(self):
        self.assertEqual(self.session.transliterate("amma", "ta", 1), [AMMA_TA])
    
    def test_multiple_results_distinct_and_sorted(self):
        results = self.session.transliterate_scored("amma", "ta", 3)
        
        self.assertEqual(len(results), 3)
        self.assertEqual(results[0].word, AMMA_TA)
        
        words = [r.word for r in results]
        self.assertEqual(len(set(words)), len(words))
        
        scores = [r.score for r in results]
        self.assertEqual(scores, sorted(scores, reverse=True))
    
    def test_at_most_count(self):
        for count in (1, 2, 5, 8):
            results = self.session.transliterate("amma", "ta", count)
            self.assertLessEqual(len(results), count)
            self.assertEqual(len(set(results)), len(results))
            self.assertTrue(all(results))
    
    def test_beam_width_grows_with_count(self):
        self.session.transliterate("amma", "ta", 8)
        backend = self.factory.backends[0]
        
        per_length = {}
        for prev_ids, _ in backend.calls:
            per_length[len(prev_ids)] = per_length.get(len(prev_ids), 0) + 1
        self.assertGreater(max(per_length.values()), 4)
        self.assertLessEqual(max(per_length.values()), 8)
    
    def test_default_count_is_five(self):
        self.assertLessEqual(len(self.session.transliterate("amma", "ta")), 5)
    
    def test_batch(self):
        results = self.session.transliterate_batch(["amma", "ammi"], "ta", 2)
        self.assertEqual(len(results), 2)
        self.assertEqual(results[0][0], AMMA_TA)
    
    def test_decode_failure_propagates(self):
        from stubs import FailingBackend
        
        session = make_session(lambda config: FailingBackend(fail_at=2))
        with self.assertRaises(DecodeError):
            session.transliterate("amma", "ta", 3)


class TestLifecycle(unittest.TestCase):
    """Initialization and disposal."""
    
    def test_supported_languages_without_init(self):
        session = make_session()
        langs = session.get_supported_languages()
        
        self.assertEqual(len(langs), 21)
        self.assertEqual(Transliterator.get_supported_languages(), langs)
        self.assertEqual(session.state, SessionState.UNINITIALIZED)
    
    def test_auto_initialize(self):
        factory = CountingFactory()
        session = make_session(factory)
        
        session.transliterate("amma", "ta", 1)
        self.assertTrue(session.is_initialized)
        self.assertEqual(factory.calls, 1)
    
    def test_initialize_idempotent(self):
        factory = CountingFactory()
        session = make_session(factory)
        
        first = session.initialize()
        second = session.initialize()
        self.assertIs(first, second)
        self.assertEqual(factory.calls, 1)
    
    def test_concurrent_initialize_single_flight(self):
        factory = CountingFactory(delay=0.05)
        session = make_session(factory)
        
        threads = [threading.Thread(target=session.initialize) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        
        self.assertEqual(factory.calls, 1)
    
    def test_backend_failure_leaves_no_state(self):
        session = make_session(CountingFactory(error=RuntimeError("bad model")))
        
        with self.assertRaises(ModelLoadError):
            session.initialize()
        self.assertEqual(session.state, SessionState.UNINITIALIZED)
        self.assertFalse(session.is_initialized)
    
    def test_missing_vocab_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = XlitConfig(model_dir=Path(tmp), verbose=False)
            session = Transliterator(config=config, backend_factory=CountingFactory())
            
            with self.assertRaises(ModelLoadError):
                session.initialize()
    
    def test_vocab_loaded_from_model_dir(self):
        with tempfile.TemporaryDirectory() as tmp:
            with open(Path(tmp) / "vocab.json", "w", encoding="utf-8") as f:
                json.dump(VOCAB_DATA, f, ensure_ascii=False)
            
            config = XlitConfig(model_dir=Path(tmp), verbose=False)
            session = Transliterator(config=config, backend_factory=CountingFactory())
            self.assertEqual(session.transliterate("amma", "ta", 1), [AMMA_TA])
    
    def test_malformed_vocab_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            (Path(tmp) / "vocab.json").write_text("{not json", encoding="utf-8")
            
            config = XlitConfig(model_dir=Path(tmp), verbose=False)
            session = Transliterator(config=config, backend_factory=CountingFactory())
            with self.assertRaises(ModelLoadError):
                session.initialize()
    
    def test_torchscript_files_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = XlitConfig(model_dir=Path(tmp), verbose=False)
            session = Transliterator(config=config, vocab=make_vocab())
            
            with self.assertRaises(ModelLoadError):
                session.initialize()
            self.assertFalse(session.is_initialized)
    
    def test_dispose(self):
        factory = CountingFactory()
        session = make_session(factory)
        session.initialize()
        
        session.dispose()
        session.dispose()
        
        self.assertTrue(factory.backends[0].closed)
        self.assertEqual(session.state, SessionState.DISPOSED)
        self.assertFalse(session.is_initialized)
    
    def test_reinitialize_after_dispose(self):
        factory = CountingFactory()
        session = make_session(factory)
        session.transliterate("amma", "ta", 1)
        session.dispose()
        
        self.assertEqual(session.transliterate("amma", "ta", 1), [AMMA_TA])
        self.assertEqual(factory.calls, 2)
    
    def test_dispose_during_request_fails_request(self):
        factory = CountingFactory()
        session = make_session(factory)
        model = session.initialize()
        
        calls = []
        
        def dispose_on_third_call(prev_ids):
            calls.append(prev_ids)
            if len(calls) == 3:
                session.dispose()
        
        model.backend.on_decode = dispose_on_third_call
        
        with self.assertRaises(DecodeError):
            session.transliterate("amma", "ta", 3)
    
    def test_dispose_during_dictionary_load_fails_request(self):
        store = FakeDictionaryStore({"ta": {AMMA_TA: 0.8}}, delay=0.3)
        session = make_session(store=store, rescore=True)
        session.initialize()
        
        outcome = {}
        
        def run():
            try:
                outcome["result"] = session.transliterate("amma", "ta", 3)
            except DecodeError as e:
                outcome["error"] = e
        
        worker = threading.Thread(target=run)
        worker.start()
        time.sleep(0.1)
        session.dispose()
        worker.join()
        
        self.assertNotIn("result", outcome)
        self.assertIsInstance(outcome.get("error"), DecodeError)
        self.assertEqual(session.state, SessionState.DISPOSED)
        
        # Nothing was cached, so the next request loads the dictionary again
        store.delay = 0.0
        self.assertEqual(session.transliterate("amma", "ta", 1), [AMMA_TA])
        self.assertEqual(store.load_calls, ["ta", "ta"])
    
    def test_context_manager_disposes(self):
        factory = CountingFactory()
        with make_session(factory) as session:
            session.transliterate("amma", "ta", 1)
        self.assertTrue(factory.backends[0].closed)


class TestDictionaryRescoring(unittest.TestCase):
    """Dictionary interpolation inside the pipeline."""
    
    def test_rescoring_prefers_dictionary_words(self):
        store = FakeDictionaryStore({"ta": {AMMA_TA: 0.8}})
        session = make_session(store=store, rescore=True)
        
        results = session.transliterate_scored("amma", "ta", 3)
        
        self.assertEqual(results[0].word, AMMA_TA)
        self.assertGreater(results[0].score, 0.0)
        for item in results[1:]:
            self.assertEqual(item.score, 0.0)
    
    def test_rescore_override(self):
        store = FakeDictionaryStore({"ta": {AMMA_TA: 0.8}})
        session = make_session(store=store, rescore=False)
        
        session.transliterate("amma", "ta", 2)
        self.assertEqual(store.load_calls, [])
        
        session.transliterate("amma", "ta", 2, rescore_with_dictionary=True)
        self.assertEqual(store.load_calls, ["ta"])
    
    def test_dictionary_cached(self):
        store = FakeDictionaryStore({"ta": {AMMA_TA: 0.8}})
        session = make_session(store=store, rescore=True)
        
        session.transliterate("amma", "ta", 2)
        session.transliterate("ammi", "ta", 2)
        self.assertEqual(store.load_calls, ["ta"])
    
    def test_auto_download(self):
        store = FakeDictionaryStore({"ta": {AMMA_TA: 0.8}}, present=[])
        session = make_session(store=store, rescore=True)
        
        self.assertFalse(session.has_dictionary("ta"))
        session.transliterate("amma", "ta", 2)
        
        self.assertEqual(store.download_calls, ["ta"])
        self.assertTrue(session.has_dictionary("ta"))
    
    def test_download_failure_is_dictionary_missing(self):
        store = FakeDictionaryStore(present=[], download_error=NetworkError("offline"))
        session = make_session(store=store, rescore=True)
        
        with self.assertRaises(DictionaryMissing):
            session.transliterate("amma", "ta", 2)
    
    def test_auto_download_disabled(self):
        store = FakeDictionaryStore(present=[])
        session = make_session(store=store, rescore=True, auto_download=False)
        
        with self.assertRaises(DictionaryMissing):
            session.transliterate("amma", "ta", 2)
        self.assertEqual(store.download_calls, [])
    
    def test_concurrent_dictionary_load_single_flight(self):
        store = FakeDictionaryStore({"ta": {AMMA_TA: 0.8}}, present=[], delay=0.05)
        session = make_session(store=store, rescore=True)
        
        results = []
        threads = [
            threading.Thread(target=lambda: results.append(session.get_dictionary("ta")))
            for _ in range(6)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        
        self.assertEqual(store.download_calls, ["ta"])
        self.assertEqual(store.load_calls, ["ta"])
        self.assertEqual(len(results), 6)
        self.assertTrue(all(r is results[0] for r in results))
    
    def test_download_dictionary(self):
        store = FakeDictionaryStore(present=[])
        session = make_session(store=store)
        
        progress = []
        session.download_dictionary("ta", on_progress=lambda d, t: progress.append((d, t)))
        
        self.assertTrue(session.has_dictionary("ta"))
        self.assertEqual(progress, [(10, 10)])
    
    def test_dispose_clears_dictionaries(self):
        store = FakeDictionaryStore({"ta": {AMMA_TA: 0.8}})
        session = make_session(store=store, rescore=True)
        
        session.transliterate("amma", "ta", 1)
        session.dispose()
        session.transliterate("amma", "ta", 1)
        
        self.assertEqual(store.load_calls, ["ta", "ta"])


if __name__ == '__main__':
    unittest.main()
