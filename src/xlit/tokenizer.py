"""
Character Tokenizer for Transliteration.

Words are split into single characters and prefixed with a target
language tag (e.g. '__ta__'):

    "amma", "ta"  ->  ['__ta__', 'a', 'm', 'm', 'a'] + EOS

Decoding maps target ids back to script characters, stopping at the first
EOS and dropping special tokens.
"""

from typing import List, Sequence

from .errors import UnsupportedDirection, UnsupportedLanguage
from .languages import SOURCE_LANGUAGE, get_language_tag
from .vocab import Vocabulary


class Tokenizer:
    """Character-level tokenizer backed by a Vocabulary.
    
    Args:
        vocab: Loaded vocabulary (shared, read-only).
    """
    
    def __init__(self, vocab: Vocabulary):
        self.vocab = vocab
        
        self.unk_id = vocab.unk_id
        self.pad_id = vocab.pad_id
        self.bos_id = vocab.bos_id
        self.eos_id = vocab.eos_id
    
    @property
    def vocab_size(self) -> int:
        """Return target vocabulary size."""
        return self.vocab.tgt_size
    
    def supported_languages(self) -> List[str]:
        """Language codes tagged in the source vocabulary (English excluded)."""
        return self.vocab.language_codes()
    
    def check_language(self, lang_code: str) -> str:
        """Return the language tag for lang_code.
        
        Raises:
            UnsupportedDirection: If lang_code is English.
            UnsupportedLanguage: If the tag is absent from the vocabulary.
        """
        if lang_code == SOURCE_LANGUAGE:
            raise UnsupportedDirection(
                "Cannot transliterate to English. This library transliterates "
                "FROM romanized English TO Indic scripts."
            )
        
        tag = get_language_tag(lang_code)
        if not self.vocab.has_src_token(tag):
            raise UnsupportedLanguage(lang_code, self.supported_languages())
        return tag
    
    def encode(self, word: str, lang_code: str) -> List[int]:
        """Encode a word to source token IDs.
        
        Args:
            word: Romanized input word.
            lang_code: Target language code.
        
        Returns:
            [language tag, one id per character, EOS].
        """
        tag = self.check_language(lang_code)
        
        chars = " ".join(word.lower())
        tokens = f"{tag} {chars}".split(" ")
        
        ids = [self.vocab.src_id(token) for token in tokens]
        ids.append(self.eos_id)
        return ids
    
    def decode(self, ids: Sequence[int]) -> str:
        """Decode target token IDs to a word.
        
        The first id is the decoder start marker and is always skipped.
        
        Args:
            ids: Target token IDs as produced by beam search.
        
        Returns:
            Word in the target script with spaces removed.
        """
        skip_ids = {self.bos_id, self.pad_id, self.unk_id}
        pieces = []
        
        for token_id in list(ids)[1:]:
            if token_id == self.eos_id:
                break
            if token_id in skip_ids:
                continue
            
            token = self.vocab.tgt_token(token_id)
            if token:
                pieces.append(token)
        
        return "".join(pieces).replace(" ", "")
    
    def decode_batch(self, batch_ids: Sequence[Sequence[int]]) -> List[str]:
        """Batch decode target token ID sequences."""
        return [self.decode(ids) for ids in batch_ids]
