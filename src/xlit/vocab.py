"""
Character Vocabulary for the Transliteration Model.

Source and target tokens are stored as ordered lists where the list index
is the token id. The file format is a JSON object:

    {
        "src": ["<s>", "<pad>", "</s>", "<unk>", "__hi__", "a", ...],
        "tgt": ["<s>", "<pad>", "</s>", "<unk>", "अ", ...],
        "special_tokens": {"unk": 3, "pad": 1, "bos": 0, "eos": 2}
    }

The EOS id doubles as the decoder start marker.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple, Union
import json

from .languages import SOURCE_LANGUAGE, parse_language_tag


@dataclass(frozen=True)
class SpecialTokens:
    """Reserved token ids shared by source and target vocabularies."""
    unk: int
    pad: int
    bos: int
    eos: int


@dataclass(frozen=True)
class Vocabulary:
    """Immutable token <-> id lookup.
    
    Args:
        src_tokens: Source tokens; index is the token id.
        tgt_tokens: Target tokens; index is the token id.
        special_tokens: Reserved ids (unk, pad, bos, eos).
    """
    src_tokens: Tuple[str, ...]
    tgt_tokens: Tuple[str, ...]
    special_tokens: SpecialTokens
    src_index: Dict[str, int] = field(init=False, repr=False, compare=False)
    
    def __post_init__(self):
        object.__setattr__(self, "src_tokens", tuple(self.src_tokens))
        object.__setattr__(self, "tgt_tokens", tuple(self.tgt_tokens))
        
        # First occurrence wins for duplicated tokens
        index: Dict[str, int] = {}
        for i, token in enumerate(self.src_tokens):
            index.setdefault(token, i)
        object.__setattr__(self, "src_index", index)
        
        specials = self.special_tokens
        for name in ("unk", "pad", "bos", "eos"):
            token_id = getattr(specials, name)
            if not 0 <= token_id < len(self.tgt_tokens):
                raise ValueError(
                    f"Special token '{name}' id {token_id} outside target "
                    f"vocabulary of size {len(self.tgt_tokens)}"
                )
    
    @property
    def src_size(self) -> int:
        return len(self.src_tokens)
    
    @property
    def tgt_size(self) -> int:
        return len(self.tgt_tokens)
    
    @property
    def unk_id(self) -> int:
        return self.special_tokens.unk
    
    @property
    def pad_id(self) -> int:
        return self.special_tokens.pad
    
    @property
    def bos_id(self) -> int:
        return self.special_tokens.bos
    
    @property
    def eos_id(self) -> int:
        return self.special_tokens.eos
    
    def src_id(self, token: str) -> int:
        """Map a source token to its id, or the UNK id."""
        return self.src_index.get(token, self.special_tokens.unk)
    
    def tgt_token(self, token_id: int):
        """Map a target id to its token, or None if out of range."""
        if 0 <= token_id < len(self.tgt_tokens):
            return self.tgt_tokens[token_id]
        return None
    
    def has_src_token(self, token: str) -> bool:
        return token in self.src_index
    
    def language_codes(self) -> List[str]:
        """Language codes of every '__xx__' source tag, excluding English."""
        codes = []
        for token in self.src_tokens:
            code = parse_language_tag(token)
            if code is not None and code != SOURCE_LANGUAGE:
                codes.append(code)
        return codes
    
    @classmethod
    def from_dict(cls, data: dict) -> "Vocabulary":
        """Build a vocabulary from the parsed JSON object.
        
        Raises:
            ValueError: If required keys are missing or malformed.
        """
        try:
            src = data["src"]
            tgt = data["tgt"]
            special = data["special_tokens"]
            specials = SpecialTokens(
                unk=int(special["unk"]),
                pad=int(special["pad"]),
                bos=int(special["bos"]),
                eos=int(special["eos"]),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed vocabulary: {e}") from e
        
        if not all(isinstance(t, str) for t in src) or not all(isinstance(t, str) for t in tgt):
            raise ValueError("Malformed vocabulary: tokens must be strings")
        
        return cls(src_tokens=tuple(src), tgt_tokens=tuple(tgt), special_tokens=specials)
    
    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Vocabulary":
        """Load a vocabulary JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)
    
    def to_dict(self) -> dict:
        return {
            "src": list(self.src_tokens),
            "tgt": list(self.tgt_tokens),
            "special_tokens": {
                "unk": self.special_tokens.unk,
                "pad": self.special_tokens.pad,
                "bos": self.special_tokens.bos,
                "eos": self.special_tokens.eos,
            },
        }
