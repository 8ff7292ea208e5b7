"""
Transliteration Configuration Module.

Defines decoding, rescoring and path settings for the transliteration
system. Uses dataclasses for type safety and easy serialization.
"""

from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional
import json


DEFAULT_DICTIONARY_URL = (
    "https://github.com/AI4Bharat/IndicXlit/releases/download/v1.0/word_prob_dicts.zip"
)


@dataclass
class DecodingConfig:
    """Beam search settings.
    
    The effective beam width of a request is max(beam_width, count) so that
    asking for more candidates never starves the beam.
    """
    
    beam_width: int = 4
    max_length: int = 20        # Decoding steps (output tokens)
    min_length: int = 1         # EOS is masked until this many tokens are emitted
    
    # Exponent of the GNMT length penalty ((5 + len) / 6) ** alpha
    length_penalty: float = 1.0
    
    # Wall-clock budget for one request in seconds (None = unbounded)
    timeout: Optional[float] = None
    
    def __post_init__(self):
        """Validate configuration."""
        assert self.beam_width >= 1, \
            f"beam_width ({self.beam_width}) must be >= 1"
        assert self.max_length >= 1, \
            f"max_length ({self.max_length}) must be >= 1"
        assert 0 <= self.min_length <= self.max_length, \
            f"min_length ({self.min_length}) must be in [0, max_length]"
        assert self.timeout is None or self.timeout > 0, \
            f"timeout ({self.timeout}) must be positive"


@dataclass
class RescoringConfig:
    """Dictionary interpolation settings."""
    
    enabled: bool = False
    
    # Weight of the model probability; (1 - alpha) goes to the dictionary
    alpha: float = 0.9
    
    # Fetch the dictionary archive when a language's table is absent
    auto_download: bool = True
    archive_url: str = DEFAULT_DICTIONARY_URL
    max_redirects: int = 5
    timeout: float = 60.0       # Per HTTP read, seconds
    
    def __post_init__(self):
        """Validate configuration."""
        assert 0.0 <= self.alpha <= 1.0, \
            f"alpha ({self.alpha}) must be in [0, 1]"
        assert self.max_redirects >= 0, \
            f"max_redirects ({self.max_redirects}) must be >= 0"


@dataclass
class XlitConfig:
    """Complete transliteration session configuration."""
    
    decoding: DecodingConfig = field(default_factory=DecodingConfig)
    rescoring: RescoringConfig = field(default_factory=RescoringConfig)
    
    # Paths
    model_dir: Path = Path("models/xlit")
    dictionary_dir: Path = Path("models/xlit/dictionaries")
    vocab_file: str = "vocab.json"
    encoder_file: str = "xlit_encoder.pt"
    decoder_file: str = "xlit_decoder.pt"
    
    device: str = "cpu"
    verbose: bool = True
    
    def __post_init__(self):
        self.model_dir = Path(self.model_dir)
        self.dictionary_dir = Path(self.dictionary_dir)
    
    @property
    def vocab_path(self) -> Path:
        return self.model_dir / self.vocab_file
    
    @property
    def encoder_path(self) -> Path:
        return self.model_dir / self.encoder_file
    
    @property
    def decoder_path(self) -> Path:
        return self.model_dir / self.decoder_file
    
    def save(self, path: Path):
        """Save configuration to JSON file."""
        config_dict = {
            "decoding": asdict(self.decoding),
            "rescoring": asdict(self.rescoring),
            "model_dir": str(self.model_dir),
            "dictionary_dir": str(self.dictionary_dir),
            "vocab_file": self.vocab_file,
            "encoder_file": self.encoder_file,
            "decoder_file": self.decoder_file,
            "device": self.device,
            "verbose": self.verbose,
        }
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config_dict, f, indent=2, ensure_ascii=False)
    
    @classmethod
    def load(cls, path: Path) -> "XlitConfig":
        """Load configuration from JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            config_dict = json.load(f)
        
        defaults = cls()
        return cls(
            decoding=DecodingConfig(**config_dict.get("decoding", {})),
            rescoring=RescoringConfig(**config_dict.get("rescoring", {})),
            model_dir=Path(config_dict.get("model_dir", defaults.model_dir)),
            dictionary_dir=Path(config_dict.get("dictionary_dir", defaults.dictionary_dir)),
            vocab_file=config_dict.get("vocab_file", defaults.vocab_file),
            encoder_file=config_dict.get("encoder_file", defaults.encoder_file),
            decoder_file=config_dict.get("decoder_file", defaults.decoder_file),
            device=config_dict.get("device", defaults.device),
            verbose=config_dict.get("verbose", defaults.verbose),
        )


def get_default_config() -> XlitConfig:
    """Default configuration: beam 4, no dictionary rescoring."""
    return XlitConfig()


def get_rescoring_config() -> XlitConfig:
    """Wider beam with dictionary rescoring enabled."""
    config = XlitConfig()
    config.decoding.beam_width = 10
    config.rescoring.enabled = True
    return config


def get_fast_config() -> XlitConfig:
    """Narrow beam and short outputs for quick interactive use."""
    config = XlitConfig()
    config.decoding.beam_width = 2
    config.decoding.max_length = 16
    config.verbose = False
    return config
