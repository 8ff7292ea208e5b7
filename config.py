"""Configuration settings for the Transliteration service."""

import os
from pathlib import Path

from src.xlit.config import (
    DEFAULT_DICTIONARY_URL,
    DecodingConfig,
    RescoringConfig,
    XlitConfig,
)

# Base paths
BASE_DIR = Path(__file__).parent
MODELS_DIR = BASE_DIR / "models"
XLIT_MODEL_DIR = MODELS_DIR / "xlit"
DICTIONARIES_DIR = XLIT_MODEL_DIR / "dictionaries"

# Model files (inside XLIT_MODEL_DIR)
VOCAB_FILE = "vocab.json"
ENCODER_FILE = "xlit_encoder.pt"
DECODER_FILE = "xlit_decoder.pt"
DEVICE = os.environ.get("XLIT_DEVICE", "cpu")  # Options: cpu, cuda

# Beam search settings
BEAM_WIDTH = 4
MAX_OUTPUT_LENGTH = 20  # Characters (target tokens)
DEFAULT_COUNT = 5
DECODE_TIMEOUT = None  # Seconds per request, None = unbounded

# Dictionary rescoring
RESCORE = os.environ.get("XLIT_RESCORE", "0") == "1"
RESCORE_ALPHA = 0.9
DICTIONARY_URL = os.environ.get("XLIT_DICTIONARY_URL", DEFAULT_DICTIONARY_URL)
MAX_REDIRECTS = 5

DEFAULT_TARGET_LANGUAGE = "hi"

# Create directories if they don't exist
os.makedirs(DICTIONARIES_DIR, exist_ok=True)


def build_xlit_config(verbose: bool = True) -> XlitConfig:
    """Session configuration from the settings above."""
    return XlitConfig(
        decoding=DecodingConfig(
            beam_width=BEAM_WIDTH,
            max_length=MAX_OUTPUT_LENGTH,
            timeout=DECODE_TIMEOUT,
        ),
        rescoring=RescoringConfig(
            enabled=RESCORE,
            alpha=RESCORE_ALPHA,
            archive_url=DICTIONARY_URL,
            max_redirects=MAX_REDIRECTS,
        ),
        model_dir=XLIT_MODEL_DIR,
        dictionary_dir=DICTIONARIES_DIR,
        vocab_file=VOCAB_FILE,
        encoder_file=ENCODER_FILE,
        decoder_file=DECODER_FILE,
        device=DEVICE,
        verbose=verbose,
    )
