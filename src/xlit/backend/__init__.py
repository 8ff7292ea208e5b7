"""Model backends: the encoder/decoder forward pass used by beam search."""

from .base import ModelBackend
from .torchscript import TorchScriptBackend

__all__ = ["ModelBackend", "TorchScriptBackend"]
