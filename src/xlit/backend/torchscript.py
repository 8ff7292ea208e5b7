"""
TorchScript Model Backend.

Loads a scripted encoder and decoder exported from the trained
transliteration model:

    encoder(src_tokens: LongTensor[1, src_len]) -> encoder_out
    decoder(prev_tokens: LongTensor[1, tgt_len], encoder_out) -> logits[1, tgt_len, vocab]
"""

from pathlib import Path
from typing import Any, Optional, Sequence, Union

import torch

from ..errors import DecodeError, ModelLoadError
from .base import ModelBackend


class TorchScriptBackend(ModelBackend):
    """Backend running TorchScript encoder/decoder modules.
    
    Args:
        encoder: Scripted encoder module.
        decoder: Scripted decoder module.
        device: Device for inference.
    """
    
    def __init__(self, encoder, decoder, device: Optional[torch.device] = None):
        self.device = device or torch.device('cpu')
        self.encoder = encoder
        self.decoder = decoder
        
        self.encoder.eval()
        self.decoder.eval()
    
    @property
    def is_open(self) -> bool:
        return self.encoder is not None and self.decoder is not None
    
    def _check_open(self):
        if not self.is_open:
            raise DecodeError("Model backend has been released")
    
    @torch.no_grad()
    def encode(self, src_ids: Sequence[int]) -> Any:
        self._check_open()
        src = torch.tensor([list(src_ids)], dtype=torch.long, device=self.device)
        return self.encoder(src)
    
    @torch.no_grad()
    def decode_step(self, prev_ids: Sequence[int], encoder_state: Any) -> torch.Tensor:
        self._check_open()
        prev = torch.tensor([list(prev_ids)], dtype=torch.long, device=self.device)
        logits = self.decoder(prev, encoder_state)
        return logits.reshape(-1).float().cpu()
    
    def close(self) -> None:
        self.encoder = None
        self.decoder = None
    
    @classmethod
    def from_files(
        cls,
        encoder_path: Union[str, Path],
        decoder_path: Union[str, Path],
        device: Optional[Union[str, torch.device]] = None
    ) -> "TorchScriptBackend":
        """Load both modules; either both load or a ModelLoadError is raised.
        
        Args:
            encoder_path: Path to the scripted encoder (.pt).
            decoder_path: Path to the scripted decoder (.pt).
            device: Device for inference (default CPU).
        
        Returns:
            Ready backend.
        """
        encoder_path = Path(encoder_path)
        decoder_path = Path(decoder_path)
        
        for path in (encoder_path, decoder_path):
            if not path.exists():
                raise ModelLoadError(f"Model file not found at {path}")
        
        device = torch.device(device) if device is not None else torch.device('cpu')
        
        try:
            encoder = torch.jit.load(str(encoder_path), map_location=device)
            decoder = torch.jit.load(str(decoder_path), map_location=device)
        except Exception as e:
            raise ModelLoadError(f"Failed to load transliteration models: {e}") from e
        
        return cls(encoder, decoder, device=device)
