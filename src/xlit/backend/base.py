"""
Model Backend Interface.

Beam search treats the neural model as a black box with two calls:

    encode(src_ids)                    -> encoder state (opaque)
    decode_step(prev_ids, enc_state)   -> logits of shape (len(prev_ids), vocab)

decode_step may return any array-like that flattens to
len(prev_ids) * vocab_size floats (torch tensor, numpy array, list).
"""

from abc import ABC, abstractmethod
from typing import Any, Sequence


class ModelBackend(ABC):
    """Encoder/decoder forward pass."""
    
    @abstractmethod
    def encode(self, src_ids: Sequence[int]) -> Any:
        """Run the encoder once over the source token ids."""
    
    @abstractmethod
    def decode_step(self, prev_ids: Sequence[int], encoder_state: Any) -> Any:
        """Run the decoder over prev_ids and return per-position logits."""
    
    def close(self) -> None:
        """Release model handles. Later calls must fail."""
