"""
Beam Search Decoding for Transliteration.

Beam search over a black-box decoder with:
- Length normalization (Wu et al., 2016)
- Minimum output length (EOS masked on the first step)
- Early stopping once the finished pool cannot be beaten

Each beam is decoded with its own backend call; beams never share token
buffers, so candidates are immutable and extension builds a new tuple.
"""

import time
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import torch
import torch.nn.functional as F

from ..backend.base import ModelBackend
from ..errors import DecodeError
from .scoring import length_norm, normalized_score, rank_candidates


# Extra tokens assumed for an unfinished beam when checking early stopping
LOOKAHEAD_TOKENS = 3


@dataclass(frozen=True)
class BeamCandidate:
    """A single beam hypothesis.
    
    tokens always starts with the EOS id used as start marker.
    """
    score: float
    tokens: Tuple[int, ...]
    finished: bool = False
    
    def __len__(self):
        return len(self.tokens)
    
    def extend(self, token_id: int, log_prob: float, eos_id: int) -> "BeamCandidate":
        return BeamCandidate(
            score=self.score + log_prob,
            tokens=self.tokens + (token_id,),
            finished=token_id == eos_id,
        )


class BeamSearchDecoder:
    """Beam search decoder with length normalization.
    
    Args:
        backend: Model backend providing encode/decode_step.
        vocab_size: Target vocabulary size.
        eos_id: End of sequence token ID (also the start marker).
        beam_size: Number of beams to keep per step.
        max_length: Maximum number of decoding steps.
        min_length: EOS is masked until this many tokens are emitted.
        length_penalty: Length normalization exponent (α).
        timeout: Seconds allowed for the whole decode (None = unbounded).
    """
    
    def __init__(
        self,
        backend: ModelBackend,
        vocab_size: int,
        eos_id: int,
        beam_size: int = 4,
        max_length: int = 20,
        min_length: int = 1,
        length_penalty: float = 1.0,
        timeout: Optional[float] = None
    ):
        self.backend = backend
        self.vocab_size = vocab_size
        self.eos_id = eos_id
        self.beam_size = beam_size
        self.max_length = max_length
        self.min_length = min_length
        self.length_penalty = length_penalty
        self.timeout = timeout
        
        self._deadline: Optional[float] = None
    
    def _check_deadline(self):
        if self._deadline is not None and time.monotonic() > self._deadline:
            raise DecodeError(f"Decoding exceeded timeout of {self.timeout}s")
    
    def _encode(self, src_ids: Sequence[int]) -> Any:
        self._check_deadline()
        try:
            return self.backend.encode(src_ids)
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"Encoder failed: {e}") from e
    
    def step_log_probs(self, beam: BeamCandidate, encoder_state: Any) -> torch.Tensor:
        """Log-probabilities of the next token for one beam.
        
        Args:
            beam: Unfinished beam.
            encoder_state: Output of the backend encoder.
        
        Returns:
            Float64 tensor of shape (vocab_size,).
        """
        self._check_deadline()
        try:
            output = self.backend.decode_step(list(beam.tokens), encoder_state)
            logits = torch.as_tensor(output, dtype=torch.float64).reshape(-1)
        except DecodeError:
            raise
        except Exception as e:
            raise DecodeError(f"Decoder failed: {e}") from e
        
        # Logits for the last position
        offset = (len(beam.tokens) - 1) * self.vocab_size
        if logits.numel() < offset + self.vocab_size:
            raise DecodeError(
                f"Decoder returned {logits.numel()} values, expected at least "
                f"{offset + self.vocab_size}"
            )
        logits = logits[offset:offset + self.vocab_size].clone()
        
        if len(beam.tokens) - 1 < self.min_length:
            logits[self.eos_id] = float('-inf')
        
        log_probs = F.log_softmax(logits, dim=-1)
        
        # NaN logits, or nothing left with finite probability
        if torch.isnan(log_probs).any():
            raise DecodeError("Decoder output gave NaN log-probabilities")
        
        return log_probs
    
    def should_stop(
        self,
        beams: List[BeamCandidate],
        finished: List[BeamCandidate]
    ) -> bool:
        """Early stopping check.
        
        Once at least beam_size hypotheses are finished, stop when the best
        active beam (scored as if LOOKAHEAD_TOKENS more tokens followed)
        cannot beat the worst finished hypothesis.
        
        Args:
            beams: Active beams sorted by score, best first.
            finished: Finished hypotheses.
        """
        if not beams:
            return True
        if len(finished) < self.beam_size:
            return False
        
        best_alive = beams[0]
        best_alive_score = best_alive.score / length_norm(
            len(best_alive.tokens) - 1 + LOOKAHEAD_TOKENS, self.length_penalty
        )
        worst_finished = min(
            normalized_score(h.score, len(h.tokens), self.length_penalty)
            for h in finished
        )
        return best_alive_score <= worst_finished
    
    def decode(self, src_ids: Sequence[int]) -> List[BeamCandidate]:
        """Beam search decoding.
        
        Args:
            src_ids: Source token IDs (language tag, characters, EOS).
        
        Returns:
            Every finished hypothesis plus the beams still active when the
            search ended, in discovery order.
        """
        self._deadline = (
            time.monotonic() + self.timeout if self.timeout is not None else None
        )
        
        encoder_state = self._encode(src_ids)
        
        beams = [BeamCandidate(score=0.0, tokens=(self.eos_id,))]
        finished: List[BeamCandidate] = []
        n_expand = 2 * self.beam_size
        
        for _ in range(self.max_length):
            candidates: List[BeamCandidate] = []
            
            for beam in beams:
                if beam.finished:
                    continue
                
                log_probs = self.step_log_probs(beam, encoder_state)
                
                # Stable sort: equal log-probs keep vocabulary order
                top_scores, top_ids = torch.sort(log_probs, descending=True, stable=True)
                
                for log_prob, token_id in zip(
                    top_scores[:n_expand].tolist(), top_ids[:n_expand].tolist()
                ):
                    if log_prob == float('-inf'):
                        break
                    
                    hyp = beam.extend(token_id, log_prob, self.eos_id)
                    if hyp.finished:
                        finished.append(hyp)
                    else:
                        candidates.append(hyp)
            
            candidates.sort(key=lambda h: h.score, reverse=True)
            beams = candidates[:self.beam_size]
            
            if self.should_stop(beams, finished):
                break
        
        # Add remaining alive sequences
        finished.extend(beam for beam in beams if not beam.finished)
        return finished
    
    def decode_ranked(self, src_ids: Sequence[int]) -> List[Tuple[float, BeamCandidate]]:
        """Decode and sort hypotheses by length-normalized score."""
        return rank_candidates(self.decode(src_ids), self.length_penalty)


def beam_search(
    backend: ModelBackend,
    src_ids: Sequence[int],
    vocab_size: int,
    eos_id: int,
    beam_size: int = 4,
    max_length: int = 20,
    length_penalty: float = 1.0
) -> Tuple[int, ...]:
    """Simple beam search decoding.
    
    Convenience function that returns only the best hypothesis.
    
    Args:
        backend: Model backend.
        src_ids: Source token IDs.
        vocab_size: Target vocabulary size.
        eos_id: EOS token ID.
        beam_size: Number of beams.
        max_length: Maximum output length.
        length_penalty: Length normalization factor.
    
    Returns:
        Token IDs of the best hypothesis, start marker included.
    """
    decoder = BeamSearchDecoder(
        backend=backend,
        vocab_size=vocab_size,
        eos_id=eos_id,
        beam_size=beam_size,
        max_length=max_length,
        length_penalty=length_penalty
    )
    
    ranked = decoder.decode_ranked(src_ids)
    return ranked[0][1].tokens
